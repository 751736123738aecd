"""
Append-only completion log.

Every completion call is recorded as one JSON object per line (JSON Lines).
Records are never rewritten; the file only grows. Appends take a lock file
next to the log, so several processes can share one log without reusing ids.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, Optional, Protocol

from filelock import FileLock, Timeout
from pydantic import ValidationError

from quizgen.schemas.completion_schema import CompletionLogEntry

logger = logging.getLogger(__name__)

# 같은 프로세스 안의 스케줄러 스레드와 요청 스레드가 동시에 쓰는 경우를 막는다.
_WRITE_LOCK = threading.Lock()

_TAIL_BLOCK = 8192
_LOCK_TIMEOUT_SECONDS = 30


class CompletionLogSink(Protocol):
    def append(self, **fields) -> CompletionLogEntry | None: ...


class JsonlCompletionLog:
    def __init__(
        self,
        path: str | Path,
        entry_type: str = "metadata_generation",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path)
        self.entry_type = entry_type
        self.clock = clock
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    def append(self, **fields) -> CompletionLogEntry | None:
        """Append one record and return it; write errors are logged, not raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with _WRITE_LOCK, FileLock(str(self.lock_path), timeout=_LOCK_TIMEOUT_SECONDS):
                entry = CompletionLogEntry(
                    id=self._last_id() + 1,
                    created=fields.pop("created", None) or self._now(),
                    type=fields.pop("type", None) or self.entry_type,
                    **fields,
                )
                line = json.dumps(entry.model_dump(), ensure_ascii=False)
                with self.path.open("a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
                    fh.flush()
            return entry
        except (OSError, Timeout, ValidationError) as exc:
            logger.error("Error writing completion log entry to %s: %s", self.path, exc)
            return None

    def read_all(self) -> list[CompletionLogEntry]:
        return list(self._iter_entries())

    def read_recent(self, limit: int = 10) -> list[CompletionLogEntry]:
        if limit <= 0:
            return []
        return self.read_all()[-limit:]

    def count(self) -> int:
        return sum(1 for _ in self._iter_entries())

    def _now(self) -> str:
        return datetime.fromtimestamp(self.clock(), timezone.utc).isoformat()

    def _last_id(self) -> int:
        """Id of the last readable record, reading the file backwards block by block."""
        if not self.path.exists():
            return 0
        with self.path.open("rb") as fh:
            fh.seek(0, os.SEEK_END)
            pos = fh.tell()
            partial = b""
            while pos > 0:
                step = min(_TAIL_BLOCK, pos)
                pos -= step
                fh.seek(pos)
                lines = (fh.read(step) + partial).split(b"\n")
                # 맨 앞 조각은 줄 중간일 수 있으니 다음 블록과 합친다.
                partial = lines.pop(0) if pos > 0 else b""
                for raw in reversed(lines):
                    entry_id = self._parse_id(raw)
                    if entry_id is not None:
                        return entry_id
        return 0

    def _parse_id(self, raw: bytes) -> Optional[int]:
        raw = raw.strip()
        if not raw:
            return None
        try:
            return CompletionLogEntry.model_validate_json(raw).id
        except ValidationError as exc:
            logger.warning("Skipping malformed completion log line in %s: %s", self.path, exc)
            return None

    def _iter_entries(self) -> Iterator[CompletionLogEntry]:
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield CompletionLogEntry.model_validate_json(line)
                except ValidationError as exc:
                    logger.warning("Skipping malformed completion log line %s:%s: %s", self.path, lineno, exc)

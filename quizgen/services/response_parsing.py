import re
from typing import Optional

_FENCE_OPEN = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*")
_EDGE_QUOTES = re.compile(r"^[\"'`]+|[\"'`]+$", re.MULTILINE)
_PROMPT_LINE = re.compile(r"^PROMPT:\s*(.+)$", re.IGNORECASE)
_TITLE_LINE = re.compile(r"^TITLE:\s*(.+)$", re.IGNORECASE)


def clean_json_response(text: str) -> str:
    """
    Strip Markdown code fences and keep only the first JSON object.

    모델이 지시를 무시하고 객체를 여러 개 붙여 보내는 경우가 있어서
    첫 번째 균형 잡힌 {...} 만 잘라낸다.
    """
    cleaned = _FENCE_OPEN.sub("", text or "")
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    cleaned = cleaned.strip().strip("`")

    if cleaned.count("{") > 1:
        first = extract_first_object(cleaned)
        if first is not None:
            cleaned = first
    return cleaned.strip()


def extract_first_object(text: str) -> Optional[str]:
    start = text.find("{")
    if start < 0:
        return None
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def strip_quotes(text: str) -> str:
    """Trim, then drop leading/trailing quote and backtick runs on every line."""
    cleaned = (text or "").strip()
    cleaned = _EDGE_QUOTES.sub("", cleaned)
    return cleaned.strip()


def parse_prompt_and_title(text: str) -> tuple[Optional[str], Optional[str]]:
    """Read ``PROMPT: ...`` and ``TITLE: ...`` lines; missing values come back as None."""
    prompt: Optional[str] = None
    title: Optional[str] = None
    for raw_line in (text or "").splitlines():
        line = raw_line.strip()
        match = _PROMPT_LINE.match(line)
        if match:
            prompt = strip_quotes(match.group(1)) or None
            continue
        match = _TITLE_LINE.match(line)
        if match:
            title = strip_quotes(match.group(1)) or None
    return prompt, title

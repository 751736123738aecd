import json
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from quizgen.clients.completion_client import CompletionClient, CompletionClientError
from quizgen.core.config import PipelineConfig
from quizgen.schemas.quiz_schema import BaseMetadata, QuizContent, QuizMetadata, TaxonomyTerm
from quizgen.services import prompts
from quizgen.services.response_parsing import clean_json_response, parse_prompt_and_title, strip_quotes
from quizgen.services.taxonomy import (
    TAXONOMY_FIELDS,
    fallback_base_metadata,
    is_valid_term_id,
    preselect,
)


class QuizGenerationError(Exception):
    """Raised when quiz metadata cannot be generated."""


class QuizParseError(QuizGenerationError):
    """Raised when a response that must be JSON is not."""


class QuizSchemaError(QuizGenerationError):
    """Raised when parsed metadata has the wrong shape or out-of-range ids."""


class EmptyContentError(QuizGenerationError):
    """Raised when a cleaned text response is empty."""


def _coerce_term_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


@dataclass
class QuizMetadataService:
    """
    세 단계로 퀴즈 메타데이터를 만든다.

    1) 분류(subject/education_level/difficulty는 로컬 선택, cognitive_goal은 모델 선택)
    2) 분류에 맞는 주제
    3) 주제로부터 퀴즈 프롬프트와 제목
    """

    llm_client: CompletionClient
    config: PipelineConfig = field(default_factory=PipelineConfig)
    clock: Callable[[], float] = time.time
    rng: random.Random = field(default_factory=random.Random)
    logger: logging.Logger = logging.getLogger(__name__)

    def generate_quiz_metadata(self) -> Optional[QuizMetadata]:
        """Run the whole pipeline; None when any stage fails."""
        try:
            return self.generate()
        except CompletionClientError as exc:
            self.logger.error("Quiz metadata generation aborted, completion call failed: %s", exc)
        except QuizGenerationError as exc:
            self.logger.error("Quiz metadata generation aborted: %s", exc)
        return None

    def generate(self) -> QuizMetadata:
        base = self.generate_base_metadata()
        topic = self.generate_topic(base)
        content = self.generate_prompt_and_title(topic, base)

        metadata = QuizMetadata(**base.model_dump(), title=content.title, prompt=content.prompt)
        self.logger.info(
            "Successfully generated complete quiz metadata for topic: %s",
            topic[:100] + ("..." if len(topic) > 100 else ""),
        )
        return metadata

    def generate_base_metadata(self) -> BaseMetadata:
        level, subject, difficulty = preselect(self.rng)
        raw = self._complete(prompts.build_base_metadata_prompt(subject, level, difficulty))
        cleaned = clean_json_response(raw)

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            self.logger.error(
                "Failed to parse base metadata response as JSON: %s | raw=%r cleaned=%r", exc, raw, cleaned
            )
            raise QuizParseError(f"base metadata response is not JSON: {exc}") from exc
        if not isinstance(data, dict):
            # 객체가 아니면 필드가 모두 없는 것과 같다.
            fallback = fallback_base_metadata(self.clock())
            self.logger.warning(
                "Base metadata response is not a JSON object (%s); using fallback %s",
                type(data).__name__,
                fallback.model_dump_json(),
            )
            return fallback

        self.logger.info("Parsed base metadata from AI: %s", json.dumps(data, ensure_ascii=False))

        missing = [name for name in TAXONOMY_FIELDS if not data.get(name)]
        if missing:
            fallback = fallback_base_metadata(self.clock())
            self.logger.warning(
                "Missing fields %s in base metadata response (available: %s); using fallback %s",
                ", ".join(missing),
                ", ".join(data.keys()),
                fallback.model_dump_json(),
            )
            return fallback

        # 필드는 있는데 모양이나 id가 틀린 경우는 fallback 없이 실패시킨다.
        terms: dict[str, TaxonomyTerm] = {}
        for name in TAXONOMY_FIELDS:
            value = data[name]
            if not isinstance(value, dict) or "id" not in value or "label" not in value:
                self._schema_failure(f"invalid taxonomy field {name} structure, expected id and label", raw, cleaned)
            term_id = _coerce_term_id(value["id"])
            if term_id is None or not isinstance(value["label"], str):
                self._schema_failure(f"invalid taxonomy field {name} values: {value!r}", raw, cleaned)
            if not is_valid_term_id(name, term_id):
                self._schema_failure(f"invalid term id {term_id} for field {name}", raw, cleaned)
            terms[name] = TaxonomyTerm(id=term_id, label=value["label"])

        base = BaseMetadata(**terms)
        preselected = {"subject": subject, "education_level": level, "difficulty": difficulty}
        changed = [name for name, term in preselected.items() if getattr(base, name).id != term.id]
        if changed:
            self.logger.warning("Model changed preselected fields: %s", ", ".join(changed))
        return base

    def generate_topic(self, base: BaseMetadata) -> str:
        raw = self._complete(prompts.build_topic_prompt(base))
        topic = strip_quotes(raw)
        if not topic:
            self.logger.error("Empty quiz topic generated | raw=%r", raw)
            raise EmptyContentError("empty quiz topic")
        return topic

    def generate_prompt_and_title(self, topic: str, base: BaseMetadata) -> QuizContent:
        raw = self._complete(prompts.build_prompt_and_title_prompt(topic, base))
        quiz_prompt, title = parse_prompt_and_title(raw)
        if not quiz_prompt or not title:
            self.logger.error(
                "Missing quiz prompt or title for topic %r | prompt=%r title=%r raw=%r",
                topic,
                quiz_prompt,
                title,
                raw,
            )
            raise EmptyContentError("quiz prompt or title missing from response")
        return QuizContent(prompt=quiz_prompt, title=title)

    def _complete(self, prompt: str) -> str:
        result = self.llm_client.complete(
            prompt,
            provider=self.config.provider_id,
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            timeout_seconds=self.config.timeout,
        )
        return result.text

    def _schema_failure(self, message: str, raw: str, cleaned: str) -> None:
        self.logger.error("%s | raw=%r cleaned=%r", message, raw, cleaned)
        raise QuizSchemaError(message)

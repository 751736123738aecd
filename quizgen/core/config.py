from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class PipelineConfig:
    """Generation parameters handed to the metadata pipeline."""

    provider_id: str = "openai"
    model: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 4096
    timeout: int = 90


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    provider_id: str = Field("openai", alias="QUIZGEN_PROVIDER_ID")
    model: str = Field("gpt-4o", alias="QUIZGEN_MODEL")
    temperature: float = Field(0.7, ge=0, le=2, alias="QUIZGEN_TEMPERATURE")
    max_tokens: int = Field(4096, ge=1, le=32000, alias="QUIZGEN_MAX_TOKENS")
    timeout: int = Field(90, ge=1, le=300, alias="QUIZGEN_TIMEOUT")

    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    # 프록시/호환 엔드포인트를 쓸 때만 지정
    base_url: Optional[str] = Field(None, alias="QUIZGEN_BASE_URL")

    completions_log_path: str = Field(
        "data/metadata_completions.jsonl", alias="QUIZGEN_COMPLETIONS_LOG_PATH"
    )
    db_url: str = Field("sqlite:///./quizgen.db", alias="DB_URL")
    api_key: str = Field("ai", alias="API_KEY")
    default_author_uid: int = Field(1, alias="QUIZGEN_DEFAULT_AUTHOR_UID")

    # Scheduled quiz generation
    cron_generation_enabled: bool = Field(False, alias="CRON_GENERATION_ENABLED")
    cron_generation_interval: int = Field(600, ge=60, alias="CRON_GENERATION_INTERVAL")
    scheduler_timezone: str = Field("UTC", alias="SCHEDULER_TZ")

    @field_validator("provider_id", "model", mode="before")
    @classmethod
    def _strip(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            provider_id=self.provider_id or "openai",
            model=self.model or "gpt-4o",
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()

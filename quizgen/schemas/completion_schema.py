from typing import Optional

from pydantic import BaseModel, Field


class CompletionLogEntry(BaseModel):
    id: int = Field(..., ge=1)
    request: str
    response: str
    model: str
    provider: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    temperature: Optional[float] = None
    response_time_ms: int = 0
    created: str = Field(..., description="ISO 8601 timestamp")
    type: str = "metadata_generation"
    error: Optional[str] = None


class CompletionLogPage(BaseModel):
    total: int
    completions: list[CompletionLogEntry]

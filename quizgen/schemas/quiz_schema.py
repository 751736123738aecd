from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TaxonomyTerm(BaseModel):
    id: int
    label: str


class BaseMetadata(BaseModel):
    subject: TaxonomyTerm
    education_level: TaxonomyTerm
    difficulty: TaxonomyTerm
    cognitive_goal: TaxonomyTerm

    def labels(self) -> dict[str, str]:
        return {
            "subject": self.subject.label,
            "education_level": self.education_level.label,
            "difficulty": self.difficulty.label,
            "cognitive_goal": self.cognitive_goal.label,
        }


class QuizContent(BaseModel):
    prompt: str = Field(..., min_length=1)
    # 100자 제한은 프롬프트로만 요청하고 강제하지 않는다.
    title: str = Field(..., min_length=1)


class QuizMetadata(BaseMetadata):
    title: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)


class QuizNodeCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    author_uid: Optional[int] = Field(None, description="Author user id; defaults to the configured author")
    tags: list[str] = Field(default_factory=list, description="Free-text tags, resolved or created")


class QuizPromptUpdateRequest(BaseModel):
    prompt: str = Field(..., min_length=1)


class QuizNodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    prompt: str
    author_uid: int
    status: bool
    subject_id: Optional[int] = None
    education_level_id: Optional[int] = None
    difficulty_id: Optional[int] = None
    cognitive_goal_id: Optional[int] = None
    tags: list[str] = Field(default_factory=list)
    created: datetime
    changed: datetime

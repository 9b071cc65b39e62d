from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.modules.generation.models import (
    ContentKind,
    Difficulty,
    Flashcard,
    QuizQuestion,
    StudySet,
)


class GenerateRequest(BaseModel):
    topic: str = Field(..., description="What the generated content is about")
    item_count: Optional[int] = Field(
        default=None, description="Desired number of items; clamped per kind"
    )
    difficulty: Optional[Difficulty] = None
    source_text: Optional[str] = Field(
        default=None, description="Study material to analyze (study sets)"
    )


class QuizResponse(BaseModel):
    set_id: int
    title: str
    provider: str
    question_count: int
    questions: list[QuizQuestion]
    warnings: list[str] = Field(default_factory=list)


class FlashcardsResponse(BaseModel):
    set_id: int
    title: str
    topic: str
    provider: str
    card_count: int
    cards: list[Flashcard]


class StudySetResponse(BaseModel):
    set_id: int
    title: str
    provider: str
    study_set: StudySet
    warnings: list[str] = Field(default_factory=list)


class GeneratedSetRead(BaseModel):
    id: int
    kind: ContentKind
    title: str
    topic: str
    provider: str
    requested_count: int
    accepted_count: int
    items: list[dict] = Field(default_factory=list)
    created_at: str


class ErrorResponse(BaseModel):
    error: str
    kind: str
    retryable: bool

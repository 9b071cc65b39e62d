"""Pydantic models for the generation pipeline.

Requests come in already shape-checked by the HTTP layer; the canonical items
defined here are what the validator emits and what persistence stores.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class ContentKind(str, Enum):
    QUIZ = "quiz"
    FLASHCARDS = "flashcards"
    STUDY_SET = "study_set"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class AnswerPolicy(str, Enum):
    """What to do with a quiz answer that cannot be resolved to an index."""

    BEST_EFFORT = "best_effort"
    STRICT = "strict"


class GenerationRequest(BaseModel):
    """One user request for generated content; lives only for one pipeline run."""

    content_kind: ContentKind
    topic: str
    item_count: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    source_text: Optional[str] = None


class GenerationOptions(BaseModel):
    """Per-call knobs handed to a provider adapter."""

    temperature: float = 0.7
    max_output_tokens: int = 8192
    system_instruction: Optional[str] = None
    timeout_seconds: float = 60.0


class QuizQuestion(BaseModel):
    question_text: str
    options: list[str] = Field(default_factory=list)
    correct_answer: int


class Flashcard(BaseModel):
    front: str
    back: str
    card_number: int


class PodcastLine(BaseModel):
    speaker: str
    text: str


class StudySet(BaseModel):
    """Summary, two-voice script, flashcards and quiz built from one source."""

    summary: str = ""
    podcast_script: list[PodcastLine] = Field(default_factory=list)
    flashcards: list[Flashcard] = Field(default_factory=list)
    quiz: list[QuizQuestion] = Field(default_factory=list)


ValidatedItem = Union[QuizQuestion, Flashcard, StudySet]


class GenerationResult(BaseModel):
    content_kind: ContentKind
    topic: str
    title: str
    items: list[ValidatedItem] = Field(default_factory=list)
    provider_used: str
    requested_count: int
    accepted_count: int
    warnings: list[str] = Field(default_factory=list)

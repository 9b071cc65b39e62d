"""Schema and semantic checks for parsed model output.

Per-item defects never fail a batch: bad items are dropped and the rest kept.
Only a payload missing its collection field, or a batch where nothing
survives, raises ``ContentValidationError``.

Unresolvable quiz answers follow the kind's ``AnswerPolicy``:

- ``BEST_EFFORT``: the answer becomes index 0 and a warning is recorded.
- ``STRICT``: the question is dropped.

The same policy covers both "answer text not among the options" and "index
out of range", so similar defects are never handled two different ways.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from app.core.config import GenerationSettings
from app.core.logging import get_logger
from app.modules.generation.errors import ContentValidationError
from app.modules.generation.models import (
    AnswerPolicy,
    ContentKind,
    Flashcard,
    PodcastLine,
    QuizQuestion,
    StudySet,
    ValidatedItem,
)

logger = get_logger(__name__)

OPTION_COUNT = 4
STUDY_SET_FIELDS = ("summary", "podcastScript", "flashcards", "quiz")

_INTEGER = re.compile(r"[+-]?\d+")


@dataclass
class ValidationOutcome:
    items: list[ValidatedItem] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    dropped: int = 0


def _text(value: Any) -> str:
    """Coerce a scalar to a trimmed string; containers and null become ``""``."""
    if value is None or isinstance(value, (dict, list, tuple, bool)):
        return ""
    return str(value).strip()


def resolve_answer_index(raw: Any, options: list[str]) -> Optional[int]:
    """Normalize a model's ``correctAnswer`` to an option index.

    Numbers are used as-is, integer-looking strings are parsed, anything else
    is looked up among ``options`` (exact match first, then trimmed). Returns
    ``None`` when the answer cannot be interpreted; the result is not bound
    checked.
    """
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    if not isinstance(raw, str):
        return None

    stripped = raw.strip()
    if _INTEGER.fullmatch(stripped):
        return int(stripped)
    if raw in options:
        return options.index(raw)
    trimmed = [o.strip() for o in options]
    if stripped and stripped in trimmed:
        return trimmed.index(stripped)
    return None


class ContentValidator:
    """Validates parsed payloads for every content kind."""

    def __init__(self, policies: Optional[dict[ContentKind, AnswerPolicy]] = None) -> None:
        self.policies = dict(policies or {})

    @classmethod
    def from_settings(cls, gen: GenerationSettings) -> "ContentValidator":
        return cls(
            {
                ContentKind.QUIZ: AnswerPolicy(gen.quiz_answer_policy),
                ContentKind.STUDY_SET: AnswerPolicy(gen.study_set_answer_policy),
            }
        )

    def policy_for(self, kind: ContentKind) -> AnswerPolicy:
        return self.policies.get(kind, AnswerPolicy.BEST_EFFORT)

    def validate(
        self,
        payload: Any,
        kind: ContentKind,
        *,
        limit: Optional[int] = None,
    ) -> ValidationOutcome:
        if not isinstance(payload, dict):
            raise ContentValidationError("Response is not a JSON object")
        if kind == ContentKind.QUIZ:
            return self._validate_quiz(payload, limit)
        if kind == ContentKind.FLASHCARDS:
            return self._validate_flashcards(payload, limit)
        return self._validate_study_set(payload, limit)

    # Quiz ---------------------------------------------------------------
    def _question(
        self,
        raw: Any,
        position: int,
        policy: AnswerPolicy,
        outcome: ValidationOutcome,
    ) -> Optional[QuizQuestion]:
        if not isinstance(raw, dict):
            return None
        question_text = raw.get("questionText")
        if not isinstance(question_text, str) or not question_text.strip():
            return None
        options = raw.get("options")
        if not isinstance(options, list) or len(options) != OPTION_COUNT:
            return None
        as_text = [
            "" if o is None or isinstance(o, (dict, list)) else str(o) for o in options
        ]
        cleaned = [o.strip() for o in as_text]
        if not all(cleaned):
            return None

        raw_answer = raw.get("correctAnswer")
        index = resolve_answer_index(raw_answer, as_text)
        if index is None or not 0 <= index < OPTION_COUNT:
            if policy == AnswerPolicy.STRICT:
                logger.warning(
                    "Dropping question %d: invalid correct answer %r",
                    position,
                    raw_answer,
                )
                return None
            logger.warning(
                "Invalid answer index at Q%d (%r), defaulting to 0", position, raw_answer
            )
            outcome.warnings.append(
                f"Question {position}: correct answer {raw_answer!r} could not be "
                "resolved; defaulted to option 0"
            )
            index = 0

        return QuizQuestion(
            question_text=question_text.strip(),
            options=cleaned,
            correct_answer=index,
        )

    def _questions(
        self,
        raw_items: list[Any],
        policy: AnswerPolicy,
        limit: Optional[int],
        outcome: ValidationOutcome,
    ) -> list[QuizQuestion]:
        kept: list[QuizQuestion] = []
        for i, raw in enumerate(raw_items):
            if limit is not None and len(kept) >= limit:
                break
            question = self._question(raw, i + 1, policy, outcome)
            if question is None:
                outcome.dropped += 1
                continue
            kept.append(question)
        return kept

    def _validate_quiz(self, payload: dict, limit: Optional[int]) -> ValidationOutcome:
        raw_items = payload.get("questions")
        if not isinstance(raw_items, list):
            raise ContentValidationError("Missing 'questions' array in response")
        outcome = ValidationOutcome()
        outcome.items.extend(
            self._questions(raw_items, self.policy_for(ContentKind.QUIZ), limit, outcome)
        )
        if not outcome.items:
            raise ContentValidationError("No valid questions parsed from AI response")
        if outcome.dropped:
            logger.info("Dropped %d malformed questions", outcome.dropped)
        return outcome

    # Flashcards ---------------------------------------------------------
    def _cards(
        self, raw_items: list[Any], limit: Optional[int], outcome: ValidationOutcome
    ) -> list[Flashcard]:
        kept: list[Flashcard] = []
        for raw in raw_items:
            if limit is not None and len(kept) >= limit:
                break
            if not isinstance(raw, dict):
                outcome.dropped += 1
                continue
            front = _text(raw.get("front"))
            back = _text(raw.get("back"))
            if not front or not back:
                outcome.dropped += 1
                continue
            kept.append(Flashcard(front=front, back=back, card_number=len(kept) + 1))
        return kept

    def _validate_flashcards(
        self, payload: dict, limit: Optional[int]
    ) -> ValidationOutcome:
        raw_items = payload.get("cards")
        if not isinstance(raw_items, list):
            raise ContentValidationError("Missing 'cards' array in response")
        outcome = ValidationOutcome()
        outcome.items.extend(self._cards(raw_items, limit, outcome))
        if not outcome.items:
            raise ContentValidationError("No valid flashcards parsed from AI response")
        if outcome.dropped:
            logger.info("Dropped %d malformed flashcards", outcome.dropped)
        return outcome

    # Study set ----------------------------------------------------------
    @staticmethod
    def _summary(raw: Any) -> str:
        if isinstance(raw, list):
            return "\n".join(t for t in (_text(r) for r in raw) if t)
        return _text(raw)

    @staticmethod
    def _script(raw: Any, outcome: ValidationOutcome) -> list[PodcastLine]:
        if not isinstance(raw, list):
            return []
        lines: list[PodcastLine] = []
        for entry in raw:
            speaker = _text(entry.get("speaker")) if isinstance(entry, dict) else ""
            text = _text(entry.get("text")) if isinstance(entry, dict) else ""
            if not speaker or not text:
                outcome.dropped += 1
                continue
            lines.append(PodcastLine(speaker=speaker, text=text))
        return lines

    def _validate_study_set(
        self, payload: dict, limit: Optional[int]
    ) -> ValidationOutcome:
        if not any(key in payload for key in STUDY_SET_FIELDS):
            raise ContentValidationError("Missing study set sections in response")
        outcome = ValidationOutcome()

        raw_cards = payload.get("flashcards")
        raw_quiz = payload.get("quiz")
        study_set = StudySet(
            summary=self._summary(payload.get("summary")),
            podcast_script=self._script(payload.get("podcastScript"), outcome),
            flashcards=self._cards(
                raw_cards if isinstance(raw_cards, list) else [], limit, outcome
            ),
            quiz=self._questions(
                raw_quiz if isinstance(raw_quiz, list) else [],
                self.policy_for(ContentKind.STUDY_SET),
                limit,
                outcome,
            ),
        )
        if not (
            study_set.summary
            or study_set.podcast_script
            or study_set.flashcards
            or study_set.quiz
        ):
            raise ContentValidationError("No usable study set content in AI response")
        outcome.items.append(study_set)
        return outcome

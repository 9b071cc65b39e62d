"""Generation pipeline exports."""

from .errors import (
    ContentValidationError,
    ErrorKind,
    GenerationError,
    ParseError,
    ProviderError,
    ProviderErrorKind,
)
from .models import (
    AnswerPolicy,
    ContentKind,
    Difficulty,
    Flashcard,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    PodcastLine,
    QuizQuestion,
    StudySet,
)
from .providers import (
    GeminiAdapter,
    GroqAdapter,
    OpenRouterAdapter,
    ProviderAdapter,
    RawResult,
    build_adapters,
)
from .router import ProviderRouter
from .service import GenerationOutcome, GenerationService
from .validator import ContentValidator

__all__ = [
    "AnswerPolicy",
    "ContentKind",
    "ContentValidationError",
    "ContentValidator",
    "Difficulty",
    "ErrorKind",
    "Flashcard",
    "GeminiAdapter",
    "GenerationError",
    "GenerationOptions",
    "GenerationOutcome",
    "GenerationRequest",
    "GenerationResult",
    "GenerationService",
    "GroqAdapter",
    "OpenRouterAdapter",
    "ParseError",
    "PodcastLine",
    "ProviderAdapter",
    "ProviderError",
    "ProviderErrorKind",
    "ProviderRouter",
    "QuizQuestion",
    "RawResult",
    "StudySet",
    "build_adapters",
]

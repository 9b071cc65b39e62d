"""End-to-end generation: route, prompt, call, extract, parse, validate.

``GenerationService.generate`` never raises. Every failure comes back as a
``GenerationError`` inside a ``GenerationOutcome`` so HTTP handlers and
background jobs can map it without catching raw provider exceptions.
Nothing is persisted here; callers hand a successful result to a store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from app.core.config import GenerationSettings, settings
from app.core.logging import get_logger
from app.core.metrics import GENERATION_REQUESTS
from app.modules.generation.errors import (
    ContentValidationError,
    ErrorKind,
    GenerationError,
    ParseError,
    ProviderErrorKind,
)
from app.modules.generation.extractor import extract
from app.modules.generation.models import (
    ContentKind,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
)
from app.modules.generation.parser import parse
from app.modules.generation.prompts import build_prompt, system_instruction_for
from app.modules.generation.providers import build_adapters, classify_provider_error
from app.modules.generation.router import ProviderRouter
from app.modules.generation.validator import ContentValidator

logger = get_logger(__name__)

_PROVIDER_ERROR_KINDS = {
    ProviderErrorKind.AUTH_FAILURE: ErrorKind.CONFIGURATION_FAILURE,
    ProviderErrorKind.QUOTA_EXCEEDED: ErrorKind.OVERLOADED,
    ProviderErrorKind.TIMEOUT: ErrorKind.TIMEOUT,
    ProviderErrorKind.UNKNOWN: ErrorKind.UNKNOWN,
}

_TITLE_SUFFIXES = {
    ContentKind.QUIZ: "Quiz",
    ContentKind.FLASHCARDS: "Flashcards",
    ContentKind.STUDY_SET: "Study Set",
}


@dataclass
class GenerationOutcome:
    result: Optional[GenerationResult] = None
    error: Optional[GenerationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


def _record(kind: ContentKind, outcome: GenerationOutcome) -> None:
    if outcome.result is not None:
        provider, result = outcome.result.provider_used, "ok"
    else:
        provider, result = outcome.error.provider or "-", outcome.error.kind.value
    GENERATION_REQUESTS.labels(kind=kind.value, provider=provider, outcome=result).inc()


class GenerationService:
    """Stateless pipeline; the router's rotation counter is the only shared state."""

    def __init__(
        self,
        router: ProviderRouter,
        gen: Optional[GenerationSettings] = None,
        *,
        validator: Optional[ContentValidator] = None,
    ) -> None:
        self.router = router
        self.gen = gen or settings.generation
        self.validator = validator or ContentValidator.from_settings(self.gen)

    @classmethod
    def from_settings(cls, gen: Optional[GenerationSettings] = None) -> "GenerationService":
        gen = gen or settings.generation
        return cls(ProviderRouter(build_adapters(gen)), gen)

    def bounds(self, kind: ContentKind) -> tuple[int, int, int]:
        """(min, max, default) item counts for ``kind``."""
        prefix = kind.value
        return (
            getattr(self.gen, f"{prefix}_min_items"),
            getattr(self.gen, f"{prefix}_max_items"),
            getattr(self.gen, f"{prefix}_default_items"),
        )

    def effective_count(self, kind: ContentKind, requested: Optional[int]) -> int:
        """Missing or zero counts take the default; everything else is clamped."""
        low, high, default = self.bounds(kind)
        n = requested if requested else default
        return min(max(int(n), low), high)

    async def generate(self, request: GenerationRequest) -> GenerationOutcome:
        try:
            outcome = GenerationOutcome(result=await self._run(request))
        except GenerationError as e:
            outcome = GenerationOutcome(error=e)
        except Exception as e:  # noqa: BLE001
            logger.exception("Generation failed unexpectedly: %s", e)
            outcome = GenerationOutcome(error=GenerationError(ErrorKind.UNKNOWN, cause=e))
        _record(request.content_kind, outcome)
        return outcome

    async def _run(self, request: GenerationRequest) -> GenerationResult:
        kind = request.content_kind
        topic = (request.topic or "").strip()
        if not topic:
            raise GenerationError(ErrorKind.REQUEST_INVALID)

        count = self.effective_count(kind, request.item_count)
        adapter, request_no = self.router.select_numbered()
        prompt = build_prompt(
            kind, topic, count, request.difficulty, request.source_text
        )
        options = GenerationOptions(
            temperature=self.gen.temperature,
            max_output_tokens=self.gen.max_output_tokens,
            system_instruction=system_instruction_for(kind),
            timeout_seconds=self.gen.provider_timeout_seconds,
        )
        log_ctx = {"request_no": request_no, "provider": adapter.name, "kind": kind.value}
        logger.info(
            "Request #%d | Provider: %s | Generating %d %s on %r",
            request_no,
            adapter.name,
            count,
            kind.value,
            topic,
            extra=log_ctx,
        )

        try:
            raw = await adapter.generate(prompt, options)
        except Exception as e:  # noqa: BLE001
            err = classify_provider_error(e, adapter.name)
            logger.error(
                "%s call failed (%s): %s", adapter.name, err.kind.value, err, extra=log_ctx
            )
            raise GenerationError(
                _PROVIDER_ERROR_KINDS[err.kind], cause=err, provider=adapter.name
            ) from e

        text = extract(raw, adapter.name)
        logger.info(
            "%s response received. Length: %d", adapter.name, len(text), extra=log_ctx
        )
        if not text.strip():
            raise GenerationError(
                ErrorKind.PARSING_FAILURE,
                cause=ParseError(f"Empty response from {adapter.name}"),
                provider=adapter.name,
            )

        try:
            payload = parse(text)
            validated = self.validator.validate(payload, kind, limit=count)
        except (ParseError, ContentValidationError) as e:
            logger.error(
                "Failed to use %s output: %s", adapter.name, e, extra=log_ctx
            )
            raise GenerationError(
                ErrorKind.PARSING_FAILURE, cause=e, provider=adapter.name
            ) from e

        return GenerationResult(
            content_kind=kind,
            topic=topic,
            title=f"{topic} {_TITLE_SUFFIXES[kind]}",
            items=validated.items,
            provider_used=adapter.name,
            requested_count=count,
            accepted_count=len(validated.items),
            warnings=validated.warnings,
        )

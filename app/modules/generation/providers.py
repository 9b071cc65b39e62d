"""Provider adapters: one per hosted model service, all behind one contract.

Each adapter owns its credentials and lazily builds its pydantic-ai model on
first use (lazy imports keep missing credentials from breaking import time).
A fresh plain-text ``Agent`` is created per call so the system instruction can
vary by content kind. Adapters never retry and never leak transport errors:
anything that goes wrong is re-raised as a classified ``ProviderError``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.settings import ModelSettings

from app.core.config import GenerationSettings
from app.core.logging import get_logger
from app.modules.generation.errors import ProviderError, ProviderErrorKind
from app.modules.generation.models import GenerationOptions

logger = get_logger(__name__)

AUTH_PHRASES = ("api key", "api_key", "unauthorized", "permission denied")
QUOTA_PHRASES = ("quota", "too many requests", "rate limit", "resource_exhausted")
TIMEOUT_PHRASES = ("timed out", "timeout")

_STATUS_KINDS = {
    401: ProviderErrorKind.AUTH_FAILURE,
    403: ProviderErrorKind.AUTH_FAILURE,
    429: ProviderErrorKind.QUOTA_EXCEEDED,
    408: ProviderErrorKind.TIMEOUT,
    504: ProviderErrorKind.TIMEOUT,
}


@dataclass
class RawResult:
    """Whatever envelope a provider returned, tagged with the adapter name."""

    provider: str
    payload: Any


def classify_provider_error(exc: BaseException, provider: str = "-") -> ProviderError:
    """Map an arbitrary provider/transport exception to a ``ProviderError``."""
    if isinstance(exc, ProviderError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ProviderError(
            ProviderErrorKind.TIMEOUT, f"{provider} request timed out", provider=provider
        )

    text = f"{type(exc).__name__}: {exc}"
    if isinstance(exc, ModelHTTPError) and exc.status_code in _STATUS_KINDS:
        return ProviderError(_STATUS_KINDS[exc.status_code], text, provider=provider)

    lowered = text.lower()
    if any(p in lowered for p in AUTH_PHRASES):
        kind = ProviderErrorKind.AUTH_FAILURE
    elif any(p in lowered for p in QUOTA_PHRASES):
        kind = ProviderErrorKind.QUOTA_EXCEEDED
    elif any(p in lowered for p in TIMEOUT_PHRASES):
        kind = ProviderErrorKind.TIMEOUT
    else:
        kind = ProviderErrorKind.UNKNOWN
    return ProviderError(kind, text, provider=provider)


class ProviderAdapter:
    """Base adapter. Subclasses set ``name``/``api_key_env`` and build a model."""

    name: str = "provider"
    api_key_env: str = "API_KEY"

    def __init__(self, *, api_key: Optional[str], model_name: str) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._model: Any = None

    def _build_model(self) -> Any:
        raise NotImplementedError

    def _get_model(self) -> Any:
        # Single assignment; a duplicate build under a race is harmless.
        model = self._model
        if model is None:
            if not self.api_key:
                raise ProviderError(
                    ProviderErrorKind.AUTH_FAILURE,
                    f"{self.api_key_env} is missing",
                    provider=self.name,
                )
            model = self._build_model()
            self._model = model
        return model

    async def generate(self, prompt: str, options: GenerationOptions) -> RawResult:
        try:
            model = self._get_model()
            agent: Agent[None, str] = Agent(
                model,
                output_type=str,
                system_prompt=options.system_instruction or (),
                model_settings=ModelSettings(
                    temperature=options.temperature,
                    max_tokens=options.max_output_tokens,
                    timeout=options.timeout_seconds,
                ),
            )
            res = await asyncio.wait_for(
                agent.run(prompt), timeout=options.timeout_seconds
            )
        except ProviderError:
            raise
        except Exception as e:  # noqa: BLE001
            err = classify_provider_error(e, self.name)
            logger.warning(
                "Provider %s failed (%s): %s", self.name, err.kind.value, err
            )
            raise err from e
        return RawResult(provider=self.name, payload=res)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model_name!r})"


class GeminiAdapter(ProviderAdapter):
    name = "gemini"
    api_key_env = "GEMINI_API_KEY"

    def _build_model(self) -> Any:
        """Build Google Gemini model for pydantic-ai (lazy import)."""
        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        provider = GoogleProvider(api_key=self.api_key)
        return GoogleModel(self.model_name, provider=provider)


class GroqAdapter(ProviderAdapter):
    name = "groq"
    api_key_env = "GROQ_API_KEY"

    def _build_model(self) -> Any:
        """Build Groq-hosted Llama model for pydantic-ai (lazy import)."""
        from pydantic_ai.models.groq import GroqModel
        from pydantic_ai.providers.groq import GroqProvider

        provider = GroqProvider(api_key=self.api_key)
        return GroqModel(self.model_name, provider=provider)


class OpenRouterAdapter(ProviderAdapter):
    name = "openrouter"
    api_key_env = "OPENROUTER_API_KEY"

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model_name: str,
        base_url: str = "https://openrouter.ai/api/v1",
    ) -> None:
        super().__init__(api_key=api_key, model_name=model_name)
        self.base_url = base_url

    def _build_model(self) -> Any:
        """Build OpenRouter model via OpenAI-compatible provider (lazy import)."""
        from pydantic_ai.models.openai import OpenAIChatModel
        from pydantic_ai.providers.openai import OpenAIProvider

        provider = OpenAIProvider(api_key=self.api_key, base_url=self.base_url)
        return OpenAIChatModel(self.model_name, provider=provider)


def build_adapters(gen: GenerationSettings) -> list[ProviderAdapter]:
    """Construct the ordered adapter roster named by ``GENERATION_PROVIDERS``."""
    factories = {
        "gemini": lambda: GeminiAdapter(
            api_key=gen.gemini_api_key, model_name=gen.gemini_model
        ),
        "groq": lambda: GroqAdapter(api_key=gen.groq_api_key, model_name=gen.groq_model),
        "openrouter": lambda: OpenRouterAdapter(
            api_key=gen.openrouter_api_key,
            model_name=gen.openrouter_model,
            base_url=gen.openrouter_base_url,
        ),
    }
    adapters: list[ProviderAdapter] = []
    for name in gen.provider_names:
        factory = factories.get(name)
        if factory is None:
            raise ValueError(f"Unknown generation provider: {name!r}")
        adapters.append(factory())
    return adapters

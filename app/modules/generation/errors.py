"""Error types raised inside the generation pipeline and returned from it."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ProviderErrorKind(str, Enum):
    AUTH_FAILURE = "auth_failure"
    QUOTA_EXCEEDED = "quota_exceeded"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ProviderError(Exception):
    """Classified failure of a single provider call."""

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str,
        *,
        provider: str = "-",
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.provider = provider

    def __repr__(self) -> str:
        return f"ProviderError(kind={self.kind.value!r}, provider={self.provider!r}, message={str(self)!r})"


class ParseError(Exception):
    """No JSON object could be recovered from model text."""


class ContentValidationError(Exception):
    """Payload lacks its collection field or nothing survived validation."""


class ErrorKind(str, Enum):
    REQUEST_INVALID = "request_invalid"
    CONFIGURATION_FAILURE = "configuration_failure"
    OVERLOADED = "overloaded"
    TIMEOUT = "timeout"
    PARSING_FAILURE = "parsing_failure"
    UNKNOWN = "unknown"


_RETRYABLE = {
    ErrorKind.OVERLOADED,
    ErrorKind.TIMEOUT,
    ErrorKind.PARSING_FAILURE,
}

_DEFAULT_MESSAGES = {
    ErrorKind.REQUEST_INVALID: "Topic is required",
    ErrorKind.CONFIGURATION_FAILURE: "Server Configuration Error (API Key).",
    ErrorKind.OVERLOADED: "System busy. Please try again.",
    ErrorKind.TIMEOUT: "The AI provider took too long to respond. Please try again.",
    ErrorKind.PARSING_FAILURE: "AI generation failed (Parsing Error). Please try again.",
    ErrorKind.UNKNOWN: "Failed to generate content.",
}


class GenerationError(Exception):
    """Single typed failure handed back to callers of GenerationService."""

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        *,
        cause: Optional[BaseException] = None,
        provider: Optional[str] = None,
    ) -> None:
        super().__init__(message or _DEFAULT_MESSAGES[kind])
        self.kind = kind
        self.cause = cause
        self.provider = provider

    @property
    def message(self) -> str:
        return str(self)

    @property
    def retryable(self) -> bool:
        return self.kind in _RETRYABLE

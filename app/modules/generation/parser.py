"""Recover a JSON object from model text that may carry fences or prose."""

from __future__ import annotations

import json
from typing import Any

from app.modules.generation.errors import ParseError

_OPENING_FENCES = ("```json", "```JSON", "```")
_CLOSING_FENCE = "```"


def strip_fences(text: str) -> str:
    """Drop one leading and one trailing code fence when both are present."""
    cleaned = text.strip()
    if not cleaned.endswith(_CLOSING_FENCE):
        return cleaned
    for fence in _OPENING_FENCES:
        if cleaned.startswith(fence) and len(cleaned) >= len(fence) + len(_CLOSING_FENCE):
            return cleaned[len(fence) : -len(_CLOSING_FENCE)].strip()
    return cleaned


def _load_object(text: str) -> dict[str, Any]:
    value = json.loads(text)
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value


def parse(text: str) -> dict[str, Any]:
    """Parse ``text`` directly, then fall back to the outermost ``{...}`` span."""
    cleaned = strip_fences(text or "")
    try:
        return _load_object(cleaned)
    except (ValueError, RecursionError) as first_error:
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start != -1 and end > start:
            try:
                return _load_object(cleaned[start : end + 1])
            except (ValueError, RecursionError):
                pass
        raise ParseError(f"No JSON object recoverable: {first_error}") from first_error

"""Turn any adapter ``RawResult`` into plain text.

Envelopes differ per vendor SDK, so the payload is inspected by shape rather
than by type, in this order:

1. a callable ``text`` accessor (Gemini-style responses),
2. ``choices[0]`` holding ``message.content``, ``delta.content`` or ``text``
   (OpenAI/Groq-style completions and streaming chunks),
3. a plain string field: ``output``, ``text`` or ``content``
   (pydantic-ai run results and simple dicts),
4. the whole payload serialized to text.

Nothing here raises; failures degrade to ``""``.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from app.core.logging import get_logger
from app.modules.generation.providers import RawResult

logger = get_logger(__name__)

_STRING_FIELDS = ("output", "text", "content")


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _first_choice_text(payload: Any) -> Optional[str]:
    choices = _field(payload, "choices")
    if not isinstance(choices, (list, tuple)) or not choices:
        return None
    choice = choices[0]
    for holder in ("message", "delta"):
        content = _field(_field(choice, holder), "content")
        if isinstance(content, str):
            return content
    text = _field(choice, "text")
    if isinstance(text, str):
        return text
    return ""


def _serialize(payload: Any) -> str:
    dump = getattr(payload, "model_dump", None)
    if callable(dump):
        payload = dump()
    try:
        return json.dumps(payload, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(payload)


def _extract(payload: Any) -> str:
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload

    accessor = _field(payload, "text")
    if callable(accessor):
        value = accessor()
        return value if isinstance(value, str) else ""

    from_choices = _first_choice_text(payload)
    if from_choices is not None:
        return from_choices

    for name in _STRING_FIELDS:
        value = _field(payload, name)
        if isinstance(value, str):
            return value

    return _serialize(payload)


def extract(raw: RawResult, provider_name: Optional[str] = None) -> str:
    name = provider_name or raw.provider
    try:
        return _extract(raw.payload)
    except Exception as e:  # noqa: BLE001
        logger.warning("Failed to extract text from %s result: %s", name, e)
        return ""

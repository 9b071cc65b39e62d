"""
Pytest configuration and shared fixtures.

Provider adapters are replaced with in-memory fakes; no test touches the
network or a database.
"""
import json
import sys
from pathlib import Path
from typing import Any, Optional

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(Path(__file__).parent))

from app.core.config import GenerationSettings  # noqa: E402
from app.modules.generation.router import ProviderRouter  # noqa: E402
from app.modules.generation.service import GenerationService  # noqa: E402

from fakes import FakeAdapter  # noqa: E402


@pytest.fixture
def gen_settings() -> GenerationSettings:
    return GenerationSettings().model_copy(
        update={
            "providers": "gemini,groq",
            "quiz_min_items": 10,
            "quiz_max_items": 50,
            "quiz_default_items": 15,
            "flashcards_min_items": 5,
            "flashcards_max_items": 30,
            "flashcards_default_items": 10,
            "study_set_min_items": 3,
            "study_set_max_items": 10,
            "study_set_default_items": 5,
            "quiz_answer_policy": "best_effort",
            "study_set_answer_policy": "best_effort",
        }
    )


@pytest.fixture
def make_service(gen_settings):
    """Build a GenerationService over the given fake adapters."""

    def _make(*adapters: FakeAdapter, gen: Optional[GenerationSettings] = None):
        return GenerationService(ProviderRouter(list(adapters)), gen or gen_settings)

    return _make


@pytest.fixture
def text_adapter():
    """Fake adapter whose envelope carries ``body`` as text (dicts are JSON-encoded)."""

    def _make(body: Any, name: str = "gemini") -> FakeAdapter:
        text = body if isinstance(body, str) else json.dumps(body)
        return FakeAdapter(name, payload={"text": text})

    return _make

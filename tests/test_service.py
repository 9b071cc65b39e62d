"""End-to-end pipeline tests with fake provider adapters."""
import json
from types import SimpleNamespace

import pytest
from prometheus_client import REGISTRY

from app.modules.generation.errors import (
    ErrorKind,
    ParseError,
    ProviderError,
    ProviderErrorKind,
)
from app.modules.generation.models import (
    ContentKind,
    Difficulty,
    GenerationRequest,
    StudySet,
)

from fakes import FakeAdapter, flashcards_payload, quiz_payload


def _request(kind=ContentKind.QUIZ, topic="Photosynthesis", **kwargs):
    return GenerationRequest(content_kind=kind, topic=topic, **kwargs)


class TestSuccess:
    @pytest.mark.asyncio
    async def test_quiz_result(self, make_service, text_adapter):
        adapter = text_adapter(quiz_payload(12))
        outcome = await make_service(adapter).generate(_request(item_count=12))
        assert outcome.ok
        result = outcome.result
        assert result.provider_used == "gemini"
        assert result.requested_count == 12
        assert result.accepted_count == len(result.items) == 12
        assert result.title == "Photosynthesis Quiz"
        prompt, options = adapter.calls[0]
        assert "Generate exactly 12 questions" in prompt
        assert options.system_instruction and "quiz" in options.system_instruction

    @pytest.mark.asyncio
    async def test_accepted_count_within_bounds(self, make_service, text_adapter):
        payload = quiz_payload(15)
        payload["questions"][3]["options"] = ["only", "three", "options"]
        outcome = await make_service(text_adapter(payload)).generate(_request(item_count=15))
        result = outcome.result
        assert 1 <= result.accepted_count <= result.requested_count
        assert result.accepted_count == 14

    @pytest.mark.asyncio
    async def test_count_clamped_to_kind_maximum(self, make_service, text_adapter):
        adapter = text_adapter(quiz_payload(60))
        outcome = await make_service(adapter).generate(_request(item_count=1000))
        assert outcome.result.requested_count == 50
        assert outcome.result.accepted_count == 50
        assert "Generate exactly 50 questions" in adapter.calls[0][0]

    @pytest.mark.asyncio
    async def test_count_clamped_to_minimum_and_defaulted(self, make_service, text_adapter):
        service = make_service(text_adapter(quiz_payload(3)))
        assert service.effective_count(ContentKind.QUIZ, 2) == 10
        assert service.effective_count(ContentKind.QUIZ, None) == 15
        assert service.effective_count(ContentKind.QUIZ, 0) == 15
        assert service.effective_count(ContentKind.FLASHCARDS, 100) == 30
        assert service.effective_count(ContentKind.STUDY_SET, None) == 5

    def test_negative_count_is_clamped_not_defaulted(self, make_service, text_adapter):
        service = make_service(text_adapter(quiz_payload(3)))
        assert service.effective_count(ContentKind.QUIZ, -5) == 10
        assert service.effective_count(ContentKind.FLASHCARDS, -1) == 5

    @pytest.mark.asyncio
    async def test_fenced_response(self, make_service, text_adapter):
        body = "```json\n" + json.dumps(flashcards_payload(6)) + "\n```"
        outcome = await make_service(text_adapter(body)).generate(
            _request(ContentKind.FLASHCARDS, "  Cells  ", item_count=6)
        )
        result = outcome.result
        assert result.topic == "Cells"
        assert result.title == "Cells Flashcards"
        assert [c.card_number for c in result.items] == [1, 2, 3, 4, 5, 6]

    @pytest.mark.asyncio
    async def test_choices_envelope(self, make_service):
        payload = {"choices": [{"message": {"content": json.dumps(quiz_payload(10))}}]}
        outcome = await make_service(FakeAdapter("groq", payload=payload)).generate(_request())
        assert outcome.ok
        assert outcome.result.provider_used == "groq"

    @pytest.mark.asyncio
    async def test_study_set_is_single_item(self, make_service, text_adapter):
        body = {
            "summary": "Plants turn light into sugar.",
            "podcastScript": [{"speaker": "Host", "text": "Hi"}],
            "flashcards": [{"front": "Chlorophyll", "back": "Green pigment"}],
            "quiz": [
                {"questionText": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": "c"}
            ],
        }
        adapter = text_adapter(body)
        outcome = await make_service(adapter).generate(
            _request(ContentKind.STUDY_SET, source_text="Photosynthesis is ...", difficulty=Difficulty.EASY)
        )
        result = outcome.result
        assert result.accepted_count == 1
        assert isinstance(result.items[0], StudySet)
        assert result.items[0].quiz[0].correct_answer == 2
        assert "Photosynthesis is ..." in adapter.calls[0][0]

    @pytest.mark.asyncio
    async def test_best_effort_warnings_surface(self, make_service, text_adapter):
        payload = quiz_payload(10)
        payload["questions"][0]["correctAnswer"] = "Atlantis"
        outcome = await make_service(text_adapter(payload)).generate(_request())
        assert outcome.result.items[0].correct_answer == 0
        assert len(outcome.result.warnings) == 1

    @pytest.mark.asyncio
    async def test_strict_policy_drops(self, make_service, text_adapter, gen_settings):
        payload = quiz_payload(10)
        payload["questions"][0]["correctAnswer"] = "Atlantis"
        gen = gen_settings.model_copy(update={"quiz_answer_policy": "strict"})
        service = make_service(text_adapter(payload), gen=gen)
        outcome = await service.generate(_request())
        assert outcome.result.accepted_count == 9
        assert outcome.result.warnings == []

    @pytest.mark.asyncio
    async def test_alternates_providers(self, make_service):
        gemini = FakeAdapter("gemini", payload={"text": json.dumps(quiz_payload(10))})
        groq = FakeAdapter("groq", payload={"text": json.dumps(quiz_payload(10))})
        service = make_service(gemini, groq)
        used = [(await service.generate(_request())).result.provider_used for _ in range(4)]
        assert used == ["groq", "gemini", "groq", "gemini"]


class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("topic", ["", "   ", "\n\t"])
    async def test_blank_topic_rejected_before_provider_call(self, make_service, topic):
        adapter = FakeAdapter("gemini", payload={"text": "{}"})
        service = make_service(adapter)
        outcome = await service.generate(_request(topic=topic))
        assert not outcome.ok
        assert outcome.error.kind == ErrorKind.REQUEST_INVALID
        assert not outcome.error.retryable
        assert adapter.calls == []
        assert service.router.requests_routed == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,kind",
        [
            (ProviderError(ProviderErrorKind.QUOTA_EXCEEDED, "quota"), ErrorKind.OVERLOADED),
            (ProviderError(ProviderErrorKind.AUTH_FAILURE, "api key"), ErrorKind.CONFIGURATION_FAILURE),
            (ProviderError(ProviderErrorKind.TIMEOUT, "slow"), ErrorKind.TIMEOUT),
            (ProviderError(ProviderErrorKind.UNKNOWN, "boom"), ErrorKind.UNKNOWN),
        ],
    )
    async def test_provider_errors_mapped(self, make_service, error, kind):
        outcome = await make_service(FakeAdapter("gemini", error=error)).generate(_request())
        assert outcome.error.kind == kind
        assert outcome.error.cause is error

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,kind",
        [
            (RuntimeError("You exceeded your quota"), ErrorKind.OVERLOADED),
            (RuntimeError("Invalid API key supplied"), ErrorKind.CONFIGURATION_FAILURE),
            (TimeoutError(), ErrorKind.TIMEOUT),
            (RuntimeError("socket closed"), ErrorKind.UNKNOWN),
        ],
    )
    async def test_raw_adapter_exceptions_are_classified(self, make_service, error, kind):
        adapter = FakeAdapter("gemini", error=error)
        outcome = await make_service(adapter).generate(_request())
        assert outcome.error.kind == kind
        assert outcome.error.provider == "gemini"
        assert isinstance(outcome.error.cause, ProviderError)

    @pytest.mark.asyncio
    async def test_empty_text_is_parsing_failure(self, make_service, monkeypatch):
        import app.modules.generation.service as service_module

        def fail_parse(text):
            raise AssertionError("parser must not run on empty text")

        monkeypatch.setattr(service_module, "parse", fail_parse)
        adapter = FakeAdapter("gemini", payload={"text": ""})
        outcome = await make_service(adapter).generate(_request())
        assert outcome.error.kind == ErrorKind.PARSING_FAILURE
        assert outcome.error.retryable
        assert isinstance(outcome.error.cause, ParseError)

    @pytest.mark.asyncio
    async def test_extraction_failure_is_parsing_failure(self, make_service):
        def broken():
            raise ValueError("blocked by safety filter")

        adapter = FakeAdapter("gemini", payload=SimpleNamespace(text=broken))
        outcome = await make_service(adapter).generate(_request())
        assert outcome.error.kind == ErrorKind.PARSING_FAILURE

    @pytest.mark.asyncio
    async def test_unparseable_text_is_parsing_failure(self, make_service, text_adapter):
        outcome = await make_service(text_adapter("Sorry, I can't help with that.")).generate(_request())
        assert outcome.error.kind == ErrorKind.PARSING_FAILURE

    @pytest.mark.asyncio
    async def test_missing_collection_is_parsing_failure(self, make_service, text_adapter):
        outcome = await make_service(text_adapter({"quiz": []})).generate(_request())
        assert outcome.error.kind == ErrorKind.PARSING_FAILURE

    @pytest.mark.asyncio
    async def test_zero_survivors_is_parsing_failure(self, make_service, text_adapter):
        body = {"questions": [{"questionText": "Q?", "options": ["a"], "correctAnswer": 0}]}
        outcome = await make_service(text_adapter(body)).generate(_request())
        assert outcome.error.kind == ErrorKind.PARSING_FAILURE
        assert "Parsing Error" in outcome.error.message


class TestDeepNesting:
    @pytest.mark.asyncio
    async def test_runaway_nesting_is_parsing_failure(self, make_service, text_adapter):
        outcome = await make_service(text_adapter("[" * 200000)).generate(_request())
        assert outcome.error.kind == ErrorKind.PARSING_FAILURE


class TestMetrics:
    @staticmethod
    def _count(kind, provider, outcome):
        return (
            REGISTRY.get_sample_value(
                "generation_requests_total",
                {"kind": kind, "provider": provider, "outcome": outcome},
            )
            or 0.0
        )

    @pytest.mark.asyncio
    async def test_success_counted_per_provider(self, make_service, text_adapter):
        before = self._count("flashcards", "groq", "ok")
        service = make_service(text_adapter(flashcards_payload(5), name="groq"))
        await service.generate(_request(ContentKind.FLASHCARDS))
        assert self._count("flashcards", "groq", "ok") == before + 1

    @pytest.mark.asyncio
    async def test_failures_counted_by_kind(self, make_service):
        before_quota = self._count("quiz", "gemini", "overloaded")
        before_blank = self._count("quiz", "-", "request_invalid")
        service = make_service(FakeAdapter("gemini", error=RuntimeError("quota exceeded")))
        await service.generate(_request())
        await service.generate(_request(topic="  "))
        assert self._count("quiz", "gemini", "overloaded") == before_quota + 1
        assert self._count("quiz", "-", "request_invalid") == before_blank + 1

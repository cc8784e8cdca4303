# FILE: tests/test_reasoning_backend.py
"""Tests for app/simulator/backend.py"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from app.providers.registry import LlmCallResult, LlmCallStatus
from app.simulator.backend import (
    AmbiguityReport,
    LlmReasoningBackend,
    extract_json_object,
    parse_json_payload,
    reason_structured,
)
from app.specs.errors import BackendUnavailableError


class TestJsonExtraction:
    def test_plain_object(self):
        assert extract_json_object('{"a": 1}') == '{"a": 1}'

    def test_code_fence(self):
        assert extract_json_object('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_surrounding_prose(self):
        text = 'Sure! Here it is: {"a": {"b": 2}} Hope that helps.'
        assert extract_json_object(text) == '{"a": {"b": 2}}'

    def test_no_object(self):
        assert extract_json_object("no json here") is None
        assert extract_json_object("") is None

    def test_parse_rejects_garbage(self):
        with pytest.raises(BackendUnavailableError):
            parse_json_payload("{not json}")
        with pytest.raises(BackendUnavailableError):
            parse_json_payload("nothing")


def _llm_result(status=LlmCallStatus.SUCCESS, content=""):
    return LlmCallResult(status=status, provider_id="openai", model_id="gpt-4o-mini", content=content)


class TestLlmReasoningBackend:
    @pytest.mark.asyncio
    async def test_success_returns_dict(self):
        backend = LlmReasoningBackend(provider_id="openai", model_id="gpt-4o-mini")
        with patch(
            "app.simulator.backend.llm_call",
            AsyncMock(return_value=_llm_result(content='```json\n{"overallAmbiguityLevel": "low"}\n```')),
        ) as call:
            payload = await backend.reason("system", "prompt")
        assert payload == {"overallAmbiguityLevel": "low"}
        assert call.await_args.kwargs["system_prompt"] == "system"

    @pytest.mark.asyncio
    async def test_provider_unavailable_raises(self):
        backend = LlmReasoningBackend(provider_id="openai")
        with patch(
            "app.simulator.backend.llm_call",
            AsyncMock(return_value=_llm_result(status=LlmCallStatus.PROVIDER_UNAVAILABLE)),
        ):
            with pytest.raises(BackendUnavailableError):
                await backend.reason("system", "prompt")

    @pytest.mark.asyncio
    async def test_empty_content_raises(self):
        backend = LlmReasoningBackend(provider_id="openai")
        with patch("app.simulator.backend.llm_call", AsyncMock(return_value=_llm_result(content="  "))):
            with pytest.raises(BackendUnavailableError):
                await backend.reason("system", "prompt")


class TestReasonStructured:
    @pytest.mark.asyncio
    async def test_validates_payload(self):
        backend = Mock()
        backend.reason = AsyncMock(return_value={"ambiguities": [], "overallAmbiguityLevel": "high"})
        report = await reason_structured(backend, AmbiguityReport, "s", "p")
        assert report.overallAmbiguityLevel == "high"

    @pytest.mark.asyncio
    async def test_any_exception_becomes_backend_unavailable(self):
        backend = Mock()
        backend.reason = AsyncMock(side_effect=ValueError("weird"))
        with pytest.raises(BackendUnavailableError):
            await reason_structured(backend, AmbiguityReport, "s", "p")

    @pytest.mark.asyncio
    async def test_schema_violation(self):
        backend = Mock()
        backend.reason = AsyncMock(return_value={"ambiguities": "lots"})
        with pytest.raises(BackendUnavailableError):
            await reason_structured(backend, AmbiguityReport, "s", "p")


class TestTimeoutForwarding:
    @pytest.mark.asyncio
    async def test_sub_second_timeout_reaches_the_provider(self):
        backend = LlmReasoningBackend(provider_id="openai", timeout_seconds=0.5)
        with patch(
            "app.simulator.backend.llm_call",
            AsyncMock(return_value=_llm_result(content='{"a": 1}')),
        ) as call:
            await backend.reason("system", "prompt")
        assert call.await_args.kwargs["timeout_seconds"] == 0.5

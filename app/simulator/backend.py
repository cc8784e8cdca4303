# FILE: app/simulator/backend.py
"""
Reasoning backend used by the hybrid checks and the adversarial review.

Design constraints
- Backend output is an untrusted payload. It is parsed leniently ("almost
  JSON": code fences, pre/post text) and then validated against a pydantic
  shape before anything reads it.
- Every failure mode (provider down, timeout, empty output, unparsable JSON,
  schema violation) surfaces as BackendUnavailableError so callers have a
  single thing to degrade on.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from typing import Any, Dict, List, Literal, Optional, Protocol, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from app.providers.registry import PROVIDERS, is_provider_available, llm_call
from app.specs.errors import BackendUnavailableError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

REASONING_PROVIDER = os.getenv("SPEC_REASONING_PROVIDER", "").strip() or None
REASONING_MODEL = os.getenv("SPEC_REASONING_MODEL", "").strip() or None  # None: provider default
REASONING_TIMEOUT_SECONDS = float(os.getenv("SPEC_REASONING_TIMEOUT_SECONDS", "60"))


# =============================================================================
# Expected response shapes
# =============================================================================

class AmbiguityFinding(BaseModel):
    location: str = ""
    text: str = ""
    reason: str
    suggestion: str = ""


class AmbiguityReport(BaseModel):
    ambiguities: List[AmbiguityFinding] = Field(default_factory=list)
    overallAmbiguityLevel: Literal["low", "medium", "high"] = "medium"


class ContradictionFinding(BaseModel):
    itemA: str
    itemB: str
    description: str
    resolution: str = ""


class ContradictionReport(BaseModel):
    contradictions: List[ContradictionFinding] = Field(default_factory=list)
    hasContradictions: Optional[bool] = None


# =============================================================================
# Backend protocol + LLM implementation
# =============================================================================

class ReasoningBackend(Protocol):
    """Anything that turns a prompt into a JSON object, or raises BackendUnavailableError."""

    async def reason(
        self,
        system_prompt: str,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 2048,
    ) -> Dict[str, Any]:
        ...


def extract_json_object(text: str) -> Optional[str]:
    """Extract the first JSON object from text (handles code fences and pre/post text)."""
    if not text:
        return None

    t = text.strip()
    t = re.sub(r"^```(?:json)?\s*", "", t, flags=re.IGNORECASE)
    t = re.sub(r"\s*```$", "", t)

    if t.startswith("{") and t.endswith("}"):
        return t

    start = t.find("{")
    if start == -1:
        return None

    depth = 0
    for i in range(start, len(t)):
        ch = t[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return t[start : i + 1]
    return None


def parse_json_payload(text: str) -> Dict[str, Any]:
    """Parse backend text into a dict or raise BackendUnavailableError."""
    candidate = extract_json_object(text)
    if candidate is None:
        raise BackendUnavailableError("backend returned no JSON object")
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise BackendUnavailableError(f"backend returned invalid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise BackendUnavailableError("backend JSON is not an object")
    return payload


class LlmReasoningBackend:
    """ReasoningBackend backed by app.providers.registry.llm_call."""

    def __init__(
        self,
        provider_id: Optional[str] = REASONING_PROVIDER,
        model_id: Optional[str] = REASONING_MODEL,
        timeout_seconds: float = REASONING_TIMEOUT_SECONDS,
    ):
        self.provider_id = provider_id
        self.model_id = model_id
        self.timeout_seconds = timeout_seconds

    async def reason(
        self,
        system_prompt: str,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 2048,
    ) -> Dict[str, Any]:
        result = await llm_call(
            provider_id=self.provider_id,
            model_id=self.model_id,
            messages=[{"role": "user", "content": prompt}],
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout_seconds=self.timeout_seconds,
            json_mode=True,
        )
        if not result.is_success():
            raise BackendUnavailableError(
                f"{result.provider_id}/{result.model_id}: {result.status.value} {result.error_message or ''}".strip()
            )
        if not (result.content or "").strip():
            raise BackendUnavailableError(f"{result.provider_id}/{result.model_id}: empty response")
        return parse_json_payload(result.content)


# =============================================================================
# Guarded call
# =============================================================================

M = TypeVar("M", bound=BaseModel)


async def reason_structured(
    backend: ReasoningBackend,
    model: Type[M],
    system_prompt: str,
    prompt: str,
    *,
    temperature: float = 0.2,
    max_tokens: int = 2048,
    timeout_seconds: Optional[float] = None,
) -> M:
    """
    Call the backend and validate its payload against `model`.

    A timeout, any exception from the backend, or a schema violation is
    reported as BackendUnavailableError.
    """
    timeout = REASONING_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
    try:
        payload = await asyncio.wait_for(
            backend.reason(system_prompt, prompt, temperature=temperature, max_tokens=max_tokens),
            timeout=timeout,
        )
    except BackendUnavailableError:
        raise
    except asyncio.TimeoutError as e:
        raise BackendUnavailableError(f"backend timed out after {timeout}s") from e
    except Exception as e:
        raise BackendUnavailableError(f"backend call failed: {e}") from e

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise BackendUnavailableError(f"backend payload failed {model.__name__} validation: {e}") from e


def default_backend() -> Optional[LlmReasoningBackend]:
    """LLM backend when a provider is usable, else None (rule/dictionary tiers only)."""
    if REASONING_PROVIDER:
        return LlmReasoningBackend() if is_provider_available(REASONING_PROVIDER) else None
    if any(is_provider_available(pid) for pid in PROVIDERS):
        return LlmReasoningBackend()
    logger.info("[reasoning] No provider configured; running without a reasoning backend")
    return None


__all__ = [
    "REASONING_MODEL",
    "REASONING_PROVIDER",
    "REASONING_TIMEOUT_SECONDS",
    "AmbiguityFinding",
    "AmbiguityReport",
    "ContradictionFinding",
    "ContradictionReport",
    "ReasoningBackend",
    "LlmReasoningBackend",
    "default_backend",
    "extract_json_object",
    "parse_json_payload",
    "reason_structured",
]

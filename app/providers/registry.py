# FILE: app/providers/registry.py
"""
Reasoning provider registry.

One async entrypoint, llm_call(...), used by the reasoning backend. It never
raises for provider problems: a missing key, a missing SDK or an SDK error
comes back as an LlmCallResult with a non-success status, and the caller
decides how to degrade.

Providers (each needs its API key env var and its SDK installed):
- openai     AsyncOpenAI, Chat Completions, JSON object mode
- anthropic  AsyncAnthropic, Messages

NOTE (OpenAI token param drift):
Newer OpenAI chat models reject `max_tokens` and want
`max_completion_tokens`. The call retries once with the other name.
"""

from __future__ import annotations

import importlib
import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class LlmCallStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    INVALID_REQUEST = "invalid_request"


@dataclass
class LlmUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class LlmCallResult:
    status: LlmCallStatus
    provider_id: str
    model_id: str
    content: str = ""
    usage: LlmUsage = field(default_factory=LlmUsage)
    error_message: Optional[str] = None
    latency_ms: int = 0

    def is_success(self) -> bool:
        return self.status == LlmCallStatus.SUCCESS


@dataclass(frozen=True)
class ProviderConfig:
    provider_id: str
    display_name: str
    env_key_name: str
    sdk_module: str
    default_model: str


# Order matters: the first available provider is the default.
PROVIDERS: Dict[str, ProviderConfig] = {
    "openai": ProviderConfig("openai", "OpenAI", "OPENAI_API_KEY", "openai", "gpt-4o-mini"),
    "anthropic": ProviderConfig("anthropic", "Anthropic", "ANTHROPIC_API_KEY", "anthropic", "claude-3-5-haiku-latest"),
}


# =============================================================================
# Message shaping
# =============================================================================

def _normalize_messages_for_openai(messages: List[dict], system_prompt: Optional[str]) -> List[dict]:
    """System prompt first; unknown roles are sent as user turns."""
    shaped = [{"role": "system", "content": system_prompt}] if system_prompt else []
    for m in messages:
        role = m.get("role")
        shaped.append({
            "role": role if role in ("system", "user", "assistant") else "user",
            "content": str(m.get("content", "")),
        })
    return shaped


def _normalize_messages_for_anthropic(messages: List[dict], system_prompt: Optional[str]) -> Tuple[str, List[dict]]:
    """Anthropic takes system text separately, so system turns are folded into it."""
    system_parts = [system_prompt] if system_prompt else []
    turns: List[dict] = []
    for m in messages:
        role = m.get("role")
        content = str(m.get("content", ""))
        if role == "system":
            system_parts.append(content)
        elif role in ("user", "assistant"):
            turns.append({"role": role, "content": content})
    return "\n\n".join(p for p in system_parts if p).strip(), turns


def _usage_from(resp: Any, prompt_attr: str, completion_attr: str) -> LlmUsage:
    usage = getattr(resp, "usage", None)
    if not usage:
        return LlmUsage()
    return LlmUsage(
        prompt_tokens=getattr(usage, prompt_attr, 0) or 0,
        completion_tokens=getattr(usage, completion_attr, 0) or 0,
    )


# =============================================================================
# Registry
# =============================================================================

class ProviderRegistry:
    def is_provider_available(self, provider_id: str) -> bool:
        cfg = PROVIDERS.get(provider_id)
        if not cfg or not os.getenv(cfg.env_key_name, "").strip():
            return False
        try:
            importlib.import_module(cfg.sdk_module)
        except ImportError:
            logger.debug("[registry] %s key set but SDK %r not installed", cfg.display_name, cfg.sdk_module)
            return False
        return True

    def resolve_provider(self, preferred: Optional[str] = None) -> Optional[str]:
        """The preferred provider if given, else the first one with a key and SDK."""
        if preferred:
            return preferred
        return next((pid for pid in PROVIDERS if self.is_provider_available(pid)), None)

    async def llm_call(
        self,
        provider_id: Optional[str],
        model_id: Optional[str],
        messages: List[dict],
        system_prompt: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 2048,
        timeout_seconds: float = 60,
        json_mode: bool = False,
    ) -> LlmCallResult:
        chosen = self.resolve_provider(provider_id)
        if not chosen:
            return LlmCallResult(
                status=LlmCallStatus.PROVIDER_UNAVAILABLE,
                provider_id="none",
                model_id=model_id or "",
                error_message="No providers available (missing API keys and/or SDKs).",
            )

        cfg = PROVIDERS.get(chosen)
        if cfg is None:
            return LlmCallResult(
                status=LlmCallStatus.INVALID_REQUEST,
                provider_id=chosen,
                model_id=model_id or "",
                error_message=f"Unknown provider: {chosen}",
            )

        model = model_id or cfg.default_model
        if not self.is_provider_available(chosen):
            return LlmCallResult(
                status=LlmCallStatus.PROVIDER_UNAVAILABLE,
                provider_id=chosen,
                model_id=model,
                error_message=f"{cfg.display_name} unavailable: set {cfg.env_key_name} and install {cfg.sdk_module}",
            )

        caller = self._call_openai if chosen == "openai" else self._call_anthropic
        started = time.monotonic()
        try:
            result = await caller(
                api_key=os.getenv(cfg.env_key_name, ""),
                model_id=model,
                messages=messages,
                system_prompt=system_prompt,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout_seconds=timeout_seconds,
                json_mode=json_mode,
            )
        except Exception as exc:
            logger.exception("[registry] %s/%s call failed", chosen, model)
            return LlmCallResult(
                status=LlmCallStatus.ERROR,
                provider_id=chosen,
                model_id=model,
                error_message=str(exc),
                latency_ms=int((time.monotonic() - started) * 1000),
            )

        result.latency_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "[registry] %s/%s ok in %sms (%s tokens)",
            chosen, model, result.latency_ms, result.usage.total_tokens,
        )
        return result

    async def _call_openai(
        self,
        api_key: str,
        model_id: str,
        messages: List[dict],
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        timeout_seconds: float,
        json_mode: bool = False,
    ) -> LlmCallResult:
        from openai import AsyncOpenAI

        client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds)
        kwargs: Dict[str, Any] = dict(
            model=model_id,
            messages=_normalize_messages_for_openai(messages, system_prompt),
            temperature=temperature,
            max_tokens=int(max_tokens),
        )
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            resp = await client.chat.completions.create(**kwargs)
        except Exception as e:
            msg = str(e)
            if "max_tokens" not in msg or "max_completion_tokens" not in msg:
                raise
            logger.warning("[registry] %s rejects max_tokens; retrying with max_completion_tokens", model_id)
            kwargs["max_completion_tokens"] = kwargs.pop("max_tokens")
            resp = await client.chat.completions.create(**kwargs)

        content = (resp.choices[0].message.content or "") if resp.choices else ""
        return LlmCallResult(
            status=LlmCallStatus.SUCCESS,
            provider_id="openai",
            model_id=model_id,
            content=content,
            usage=_usage_from(resp, "prompt_tokens", "completion_tokens"),
        )

    async def _call_anthropic(
        self,
        api_key: str,
        model_id: str,
        messages: List[dict],
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        timeout_seconds: float,
        json_mode: bool = False,
    ) -> LlmCallResult:
        import anthropic

        client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout_seconds)
        system, turns = _normalize_messages_for_anthropic(messages, system_prompt)
        if json_mode:
            # No JSON mode switch on Messages; ask for it in the system text.
            system = f"{system}\n\nRespond with a single JSON object only.".strip()

        kwargs: Dict[str, Any] = dict(
            model=model_id,
            messages=turns,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if system:
            kwargs["system"] = system

        resp = await client.messages.create(**kwargs)
        text = "\n".join(
            getattr(block, "text", "")
            for block in (resp.content or [])
            if getattr(block, "type", None) == "text"
        ).strip()

        return LlmCallResult(
            status=LlmCallStatus.SUCCESS,
            provider_id="anthropic",
            model_id=model_id,
            content=text,
            usage=_usage_from(resp, "input_tokens", "output_tokens"),
        )


_registry: Optional[ProviderRegistry] = None


def get_provider_registry() -> ProviderRegistry:
    global _registry
    if _registry is None:
        _registry = ProviderRegistry()
    return _registry


async def llm_call(
    provider_id: Optional[str],
    model_id: Optional[str],
    messages: List[dict],
    system_prompt: Optional[str] = None,
    temperature: float = 0.2,
    max_tokens: int = 2048,
    timeout_seconds: float = 60,
    json_mode: bool = False,
) -> LlmCallResult:
    return await get_provider_registry().llm_call(
        provider_id=provider_id,
        model_id=model_id,
        messages=messages,
        system_prompt=system_prompt,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout_seconds=timeout_seconds,
        json_mode=json_mode,
    )


def is_provider_available(provider_id: str) -> bool:
    return get_provider_registry().is_provider_available(provider_id)


__all__ = [
    "LlmCallStatus",
    "LlmUsage",
    "LlmCallResult",
    "ProviderConfig",
    "PROVIDERS",
    "ProviderRegistry",
    "get_provider_registry",
    "llm_call",
    "is_provider_available",
]

"""Unified LLM client: routes to Anthropic (primary) or OpenAI (fallback)."""

from __future__ import annotations

import asyncio
import logging

import anthropic
from openai import AsyncOpenAI

from lead_pipeline.errors import ConfigurationError, PipelineError

logger = logging.getLogger(__name__)

# Maximum time (seconds) to wait for a single LLM call before giving up
_LLM_TIMEOUT = 180

# Track which provider is active (sticky after first successful call)
_active_provider: str | None = None
_anthropic_failed: bool = False


class _AnthropicBillingError(Exception):
    """Raised when Anthropic returns a billing/credit error."""


async def llm_complete(
    prompt: str,
    api_key_anthropic: str,
    api_key_openai: str,
    system: str = "",
    model_anthropic: str = "claude-sonnet-4-20250514",
    model_openai: str = "gpt-4o",
    max_tokens: int = 8192,
    temperature: float | None = None,
) -> str:
    """Send a prompt (with optional system prompt) and return the response text.

    Tries Anthropic first. A billing/credit error switches every later call
    in this process to OpenAI; other Anthropic errors fall back to OpenAI
    for this call only, when an OpenAI key is configured.
    """
    global _active_provider, _anthropic_failed

    if not _anthropic_failed and api_key_anthropic:
        try:
            return await asyncio.wait_for(
                _call_anthropic(prompt, system, api_key_anthropic, model_anthropic, max_tokens, temperature),
                timeout=_LLM_TIMEOUT,
            )
        except asyncio.TimeoutError:
            logger.warning("Anthropic call timed out after %ds", _LLM_TIMEOUT)
            if not api_key_openai:
                raise PipelineError(f"Anthropic LLM call timed out after {_LLM_TIMEOUT}s")
            logger.info("Falling back to OpenAI for this call")
        except _AnthropicBillingError:
            logger.warning("Anthropic billing error, switching to OpenAI for all future calls")
            _anthropic_failed = True
        except anthropic.APIError as e:
            logger.error("Anthropic error: %s", e)
            if not api_key_openai:
                raise
            logger.info("Falling back to OpenAI for this call")

    if api_key_openai:
        if _active_provider != "openai":
            _active_provider = "openai"
            logger.info("Using OpenAI (%s) for copy generation", model_openai)
        return await asyncio.wait_for(
            _call_openai(prompt, system, api_key_openai, model_openai, max_tokens, temperature),
            timeout=_LLM_TIMEOUT,
        )

    raise ConfigurationError(
        "No LLM provider available. Anthropic is unavailable and no "
        "OPENAI_API_KEY is set as a fallback."
    )


async def _call_anthropic(
    prompt: str,
    system: str,
    api_key: str,
    model: str,
    max_tokens: int,
    temperature: float | None,
) -> str:
    global _active_provider

    client = anthropic.AsyncAnthropic(api_key=api_key)
    kwargs = {}
    if system:
        kwargs["system"] = system
    if temperature is not None:
        kwargs["temperature"] = temperature
    try:
        response = await client.messages.create(
            model=model,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )
    except anthropic.APIStatusError as e:
        if e.status_code in (400, 401, 402):
            msg = str(e).lower()
            if "credit" in msg or "balance" in msg or "billing" in msg:
                raise _AnthropicBillingError(str(e)) from e
        raise

    _active_provider = "anthropic"
    return "".join(block.text for block in response.content if block.type == "text")


async def _call_openai(
    prompt: str,
    system: str,
    api_key: str,
    model: str,
    max_tokens: int,
    temperature: float | None,
) -> str:
    client = AsyncOpenAI(api_key=api_key)
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    kwargs = {}
    if temperature is not None:
        kwargs["temperature"] = temperature
    response = await client.chat.completions.create(
        model=model,
        max_tokens=max_tokens,
        messages=messages,
        **kwargs,
    )
    return response.choices[0].message.content or ""


def get_active_provider() -> str:
    """Return the currently active LLM provider name."""
    return _active_provider or "anthropic"


def reset_provider_state() -> None:
    """Reset provider state (for testing)."""
    global _active_provider, _anthropic_failed
    _active_provider = None
    _anthropic_failed = False

"""
Nova Assistant — Completion Client.

Single public function `complete()` that routes to the configured provider.
Provider is selected at startup via the LLM_PROVIDER env var.
Supports: groq (default, raw HTTPS), openai, anthropic.

Stateless across calls. Never retries; callers own the retry policy.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

import httpx

from nova.data.models import ConversationMessage, Role

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base class for completion-service failures."""


class CompletionError(LLMError):
    """The completion service answered with a non-success status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"Completion API error: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


class TransportError(LLMError):
    """The completion service could not be reached (network, DNS, timeout)."""


# Type alias for provider implementations:
# (api_key, model, base_url, messages, temperature, max_tokens, json_mode, timeout) -> text
_ProviderFn = Callable[
    [str, str, str, list[ConversationMessage], float, int, bool, float],
    Awaitable[str],
]

# ---------------------------------------------------------------------------
# Provider implementations
# ---------------------------------------------------------------------------

_GROQ_BASE_URL = "https://api.groq.com/openai/v1"


async def _complete_groq(
    api_key: str,
    model: str,
    base_url: str,
    messages: list[ConversationMessage],
    temperature: float,
    max_tokens: int,
    json_mode: bool,
    timeout: float,
) -> str:
    url = (base_url or _GROQ_BASE_URL).rstrip("/") + "/chat/completions"
    body: dict = {
        "model": model,
        "messages": [m.to_dict() for m in messages],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        body["response_format"] = {"type": "json_object"}

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {api_key}"},
            )
    except httpx.HTTPError as exc:
        raise TransportError(f"Could not reach completion API: {exc}") from exc

    if not resp.is_success:
        logger.error("Completion API error body: %s", resp.text)
        raise CompletionError(resp.status_code, resp.text)

    try:
        data = resp.json()
    except ValueError as exc:
        raise CompletionError(resp.status_code, "response body is not JSON") from exc

    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list):
        raise CompletionError(resp.status_code, "unexpected response shape")
    if not choices:
        return "{}" if json_mode else ""

    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        raise CompletionError(resp.status_code, "unexpected response shape")
    return message.get("content") or ("{}" if json_mode else "")


async def _complete_openai(
    api_key: str,
    model: str,
    base_url: str,
    messages: list[ConversationMessage],
    temperature: float,
    max_tokens: int,
    json_mode: bool,
    timeout: float,
) -> str:
    import openai

    client = openai.AsyncOpenAI(api_key=api_key, base_url=base_url or None, timeout=timeout)
    extra: dict = {}
    if json_mode:
        extra["response_format"] = {"type": "json_object"}

    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[m.to_dict() for m in messages],
            temperature=temperature,
            max_tokens=max_tokens,
            **extra,
        )
    except openai.APIStatusError as exc:
        raise CompletionError(exc.status_code, str(exc.message)) from exc
    except openai.APIConnectionError as exc:
        raise TransportError(f"Could not reach completion API: {exc}") from exc

    if not response.choices:
        return "{}" if json_mode else ""
    return response.choices[0].message.content or ("{}" if json_mode else "")


async def _complete_anthropic(
    api_key: str,
    model: str,
    base_url: str,
    messages: list[ConversationMessage],
    temperature: float,
    max_tokens: int,
    json_mode: bool,
    timeout: float,
) -> str:
    import anthropic

    # Anthropic takes the system prompt separately and has no JSON mode;
    # the system prompt itself demands JSON output.
    system = "\n\n".join(m.content for m in messages if m.role is Role.SYSTEM)
    chat = [m.to_dict() for m in messages if m.role is not Role.SYSTEM]

    client = anthropic.AsyncAnthropic(api_key=api_key, base_url=base_url or None, timeout=timeout)
    extra: dict = {"system": system} if system else {}

    try:
        response = await client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=chat,
            **extra,
        )
    except anthropic.APIStatusError as exc:
        raise CompletionError(exc.status_code, str(exc.message)) from exc
    except anthropic.APIConnectionError as exc:
        raise TransportError(f"Could not reach completion API: {exc}") from exc

    if not response.content:
        return "{}" if json_mode else ""
    return response.content[0].text


# ---------------------------------------------------------------------------
# Provider selection (runs once at first call)
# ---------------------------------------------------------------------------

_PROVIDERS: dict[str, tuple[_ProviderFn, str]] = {
    "groq":      (_complete_groq,      "llama-3.3-70b-versatile"),
    "openai":    (_complete_openai,    "gpt-4o-mini"),
    "anthropic": (_complete_anthropic, "claude-haiku-4-5-20251001"),
}


def _select_provider() -> tuple[_ProviderFn, str, str, str]:
    """Read settings and return (provider_fn, model, api_key, base_url)."""
    from nova.config import settings

    provider_name = settings.LLM_PROVIDER.lower()
    if provider_name not in _PROVIDERS:
        raise ValueError(
            f"Unknown LLM_PROVIDER={provider_name!r}. "
            f"Supported: {', '.join(_PROVIDERS)}"
        )

    fn, default_model = _PROVIDERS[provider_name]
    model = settings.LLM_MODEL or default_model

    logger.info("LLM provider: %s, model: %s", provider_name, model)
    return fn, model, settings.LLM_API_KEY, settings.LLM_BASE_URL


# Populated on first call to complete()
_provider_fn: _ProviderFn | None = None
_model: str = ""
_api_key: str = ""
_base_url: str = ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def complete(
    messages: list[ConversationMessage],
    temperature: float | None = None,
    max_tokens: int | None = None,
    json_mode: bool = True,
) -> str:
    """Send the conversation (system prompt first) to the configured provider.

    Returns the raw assistant text. Raises CompletionError on a non-success
    status and TransportError when the service cannot be reached. Callers
    should handle both.
    """
    global _provider_fn, _model, _api_key, _base_url
    from nova.config import settings

    if _provider_fn is None:
        _provider_fn, _model, _api_key, _base_url = _select_provider()

    return await _provider_fn(
        _api_key,
        _model,
        _base_url,
        messages,
        settings.LLM_TEMPERATURE if temperature is None else temperature,
        settings.LLM_MAX_TOKENS if max_tokens is None else max_tokens,
        json_mode,
        settings.LLM_TIMEOUT_SECONDS,
    )

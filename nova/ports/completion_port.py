"""Completion port: abstract interface for the external text-completion service.

Core modules depend on this protocol, never on a specific LLM provider.
"""

from __future__ import annotations

from typing import Protocol

from nova.data.models import ConversationMessage


class CompletionPort(Protocol):
    """Abstract completion interface used by core modules."""

    async def __call__(
        self,
        messages: list[ConversationMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = True,
    ) -> str: ...

"""
Nova Assistant — Conversation Models.

Chat history lives in the host; the core only ever forwards a bounded
trailing window of it to the completion service.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class ConversationMessage:
    """One chat turn. Immutable once created."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


def recent_window(
    history: list[ConversationMessage], size: int = 10,
) -> list[ConversationMessage]:
    """Return the trailing `size` messages; older context is discarded."""
    if size <= 0:
        return []
    return list(history[-size:])

"""Tests for nova.data.models — conversation messages."""

import dataclasses

import pytest

from nova.data.models import ConversationMessage, Role, recent_window


class TestConversationMessage:
    def test_to_dict(self):
        msg = ConversationMessage(Role.ASSISTANT, "Hi!")
        assert msg.to_dict() == {"role": "assistant", "content": "Hi!"}

    def test_immutable(self):
        msg = ConversationMessage(Role.USER, "x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            msg.content = "y"


class TestRecentWindow:
    def test_keeps_trailing_messages(self):
        history = [ConversationMessage(Role.USER, str(n)) for n in range(12)]
        window = recent_window(history)
        assert len(window) == 10
        assert window[0].content == "2"

    def test_short_history_untouched(self):
        history = [ConversationMessage(Role.USER, "a")]
        assert recent_window(history, 10) == history

    def test_zero_size(self):
        assert recent_window([ConversationMessage(Role.USER, "a")], 0) == []

"""Tests for nova.core.assistant — the end-to-end turn.

The completion client is always a stub; no network anywhere in this file.
"""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock

from nova.core.assistant import ERROR_TEXT, AssistantService, ResponseKind
from nova.core.dispatcher import BatchPolicy
from nova.core.llm import CompletionError, TransportError
from nova.core.outcomes import OutcomeStatus
from nova.data.models import ConversationMessage, Role
from nova.ports.capabilities import AppCapabilities


SCENARIO_A_REPLY = json.dumps({
    "actions": [
        {"action": "ADD_EXPENSE", "data": {"amount": 200, "category": "Food", "description": "Coffee"}},
        {"action": "ADD_EXPENSE", "data": {"amount": 500, "category": "Food", "description": "Groceries"}},
    ],
    "response_text": "Logged ৳200 for coffee and ৳500 for groceries! 🛒",
})


def _service(registry, reply="{}", **kwargs):
    completion = AsyncMock(return_value=reply) if isinstance(reply, str) else reply
    return AssistantService(registry, completion=completion, **kwargs), completion


# ---------------------------------------------------------------------------
# process_message
# ---------------------------------------------------------------------------


class TestProcessMessage:
    @pytest.mark.asyncio
    async def test_batch_reply_becomes_intents(self, registry):
        service, _ = _service(registry, SCENARIO_A_REPLY)
        intents = await service.process_message("spent 200 on coffee and 500 on groceries")

        assert [i.action for i in intents] == ["ADD_EXPENSE", "ADD_EXPENSE"]
        assert [i.data["amount"] for i in intents] == [200, 500]
        assert all(i.data["category"] == "Food" for i in intents)

    @pytest.mark.asyncio
    async def test_messages_are_system_history_user(self, registry):
        service, completion = _service(registry, history_window=2)
        history = [
            ConversationMessage(Role.USER, "one"),
            ConversationMessage(Role.ASSISTANT, "two"),
            ConversationMessage(Role.SYSTEM, "ignored"),
            ConversationMessage(Role.USER, "three"),
        ]

        await service.process_message("four", history, page_context="User is viewing /tasks")

        messages = completion.await_args.args[0]
        assert messages[0].role is Role.SYSTEM
        assert messages[0].content.endswith("CURRENT APP CONTEXT:\nUser is viewing /tasks")
        assert [m.content for m in messages[1:]] == ["two", "three", "four"]
        assert messages[-1].role is Role.USER

    @pytest.mark.asyncio
    async def test_default_window_is_ten(self, registry):
        service, completion = _service(registry)
        history = [ConversationMessage(Role.USER, str(n)) for n in range(15)]

        await service.process_message("latest", history)

        messages = completion.await_args.args[0]
        assert len(messages) == 12
        assert messages[1].content == "5"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        CompletionError(500, "upstream down"),
        TransportError("no route to host"),
        RuntimeError("unexpected"),
    ])
    async def test_completion_failure_gives_chat_fallback(self, registry, error):
        service, _ = _service(registry, AsyncMock(side_effect=error))
        intents = await service.process_message("hello")

        assert len(intents) == 1
        assert intents[0].action == "CHAT"
        assert intents[0].response_text == ERROR_TEXT

    @pytest.mark.asyncio
    async def test_unknown_actions_are_dropped(self, registry):
        reply = json.dumps({
            "actions": [
                {"action": "SUMMON_DRAGON", "data": {}},
                {"action": "ADD_HABIT", "data": {"name": "Run"}},
            ],
            "response_text": "ok",
        })
        service, _ = _service(registry, reply)
        intents = await service.process_message("x")
        assert [i.action for i in intents] == ["ADD_HABIT"]

    @pytest.mark.asyncio
    async def test_all_unknown_becomes_chat_with_model_text(self, registry):
        reply = json.dumps({"action": "GET_SUMMARY", "data": {}, "response_text": "You're doing great!"})
        service, _ = _service(registry, reply)
        intents = await service.process_message("how am I doing")
        assert len(intents) == 1
        assert intents[0].action == "CHAT"
        assert intents[0].response_text == "You're doing great!"


# ---------------------------------------------------------------------------
# handle_message
# ---------------------------------------------------------------------------


class TestHandleMessage:
    @pytest.mark.asyncio
    async def test_two_expenses_in_one_message(self, registry):
        finance = AsyncMock()
        finance.entries, finance.budgets, finance.savings_goals = [], [], []

        service, _ = _service(registry, SCENARIO_A_REPLY)
        reply = await service.handle_message(
            "spent 200 on coffee and 500 on groceries", AppCapabilities(finance=finance),
        )

        assert reply.kind is ResponseKind.ACTIONS
        assert reply.message.startswith("Logged ৳200")
        assert [o.status for o in reply.result.outcomes] == [OutcomeStatus.DONE, OutcomeStatus.DONE]
        assert finance.add_entry.await_count == 2
        entries = [c.args[0] for c in finance.add_entry.await_args_list]
        assert [e["type"] for e in entries] == ["expense", "expense"]
        assert [e["amount"] for e in entries] == [200.0, 500.0]

    @pytest.mark.asyncio
    async def test_withdraw_scenario(self, registry, capabilities):
        await capabilities.finance.add_budget({"name": "Laptop Fund", "type": "savings", "target_amount": 50000})
        await capabilities.finance.add_to_savings(capabilities.finance.savings_goals[0]["id"], 3000)

        reply_json = json.dumps({
            "action": "WITHDRAW_FROM_SAVINGS",
            "data": {"name": "Laptop", "amount": 1000},
            "response_text": "Withdrew ৳1000",
        })
        service, _ = _service(registry, reply_json)
        reply = await service.handle_message("take 1000 out of laptop savings", capabilities)

        assert reply.result.outcomes[0].ok
        assert capabilities.finance.savings_goals[0]["current_amount"] == 2000.0
        assert capabilities.finance.entries[0]["category"] == "Savings: Laptop Fund"

    @pytest.mark.asyncio
    async def test_navigation(self, registry, capabilities):
        service, _ = _service(
            registry, '{"action": "NAVIGATE", "data": {"path": "study"}, "response_text": "Opening Study"}',
        )
        reply = await service.handle_message("open study", capabilities)
        assert reply.kind is ResponseKind.NAVIGATE
        assert reply.navigate_to == "/study"

    @pytest.mark.asyncio
    async def test_chat(self, registry, capabilities):
        service, _ = _service(registry, '{"action": "CHAT", "data": {}, "response_text": "Hi!"}')
        reply = await service.handle_message("hey", capabilities)
        assert reply.kind is ResponseKind.CHAT
        assert reply.message == "Hi!"
        assert reply.navigate_to is None

    @pytest.mark.asyncio
    async def test_abort_policy_from_constructor(self, registry, capabilities):
        reply_json = json.dumps({
            "actions": [
                {"action": "WITHDRAW_FROM_SAVINGS", "data": {"name": "x", "amount": 1}},
                {"action": "ADD_NOTE", "data": {"title": "after"}},
            ],
            "response_text": "ok",
        })
        capabilities.finance.update_budget = AsyncMock()
        await capabilities.finance.add_budget({"name": "x", "type": "savings", "target_amount": 5})
        capabilities.finance.add_entry = AsyncMock(side_effect=RuntimeError("disk full"))

        service, _ = _service(registry, reply_json, policy=BatchPolicy.ABORT)
        reply = await service.handle_message("x", capabilities)

        assert reply.result.aborted
        assert reply.result.outcomes[0].status is OutcomeStatus.FAILED
        assert capabilities.notes.notes == []

    @pytest.mark.asyncio
    async def test_stale_reply_is_not_dispatched(self, registry, capabilities):
        first_reply = asyncio.Event()

        async def completion(messages, **kwargs):
            if messages[-1].content == "first":
                await first_reply.wait()
                return '{"action": "ADD_NOTE", "data": {"title": "from first"}, "response_text": "one"}'
            return '{"action": "ADD_NOTE", "data": {"title": "from second"}, "response_text": "two"}'

        service = AssistantService(registry, completion=completion)

        first = asyncio.create_task(service.handle_message("first", capabilities))
        await asyncio.sleep(0)
        second = await service.handle_message("second", capabilities)
        first_reply.set()
        stale = await first

        assert stale.stale
        assert stale.kind is ResponseKind.STALE
        assert stale.result.outcomes == []
        assert not second.stale
        assert [n["title"] for n in capabilities.notes.notes] == ["from second"]

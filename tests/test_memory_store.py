"""Tests for nova.data.memory_store — in-memory capability implementations."""

import pytest
from unittest.mock import patch

from nova.config import settings
from nova.data.memory_store import MemoryFinanceStore, MemoryHabitStore, MemoryStudyStore, MemoryTaskStore
from nova.modules.common import today
from nova.ports.capabilities import CapabilityError


class TestFinanceStore:
    @pytest.mark.asyncio
    async def test_savings_goals_are_a_view_of_budgets(self):
        store = MemoryFinanceStore()
        await store.add_budget({"name": "Food", "type": "budget", "target_amount": 6000})
        await store.add_budget({"name": "Laptop", "type": "savings", "target_amount": 50000})

        assert [b["name"] for b in store.budgets] == ["Food", "Laptop"]
        assert [s["name"] for s in store.savings_goals] == ["Laptop"]
        assert store.savings_goals[0]["current_amount"] == 0.0

    @pytest.mark.asyncio
    async def test_add_to_budget_rejected(self):
        store = MemoryFinanceStore()
        await store.add_budget({"name": "Food", "type": "budget", "target_amount": 6000})
        with pytest.raises(CapabilityError):
            await store.add_to_savings(store.budgets[0]["id"], 100)

    @pytest.mark.asyncio
    async def test_unknown_id_raises(self):
        store = MemoryFinanceStore()
        with pytest.raises(CapabilityError):
            await store.delete_entry("nope")
        with pytest.raises(CapabilityError):
            await store.update_budget({"id": "nope", "target_amount": 1})

    @pytest.mark.asyncio
    async def test_snapshots_are_copies_of_the_list(self):
        store = MemoryFinanceStore()
        snapshot = store.entries
        await store.add_entry({"type": "expense", "amount": 1})
        assert snapshot == []
        assert len(store.entries) == 1


class TestTaskStore:
    @pytest.mark.asyncio
    async def test_income_task_tops_up_linked_savings(self):
        finance = MemoryFinanceStore()
        await finance.add_budget({"name": "Laptop", "type": "savings", "target_amount": 50000})
        goal_id = finance.savings_goals[0]["id"]
        tasks = MemoryTaskStore(finance)
        await tasks.add_task({
            "title": "Freelance gig", "context_type": "finance", "finance_type": "income",
            "expected_cost": 2000, "context_id": goal_id,
        })

        await tasks.complete_task(tasks.tasks[0]["id"])

        assert finance.entries[0]["type"] == "income"
        assert finance.savings_goals[0]["current_amount"] == 2000.0

    @pytest.mark.asyncio
    async def test_plain_task_records_nothing(self):
        finance = MemoryFinanceStore()
        tasks = MemoryTaskStore(finance)
        await tasks.add_task({"title": "Read", "context_type": "general"})
        await tasks.complete_task(tasks.tasks[0]["id"])
        assert finance.entries == []

    @pytest.mark.asyncio
    async def test_completion_entry_uses_configured_calendar(self):
        finance = MemoryFinanceStore()
        tasks = MemoryTaskStore(finance)
        await tasks.add_task({
            "title": "Buy cable", "context_type": "finance", "finance_type": "expense", "expected_cost": 300,
        })

        with patch.object(settings, "TIMEZONE", "Etc/GMT-14"):
            await tasks.complete_task(tasks.tasks[0]["id"])
            expected = today()

        assert finance.entries[0]["date"] == expected


class TestHabitStore:
    @pytest.mark.asyncio
    async def test_streak_counts_once_per_local_day(self):
        store = MemoryHabitStore()
        await store.add_habit({"name": "Run"})
        habit_id = store.habits[0]["id"]

        with patch.object(settings, "TIMEZONE", "Etc/GMT+12"):
            await store.complete_habit(habit_id)
            await store.complete_habit(habit_id)
            expected = today()

        habit = store.habits[0]
        assert habit["streak_count"] == 1
        assert habit["last_completed"] == expected


class TestStudyStore:
    @pytest.mark.asyncio
    async def test_chapter_needs_subject(self):
        store = MemoryStudyStore()
        with pytest.raises(CapabilityError):
            await store.add_chapter({"subject_id": "missing", "name": "Waves"})

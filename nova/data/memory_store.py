"""
Nova Assistant — In-memory stores.

Dict-backed implementations of every capability protocol. The console host
runs on them and the tests use them as fakes. Records are plain dicts with
uuid string ids; collections are returned as fresh list snapshots in
insertion order.
"""

from __future__ import annotations

import logging
import uuid

from nova.modules.common import today
from nova.ports.capabilities import AppCapabilities, CapabilityError

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class _Table:
    """Ordered id -> record mapping with CapabilityError on missing ids."""

    def __init__(self, kind: str) -> None:
        self._kind = kind
        self._rows: dict[str, dict] = {}

    def rows(self) -> list[dict]:
        return list(self._rows.values())

    def insert(self, record: dict) -> dict:
        row = {k: v for k, v in record.items() if v is not None}
        row["id"] = str(row.get("id") or _new_id())
        self._rows[row["id"]] = row
        logger.debug("Inserted %s %s", self._kind, row["id"])
        return row

    def get(self, record_id: str) -> dict:
        try:
            return self._rows[record_id]
        except KeyError:
            raise CapabilityError(f"No {self._kind} with id {record_id!r}") from None

    def update(self, changes: dict) -> dict:
        row = self.get(str(changes.get("id")))
        row.update({k: v for k, v in changes.items() if k != "id"})
        return row

    def delete(self, record_id: str) -> None:
        self.get(record_id)
        del self._rows[record_id]


# ---------------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------------


class MemoryFinanceStore:
    def __init__(self) -> None:
        self._entries = _Table("entry")
        self._budgets = _Table("budget")

    @property
    def entries(self) -> list[dict]:
        return self._entries.rows()

    @property
    def budgets(self) -> list[dict]:
        return self._budgets.rows()

    @property
    def savings_goals(self) -> list[dict]:
        return [b for b in self._budgets.rows() if b.get("type") == "savings"]

    async def add_entry(self, entry: dict) -> None:
        self._entries.insert(entry)

    async def update_entry(self, changes: dict) -> None:
        self._entries.update(changes)

    async def delete_entry(self, entry_id: str) -> None:
        self._entries.delete(entry_id)

    async def add_budget(self, budget: dict) -> None:
        row = dict(budget)
        if row.get("type") == "savings":
            row.setdefault("current_amount", 0.0)
        self._budgets.insert(row)

    async def update_budget(self, changes: dict) -> None:
        self._budgets.update(changes)

    async def delete_budget(self, budget_id: str) -> None:
        self._budgets.delete(budget_id)

    async def add_to_savings(self, savings_id: str, amount: float) -> None:
        goal = self._budgets.get(savings_id)
        if goal.get("type") != "savings":
            raise CapabilityError(f"{goal.get('name')!r} is not a savings goal")
        goal["current_amount"] = float(goal.get("current_amount") or 0) + amount


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class MemoryTaskStore:
    """Completing a finance-linked task records its expected cost in `finance`."""

    def __init__(self, finance: MemoryFinanceStore | None = None) -> None:
        self._tasks = _Table("task")
        self._finance = finance

    @property
    def tasks(self) -> list[dict]:
        return self._tasks.rows()

    async def add_task(self, task: dict) -> None:
        self._tasks.insert(task)

    async def update_task(self, changes: dict) -> None:
        self._tasks.update(changes)

    async def delete_task(self, task_id: str) -> None:
        self._tasks.delete(task_id)

    async def complete_task(self, task_id: str) -> None:
        task = self._tasks.update({"id": task_id, "status": "done"})
        cost = task.get("expected_cost")
        if self._finance is None or task.get("context_type") != "finance" or not cost:
            return
        entry_type = task.get("finance_type") or "expense"
        await self._finance.add_entry({
            "type": entry_type,
            "amount": float(cost),
            "category": "Task" if entry_type == "expense" else "Other",
            "description": task.get("title", ""),
            "date": today(),
        })
        if entry_type == "income" and task.get("context_id"):
            await self._finance.add_to_savings(task["context_id"], float(cost))


# ---------------------------------------------------------------------------
# Notes / habits
# ---------------------------------------------------------------------------


class MemoryNoteStore:
    def __init__(self) -> None:
        self._notes = _Table("note")

    @property
    def notes(self) -> list[dict]:
        return self._notes.rows()

    async def add_note(self, note: dict) -> None:
        self._notes.insert(note)

    async def delete_note(self, note_id: str) -> None:
        self._notes.delete(note_id)


class MemoryHabitStore:
    def __init__(self) -> None:
        self._habits = _Table("habit")

    @property
    def habits(self) -> list[dict]:
        return self._habits.rows()

    async def add_habit(self, habit: dict) -> None:
        self._habits.insert({"streak_count": 0, **habit})

    async def complete_habit(self, habit_id: str) -> None:
        habit = self._habits.get(habit_id)
        stamp = today()
        if habit.get("last_completed") == stamp:
            return
        habit["streak_count"] = int(habit.get("streak_count") or 0) + 1
        habit["last_completed"] = stamp

    async def delete_habit(self, habit_id: str) -> None:
        self._habits.delete(habit_id)


# ---------------------------------------------------------------------------
# Study
# ---------------------------------------------------------------------------


class MemoryStudyStore:
    def __init__(self) -> None:
        self._subjects = _Table("subject")
        self._chapters = _Table("chapter")
        self._parts = _Table("part")
        self._presets = _Table("preset")
        self.applied_presets: list[dict] = []

    @property
    def subjects(self) -> list[dict]:
        return self._subjects.rows()

    @property
    def chapters(self) -> list[dict]:
        return self._chapters.rows()

    @property
    def parts(self) -> list[dict]:
        return self._parts.rows()

    @property
    def presets(self) -> list[dict]:
        return self._presets.rows()

    def add_preset(self, name: str, parent_id: str | None = None) -> dict:
        return self._presets.insert({"name": name, "parent_id": parent_id})

    async def add_subject(self, subject: dict) -> None:
        self._subjects.insert(subject)

    async def delete_subject(self, subject_id: str) -> None:
        self._subjects.delete(subject_id)
        for chapter in self.chapters:
            if chapter.get("subject_id") == subject_id:
                await self.delete_chapter(chapter["id"])

    async def add_chapter(self, chapter: dict) -> None:
        self._subjects.get(str(chapter.get("subject_id")))
        self._chapters.insert({"progress_percentage": 0.0, **chapter})

    async def delete_chapter(self, chapter_id: str) -> None:
        self._chapters.delete(chapter_id)
        for part in self.parts:
            if part.get("chapter_id") == chapter_id:
                self._parts.delete(part["id"])

    async def add_part(self, part: dict) -> None:
        self._chapters.get(str(part.get("chapter_id")))
        self._parts.insert({"progress_percentage": 0.0, **part})

    async def delete_part(self, part_id: str) -> None:
        self._parts.delete(part_id)

    async def update_progress(self, progress: dict) -> None:
        table = self._parts if progress.get("target") == "part" else self._chapters
        changes = {k: v for k, v in progress.items() if k != "target"}
        table.update(changes)

    async def apply_preset(self, application: dict) -> None:
        self._presets.get(str(application.get("preset_id")))
        self._chapters.get(str(application.get("chapter_id")))
        self.applied_presets.append(dict(application))


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


class MemoryInventoryStore:
    def __init__(self) -> None:
        self._items = _Table("item")

    @property
    def items(self) -> list[dict]:
        return self._items.rows()

    async def add_item(self, item: dict) -> None:
        self._items.insert({"status": "active", **item})

    async def update_item(self, item: dict) -> None:
        self._items.update(item)

    async def delete_item(self, item_id: str) -> None:
        self._items.delete(item_id)


def memory_capabilities() -> AppCapabilities:
    """A full, empty set of in-memory stores wired together."""
    finance = MemoryFinanceStore()
    return AppCapabilities(
        finance=finance,
        tasks=MemoryTaskStore(finance),
        notes=MemoryNoteStore(),
        habits=MemoryHabitStore(),
        study=MemoryStudyStore(),
        inventory=MemoryInventoryStore(),
    )

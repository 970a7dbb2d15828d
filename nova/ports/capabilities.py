"""Capability ports: the narrow read/write interface each domain executor gets.

Core modules depend on these protocols, never on a specific data layer.
Collections are snapshots supplied by the host on every dispatch; records may
be plain mappings or attribute objects. Mutations perform the actual
persistence and raise CapabilityError on failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

Record = Any


class CapabilityError(Exception):
    """Raised by a host mutation when it cannot be carried out."""


class FinanceCapabilities(Protocol):
    entries: Sequence[Record]          # {id, type, amount, category, description, date, is_special}
    budgets: Sequence[Record]          # {id, name, type: "budget" | "savings", target_amount, period, ...}
    savings_goals: Sequence[Record]    # {id, name, target_amount, current_amount}

    async def add_entry(self, entry: dict) -> None: ...

    async def update_entry(self, changes: dict) -> None: ...

    async def delete_entry(self, entry_id: str) -> None: ...

    async def add_budget(self, budget: dict) -> None: ...

    async def update_budget(self, changes: dict) -> None: ...

    async def delete_budget(self, budget_id: str) -> None: ...

    async def add_to_savings(self, savings_id: str, amount: float) -> None: ...


class TaskCapabilities(Protocol):
    tasks: Sequence[Record]            # {id, title, status, priority, due_date, context_type, ...}

    async def add_task(self, task: dict) -> None: ...

    async def update_task(self, changes: dict) -> None: ...

    async def delete_task(self, task_id: str) -> None: ...

    async def complete_task(self, task_id: str) -> None: ...


class NoteCapabilities(Protocol):
    notes: Sequence[Record]            # {id, title, content, tags}

    async def add_note(self, note: dict) -> None: ...

    async def delete_note(self, note_id: str) -> None: ...


class HabitCapabilities(Protocol):
    habits: Sequence[Record]           # {id, name, frequency, streak_count}

    async def add_habit(self, habit: dict) -> None: ...

    async def complete_habit(self, habit_id: str) -> None: ...

    async def delete_habit(self, habit_id: str) -> None: ...


class StudyCapabilities(Protocol):
    subjects: Sequence[Record]         # {id, name}
    chapters: Sequence[Record]         # {id, subject_id, name, progress_percentage}
    parts: Sequence[Record]            # {id, chapter_id, name, progress_percentage}
    presets: Sequence[Record]          # {id, name, parent_id}

    async def add_subject(self, subject: dict) -> None: ...

    async def delete_subject(self, subject_id: str) -> None: ...

    async def add_chapter(self, chapter: dict) -> None: ...

    async def delete_chapter(self, chapter_id: str) -> None: ...

    async def add_part(self, part: dict) -> None: ...

    async def delete_part(self, part_id: str) -> None: ...

    async def update_progress(self, progress: dict) -> None: ...

    async def apply_preset(self, application: dict) -> None: ...


class InventoryCapabilities(Protocol):
    items: Sequence[Record]            # {id, item_name, category, quantity, status, cost, ...}

    async def add_item(self, item: dict) -> None: ...

    async def update_item(self, item: dict) -> None: ...

    async def delete_item(self, item_id: str) -> None: ...


@dataclass
class AppCapabilities:
    """Every domain's capability subset, assembled fresh by the host per request."""

    finance: FinanceCapabilities | None = None
    tasks: TaskCapabilities | None = None
    notes: NoteCapabilities | None = None
    habits: HabitCapabilities | None = None
    study: StudyCapabilities | None = None
    inventory: InventoryCapabilities | None = None

    def for_domain(self, name: str) -> Any:
        """Return the subset for one domain, or None when the host supplied none."""
        return getattr(self, name, None)

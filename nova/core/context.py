"""
Nova Assistant — App context builder.

Renders a plain-text snapshot of the user's data for the system prompt's
CURRENT APP CONTEXT block. Each section falls back to a "No ..." line so the
model can tell an empty domain from a missing one.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from nova.config import settings
from nova.core.resolver import field_value
from nova.modules.common import local_now

if TYPE_CHECKING:
    from nova.ports.capabilities import AppCapabilities

RECENT_FINANCE_LIMIT = 10


def _money(amount: Any) -> str:
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    text = f"{value:,.2f}".rstrip("0").rstrip(".")
    return f"{settings.CURRENCY_SYMBOL}{text}"


def _section(title: str, lines: Iterable[str], empty: str) -> str:
    body = "\n".join(lines) or empty
    return f"[{title}]\n{body}"


def _records(subset: Any, attr: str) -> list:
    if subset is None:
        return []
    return list(getattr(subset, attr, None) or ())


def _finance_section(entries: list) -> str:
    recent = [
        f"- {'+' if field_value(e, 'type') == 'income' else '-'}{_money(field_value(e, 'amount'))}: "
        f"{field_value(e, 'description') or ''} ({field_value(e, 'category') or 'Other'})"
        for e in entries[:RECENT_FINANCE_LIMIT]
    ]
    income = sum(float(field_value(e, "amount") or 0) for e in entries if field_value(e, "type") == "income")
    expenses = sum(float(field_value(e, "amount") or 0) for e in entries if field_value(e, "type") == "expense")
    body = "\n".join(recent) or "No recent transactions"
    return (
        f"[RECENT FINANCE]\n{body}\n"
        f"Total Income: {_money(income)}\n"
        f"Total Expenses: {_money(expenses)}"
    )


def _study_lines(subjects: list, chapters: list) -> list[str]:
    lines = []
    for subject in subjects:
        sid = field_value(subject, "id")
        names = [field_value(c, "name") for c in chapters if field_value(c, "subject_id") == sid]
        suffix = f": {', '.join(str(n) for n in names)}" if names else ""
        lines.append(f"- {field_value(subject, 'name')}{suffix}")
    return lines


def build_app_context(
    capabilities: AppCapabilities,
    today: date | None = None,
    now: datetime | None = None,
) -> str:
    """Summarise every supplied domain as prompt text.

    Date and time default to the wall clock in the configured timezone, the
    same calendar the executors stamp records with.
    """
    now = now or local_now()
    today = today or now.date()

    tasks = [t for t in _records(capabilities.tasks, "tasks") if field_value(t, "status") in (None, "todo")]
    entries = _records(capabilities.finance, "entries")
    budgets = [b for b in _records(capabilities.finance, "budgets") if field_value(b, "type") == "budget"]
    savings = _records(capabilities.finance, "savings_goals")
    habits = _records(capabilities.habits, "habits")
    notes = _records(capabilities.notes, "notes")
    subjects = _records(capabilities.study, "subjects")
    chapters = _records(capabilities.study, "chapters")
    items = _records(capabilities.inventory, "items")

    sections = [
        f"Current Date: {today.isoformat()}\nCurrent Time: {now:%H:%M}",
        _section(
            "ACTIVE TASKS",
            (
                f"- [{field_value(t, 'priority') or 'medium'}] {field_value(t, 'title')} "
                f"(Due: {field_value(t, 'due_date') or 'n/a'})"
                for t in tasks
            ),
            "No active tasks",
        ),
        _finance_section(entries),
        _section(
            "BUDGETS",
            (
                f"- {field_value(b, 'name')}: {_money(field_value(b, 'target_amount'))} "
                f"({field_value(b, 'period') or 'monthly'})"
                for b in budgets
            ),
            "No budgets",
        ),
        _section(
            "SAVINGS GOALS",
            (
                f"- {field_value(s, 'name')}: {_money(field_value(s, 'current_amount'))}"
                f"/{_money(field_value(s, 'target_amount'))}"
                for s in savings
            ),
            "No savings goals",
        ),
        _section(
            "HABITS",
            (
                f"- {field_value(h, 'name') or field_value(h, 'habit_name')} "
                f"(Streak: {field_value(h, 'streak_count') or 0})"
                for h in habits
            ),
            "No habits tracked",
        ),
        _section(
            "NOTES",
            (
                f"- {field_value(n, 'title')}" + (f" ({field_value(n, 'tags')})" if field_value(n, "tags") else "")
                for n in notes
            ),
            "No notes",
        ),
        _section("STUDY", _study_lines(subjects, chapters), "No study subjects"),
        _section(
            "INVENTORY",
            (
                f"- {field_value(i, 'item_name')} x{field_value(i, 'quantity') or 1} "
                f"({field_value(i, 'category') or 'General'}, {field_value(i, 'status') or 'active'})"
                for i in items
            ),
            "No inventory items",
        ),
    ]
    return "\n\n".join(sections)

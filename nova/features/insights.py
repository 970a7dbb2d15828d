"""
Nova Assistant — Insights.

Short advisory texts (budget advice, a daily briefing, study tips). Each one
is an ordinary chat turn through the assistant pipeline; only the reply text
is kept.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nova.config import settings

if TYPE_CHECKING:
    from nova.core.assistant import AssistantService


@dataclass
class DailyStats:
    tasks_count: int = 0
    habits_completed: int = 0
    habits_total: int = 0
    budget_used: float = 0.0
    budget_total: float = 0.0


def _fmt(amount: float) -> str:
    return f"{settings.CURRENCY_SYMBOL}{amount:g}"


async def _ask(assistant: AssistantService, prompt: str) -> str:
    intents = await assistant.process_message(prompt)
    return intents[0].response_text


async def analyze_budget(expenses: list[dict], income: float, assistant: AssistantService) -> str:
    """2-3 tips based on spending per category against income."""
    by_category: dict[str, float] = defaultdict(float)
    for expense in expenses:
        by_category[expense.get("category") or "Other"] += float(expense.get("amount") or 0)
    total = sum(by_category.values())

    breakdown = ", ".join(f"{cat}: {_fmt(amt)}" for cat, amt in by_category.items()) or "none"
    prompt = (
        "Analyze this budget data and give brief advice:\n"
        f"Income: {_fmt(income)}\n"
        f"Total Expenses: {_fmt(total)}\n"
        f"Expenses by category: {breakdown}\n"
        f"Remaining: {_fmt(income - total)}\n\n"
        "Give 2-3 short tips. Reply with CHAT."
    )
    return await _ask(assistant, prompt)


async def daily_briefing(stats: DailyStats, assistant: AssistantService) -> str:
    prompt = (
        "Generate a brief, encouraging daily briefing. "
        f"Stats: {stats.tasks_count} tasks today, "
        f"{stats.habits_completed}/{stats.habits_total} habits done, "
        f"{_fmt(stats.budget_used)}/{_fmt(stats.budget_total)} budget used. "
        "Keep it under 50 words. Reply with CHAT."
    )
    return await _ask(assistant, prompt)


async def study_tips(subject: str, assistant: AssistantService) -> str:
    prompt = (
        f"Give me 3 quick, practical study tips for learning {subject}. "
        "Keep each tip to 1-2 sentences. Reply with CHAT."
    )
    return await _ask(assistant, prompt)

"""
Nova Assistant — Finance module.

Income and expense entries, budgets, and savings goals. Budgets and savings
goals share one store (distinguished by `type`); savings goals also come as
their own snapshot. Withdrawing from savings is a two-step saga: the goal's
balance is lowered, then a matching expense entry is recorded.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator

from nova.core.outcomes import ActionOutcome
from nova.core.registry import ModuleDescriptor
from nova.core.resolver import DEFAULT_RESOLVER, ResolutionStrategy, field_value, find_by_id, resolve_record
from nova.core.saga import SagaStep, run_saga
from nova.modules.common import Payload, only_set, run_handler, today
from nova.ports.capabilities import FinanceCapabilities

logger = logging.getLogger(__name__)

FINANCE_ACTIONS = (
    "ADD_EXPENSE",
    "ADD_INCOME",
    "DELETE_EXPENSE",
    "EDIT_EXPENSE",
    "EDIT_INCOME",
    "ADD_BUDGET",
    "UPDATE_BUDGET",
    "DELETE_BUDGET",
    "ADD_SAVINGS",
    "ADD_TO_SAVINGS",
    "WITHDRAW_FROM_SAVINGS",
    "UPDATE_SAVINGS",
    "DELETE_SAVINGS",
    "ADD_SPECIAL_EXPENSE",
    "ADD_SPECIAL_INCOME",
    "ADD_SPECIAL_BUDGET",
    "ADD_SPECIAL_SAVINGS",
    "TOGGLE_SPECIAL",
)

FINANCE_PROMPT = """\
FINANCE RULES:
- If the user mentions an amount but it is unclear whether it is income or an expense, reply with CHAT and ask which one.
- Infer the category from the description whenever you reasonably can; ask only when there is no clue at all.
- Expense categories: Food, Transport, Entertainment, Shopping, Bills, Health, Education, Other
- Income categories: Salary, Freelance, Gift, Investment, Other
- Dates are ISO (YYYY-MM-DD). A date without a year ("1 feb") means the current year.

ADD_EXPENSE / ADD_INCOME data: amount (number), category (string), description (optional), date (optional)
DELETE_EXPENSE data: id, or description (text to find the entry), or amount
EDIT_EXPENSE / EDIT_INCOME data: id, or description (text to find the entry); then any of amount, category, date, new_description

SPECIAL ITEMS (one-off or unusual: emergencies, gifts, windfalls, big purchases):
- "special expense/income/budget/savings" → the matching ADD_SPECIAL_* action with the same data as the regular one
- TOGGLE_SPECIAL data: id of the entry whose special flag should flip
- "add special expense 5000 birthday party" → ADD_SPECIAL_EXPENSE {amount: 5000, category: "Other", description: "Birthday party"}
- "create special budget 50000 for wedding" → ADD_SPECIAL_BUDGET {name: "Wedding", target_amount: 50000}

BUDGETS:
ADD_BUDGET data: name, target_amount, period ('weekly'/'monthly'/'yearly'), category (optional), start_date (optional, for future budgets)
UPDATE_BUDGET data: name (to find it) and any of target_amount, period, category, start_date
DELETE_BUDGET data: name
- "set monthly budget 10000" → ADD_BUDGET {name: "Monthly Budget", target_amount: 10000, period: "monthly"}
- "set budget for march 15000" → ADD_BUDGET {name: "March Budget", target_amount: 15000, period: "monthly", start_date: "<year>-03-01"}

SAVINGS GOALS:
ADD_SAVINGS data: name, target_amount
UPDATE_SAVINGS data: name (to find it) and any of target_amount, current_amount
ADD_TO_SAVINGS data: name (or id), amount
WITHDRAW_FROM_SAVINGS data: name, amount. This ALSO records an expense entry in the finance history.
DELETE_SAVINGS data: name
- "create savings goal for laptop 50000" → ADD_SAVINGS {name: "Laptop", target_amount: 50000}
- "add 5000 to laptop savings" → ADD_TO_SAVINGS {name: "Laptop", amount: 5000}
- "take 1000 from laptop savings" → WITHDRAW_FROM_SAVINGS {name: "Laptop", amount: 1000}"""


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

Period = Literal["weekly", "monthly", "yearly"]


class _PeriodPayload(Payload):
    @field_validator("period", mode="before", check_fields=False)
    @classmethod
    def _lower_period(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


class NewEntry(Payload):
    amount: float
    category: str = "Other"
    description: str = ""
    date: str | None = None


class EntryLookup(Payload):
    id: str | None = None
    description: str | None = None
    amount: float | None = None


class EntryEdit(Payload):
    id: str | None = None
    description: str | None = None
    new_description: str | None = None
    amount: float | None = None
    category: str | None = None
    date: str | None = None


class ToggleSpecial(Payload):
    id: str


class NewBudget(_PeriodPayload):
    name: str = "Monthly Budget"
    target_amount: float
    period: Period = "monthly"
    category: str | None = None
    start_date: str | None = None


class BudgetUpdate(_PeriodPayload):
    name: str
    target_amount: float | None = None
    period: Period | None = None
    category: str | None = None
    start_date: str | None = None


class NamedRecord(Payload):
    name: str


class NewSavings(Payload):
    name: str = "Savings Goal"
    target_amount: float


class SavingsAmount(Payload):
    id: str | None = None
    name: str | None = None
    amount: float = Field(gt=0)


class SavingsUpdate(Payload):
    name: str
    target_amount: float | None = None
    current_amount: float | None = None


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def _entries_of(hooks: FinanceCapabilities, entry_type: str) -> list:
    return [e for e in (hooks.entries or ()) if field_value(e, "type") == entry_type]


def _budgets_only(hooks: FinanceCapabilities) -> list:
    return [b for b in (hooks.budgets or ()) if field_value(b, "type") == "budget"]


def _find_savings(hooks: FinanceCapabilities, resolver: ResolutionStrategy, name: str | None, record_id: str | None = None):
    return resolve_record(resolver, hooks.savings_goals, "name", name, record_id)


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


def _entry_handler(entry_type: str, is_special: bool = False):
    async def handler(action: str, p: NewEntry, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
        entry = {
            "type": entry_type,
            "amount": p.amount,
            "category": p.category,
            "description": p.description,
            "date": p.date or today(),
        }
        if is_special:
            entry["is_special"] = True
        await hooks.add_entry(entry)
        logger.info("Recorded %s%s of %s (%s)", "special " if is_special else "", entry_type, p.amount, p.category)
        return ActionOutcome.done(action)

    return handler


async def _delete_expense(action: str, p: EntryLookup, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    if p.id:
        await hooks.delete_entry(p.id)
        return ActionOutcome.done(action)

    expenses = _entries_of(hooks, "expense")
    target = resolver.resolve(p.description or "", expenses, "description") if p.description else None
    if target is None and p.amount is not None:
        target = next((e for e in expenses if field_value(e, "amount") == p.amount), None)
    if target is None:
        reference = p.description or (str(p.amount) if p.amount is not None else "")
        if not reference:
            return ActionOutcome.skipped(action, "no expense reference given")
        return ActionOutcome.not_found(action, reference, "expense")

    await hooks.delete_entry(str(field_value(target, "id")))
    return ActionOutcome.done(action)


def _edit_handler(entry_type: str):
    async def handler(action: str, p: EntryEdit, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
        if p.id:
            changes = only_set(
                id=p.id, amount=p.amount, category=p.category,
                description=p.new_description or p.description, date=p.date,
            )
        else:
            if not p.description:
                return ActionOutcome.skipped(action, f"no {entry_type} reference given")
            target = resolver.resolve(p.description, _entries_of(hooks, entry_type), "description")
            if target is None:
                return ActionOutcome.not_found(action, p.description, entry_type)
            changes = only_set(
                id=str(field_value(target, "id")), amount=p.amount, category=p.category,
                description=p.new_description, date=p.date,
            )

        if len(changes) == 1:
            return ActionOutcome.skipped(action, "nothing to update")
        await hooks.update_entry(changes)
        return ActionOutcome.done(action)

    return handler


async def _toggle_special(action: str, p: ToggleSpecial, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    entry = find_by_id(hooks.entries, p.id)
    if entry is None:
        return ActionOutcome.not_found(action, p.id, "entry")
    await hooks.update_entry({"id": p.id, "is_special": not bool(field_value(entry, "is_special"))})
    return ActionOutcome.done(action)


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------


def _budget_handler(is_special: bool = False):
    async def handler(action: str, p: NewBudget, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
        budget = {
            "name": p.name,
            "type": "budget",
            "target_amount": p.target_amount,
            "period": p.period,
            "category": p.category,
            "start_date": p.start_date,
        }
        if is_special:
            budget["is_special"] = True
        await hooks.add_budget(budget)
        return ActionOutcome.done(action)

    return handler


async def _update_budget(action: str, p: BudgetUpdate, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    target = resolver.resolve(p.name, _budgets_only(hooks), "name")
    if target is None:
        return ActionOutcome.not_found(action, p.name, "budget")

    changes = only_set(
        id=str(field_value(target, "id")), target_amount=p.target_amount,
        period=p.period, category=p.category, start_date=p.start_date,
    )
    if len(changes) == 1:
        return ActionOutcome.skipped(action, "nothing to update")
    await hooks.update_budget(changes)
    return ActionOutcome.done(action)


async def _delete_budget(action: str, p: NamedRecord, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    target = resolver.resolve(p.name, _budgets_only(hooks), "name")
    if target is None:
        return ActionOutcome.not_found(action, p.name, "budget")
    await hooks.delete_budget(str(field_value(target, "id")))
    return ActionOutcome.done(action)


# ---------------------------------------------------------------------------
# Savings goals
# ---------------------------------------------------------------------------


def _savings_handler(is_special: bool = False):
    async def handler(action: str, p: NewSavings, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
        goal = {
            "name": p.name,
            "type": "savings",
            "target_amount": p.target_amount,
            "current_amount": 0.0,
            "period": None,
            "category": None,
        }
        if is_special:
            goal["is_special"] = True
        await hooks.add_budget(goal)
        return ActionOutcome.done(action)

    return handler


async def _add_to_savings(action: str, p: SavingsAmount, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    goal = _find_savings(hooks, resolver, p.name, p.id)
    if goal is None:
        return ActionOutcome.not_found(action, p.name or p.id or "", "savings goal")
    await hooks.add_to_savings(str(field_value(goal, "id")), p.amount)
    return ActionOutcome.done(action)


async def _withdraw_from_savings(action: str, p: SavingsAmount, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    goal = _find_savings(hooks, resolver, p.name, p.id)
    if goal is None:
        return ActionOutcome.not_found(action, p.name or p.id or "", "savings goal")

    goal_id = str(field_value(goal, "id"))
    goal_name = field_value(goal, "name")
    original = float(field_value(goal, "current_amount") or 0)

    async def lower_balance() -> None:
        await hooks.update_budget({"id": goal_id, "current_amount": max(0.0, original - p.amount)})

    async def restore_balance() -> None:
        await hooks.update_budget({"id": goal_id, "current_amount": original})

    async def record_expense() -> None:
        await hooks.add_entry({
            "type": "expense",
            "amount": p.amount,
            "category": f"Savings: {goal_name}",
            "description": f"Withdrawn from {goal_name}",
            "date": today(),
        })

    await run_saga("withdraw_from_savings", [
        SagaStep("lower savings balance", lower_balance, restore_balance),
        SagaStep("record expense entry", record_expense),
    ])
    logger.info("Withdrew %s from savings goal '%s'", p.amount, goal_name)
    return ActionOutcome.done(action)


async def _update_savings(action: str, p: SavingsUpdate, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    goal = _find_savings(hooks, resolver, p.name)
    if goal is None:
        return ActionOutcome.not_found(action, p.name, "savings goal")

    changes = only_set(
        id=str(field_value(goal, "id")),
        target_amount=p.target_amount,
        current_amount=p.current_amount,
    )
    if len(changes) == 1:
        return ActionOutcome.skipped(action, "nothing to update")
    await hooks.update_budget(changes)
    return ActionOutcome.done(action)


async def _delete_savings(action: str, p: NamedRecord, hooks: FinanceCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    goal = _find_savings(hooks, resolver, p.name)
    if goal is None:
        return ActionOutcome.not_found(action, p.name, "savings goal")
    await hooks.delete_budget(str(field_value(goal, "id")))
    return ActionOutcome.done(action)


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------

_HANDLERS = {
    "ADD_EXPENSE": (NewEntry, _entry_handler("expense")),
    "ADD_INCOME": (NewEntry, _entry_handler("income")),
    "DELETE_EXPENSE": (EntryLookup, _delete_expense),
    "EDIT_EXPENSE": (EntryEdit, _edit_handler("expense")),
    "EDIT_INCOME": (EntryEdit, _edit_handler("income")),
    "ADD_BUDGET": (NewBudget, _budget_handler()),
    "UPDATE_BUDGET": (BudgetUpdate, _update_budget),
    "DELETE_BUDGET": (NamedRecord, _delete_budget),
    "ADD_SAVINGS": (NewSavings, _savings_handler()),
    "ADD_TO_SAVINGS": (SavingsAmount, _add_to_savings),
    "WITHDRAW_FROM_SAVINGS": (SavingsAmount, _withdraw_from_savings),
    "UPDATE_SAVINGS": (SavingsUpdate, _update_savings),
    "DELETE_SAVINGS": (NamedRecord, _delete_savings),
    "ADD_SPECIAL_EXPENSE": (NewEntry, _entry_handler("expense", is_special=True)),
    "ADD_SPECIAL_INCOME": (NewEntry, _entry_handler("income", is_special=True)),
    "ADD_SPECIAL_BUDGET": (NewBudget, _budget_handler(is_special=True)),
    "ADD_SPECIAL_SAVINGS": (NewSavings, _savings_handler(is_special=True)),
    "TOGGLE_SPECIAL": (ToggleSpecial, _toggle_special),
}


async def execute(
    action: str,
    data: dict,
    hooks: FinanceCapabilities,
    resolver: ResolutionStrategy = DEFAULT_RESOLVER,
) -> ActionOutcome:
    return await run_handler(_HANDLERS, action, data, hooks, resolver)


MODULE = ModuleDescriptor(
    name="finance",
    actions=FINANCE_ACTIONS,
    prompt_fragment=FINANCE_PROMPT,
    executor=execute,
)

"""
Nova Assistant — Tasks module.

Completing a finance-linked task (context_type "finance" with an
expected_cost) produces a finance entry, but that side effect lives inside
the host's complete_task mutation; this module only ever completes by id.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import field_validator

from nova.core.outcomes import ActionOutcome
from nova.core.registry import ModuleDescriptor
from nova.core.resolver import DEFAULT_RESOLVER, ResolutionStrategy, field_value, resolve_record
from nova.modules.common import Payload, only_set, run_handler, today
from nova.ports.capabilities import TaskCapabilities

logger = logging.getLogger(__name__)

TASK_ACTIONS = (
    "ADD_TASK",
    "UPDATE_TASK",
    "DELETE_TASK",
    "COMPLETE_TASK",
)

TASK_PROMPT = """\
TASK RULES:
ADD_TASK data:
- title (string, required)
- priority (optional: 'low'/'medium'/'high'/'urgent', default 'medium')
- due_date (optional YYYY-MM-DD, default today)
- context_type (optional: 'general'/'study'/'finance'/'habit'/'project')
- expected_cost (optional number, for tasks that cost or earn money)
- finance_type (optional: 'income'/'expense'; defaults to 'expense' when expected_cost is set)
- budget_id (optional, links an expense task to a budget)
- start_time / end_time (optional HH:MM, for time blocking)
- estimated_duration (optional, minutes)

UPDATE_TASK data: title (to find the task) and any fields to change; use new_title to rename
DELETE_TASK data: title (or id)
COMPLETE_TASK data: title (or id). Completing a finance-linked task records its expected_cost in finance automatically.

Task Examples:
- "add task buy groceries" → ADD_TASK {title: "Buy groceries"}
- "remind me to call mom tomorrow" → ADD_TASK {title: "Call mom", due_date: "<tomorrow>"}
- "add expense task shopping for 500 taka" → ADD_TASK {title: "Shopping", context_type: "finance", finance_type: "expense", expected_cost: 500}
- "done with the groceries" → COMPLETE_TASK {title: "groceries"}
- "delete call mom task" → DELETE_TASK {title: "call mom"}"""


Priority = Literal["low", "medium", "high", "urgent"]
ContextType = Literal["general", "study", "finance", "habit", "project"]
FinanceType = Literal["income", "expense"]


class _TaskFields(Payload):
    priority: Priority | None = None
    due_date: str | None = None
    context_type: ContextType | None = None
    context_id: str | None = None
    budget_id: str | None = None
    expected_cost: float | None = None
    finance_type: FinanceType | None = None
    start_time: str | None = None
    end_time: str | None = None
    estimated_duration: int | None = None

    @field_validator("priority", "context_type", "finance_type", mode="before")
    @classmethod
    def _lower(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("due_date", mode="before")
    @classmethod
    def _resolve_today(cls, v: object) -> object:
        if isinstance(v, str) and v.strip().lower() == "today":
            return today()
        return v


class NewTask(_TaskFields):
    title: str


class TaskUpdate(_TaskFields):
    id: str | None = None
    title: str | None = None
    new_title: str | None = None


class TaskRef(Payload):
    id: str | None = None
    title: str | None = None


def _find_task(hooks: TaskCapabilities, resolver: ResolutionStrategy, title: str | None, task_id: str | None):
    return resolve_record(resolver, hooks.tasks, "title", title, task_id)


async def _add_task(action: str, p: NewTask, hooks: TaskCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    has_cost = p.expected_cost is not None and p.expected_cost > 0
    finance_type = p.finance_type or ("expense" if has_cost else None)

    task = {
        "title": p.title,
        "priority": p.priority or "medium",
        "status": "todo",
        "due_date": p.due_date or today(),
        "context_type": "finance" if has_cost else (p.context_type or "general"),
    }
    task.update(only_set(
        context_id=p.context_id,
        budget_id=p.budget_id,
        expected_cost=p.expected_cost if has_cost else None,
        finance_type=finance_type,
        start_time=p.start_time,
        end_time=p.end_time,
        estimated_duration=p.estimated_duration,
    ))
    await hooks.add_task(task)
    logger.info("Added task '%s' (%s)", p.title, task["context_type"])
    return ActionOutcome.done(action)


async def _update_task(action: str, p: TaskUpdate, hooks: TaskCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    target = _find_task(hooks, resolver, p.title, p.id)
    if target is None:
        reference = p.title or p.id
        if not reference:
            return ActionOutcome.skipped(action, "no task reference given")
        return ActionOutcome.not_found(action, reference, "task")

    changes = only_set(
        id=str(field_value(target, "id")),
        title=p.new_title,
        priority=p.priority,
        due_date=p.due_date,
        context_type=p.context_type,
        context_id=p.context_id,
        budget_id=p.budget_id,
        expected_cost=p.expected_cost,
        finance_type=p.finance_type,
        start_time=p.start_time,
        end_time=p.end_time,
        estimated_duration=p.estimated_duration,
    )
    if len(changes) == 1:
        return ActionOutcome.skipped(action, "nothing to update")
    await hooks.update_task(changes)
    return ActionOutcome.done(action)


def _by_reference(mutation: str):
    async def handler(action: str, p: TaskRef, hooks: TaskCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
        target = _find_task(hooks, resolver, p.title, p.id)
        if target is None:
            reference = p.title or p.id
            if not reference:
                return ActionOutcome.skipped(action, "no task reference given")
            return ActionOutcome.not_found(action, reference, "task")
        await getattr(hooks, mutation)(str(field_value(target, "id")))
        return ActionOutcome.done(action)

    return handler


_HANDLERS = {
    "ADD_TASK": (NewTask, _add_task),
    "UPDATE_TASK": (TaskUpdate, _update_task),
    "DELETE_TASK": (TaskRef, _by_reference("delete_task")),
    "COMPLETE_TASK": (TaskRef, _by_reference("complete_task")),
}


async def execute(
    action: str,
    data: dict,
    hooks: TaskCapabilities,
    resolver: ResolutionStrategy = DEFAULT_RESOLVER,
) -> ActionOutcome:
    return await run_handler(_HANDLERS, action, data, hooks, resolver)


MODULE = ModuleDescriptor(
    name="tasks",
    actions=TASK_ACTIONS,
    prompt_fragment=TASK_PROMPT,
    executor=execute,
)

"""
Nova Assistant — Habits module.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field

from nova.core.outcomes import ActionOutcome
from nova.core.registry import ModuleDescriptor
from nova.core.resolver import DEFAULT_RESOLVER, ResolutionStrategy, field_value, resolve_record
from nova.modules.common import Payload, run_handler
from nova.ports.capabilities import HabitCapabilities

HABIT_ACTIONS = (
    "ADD_HABIT",
    "COMPLETE_HABIT",
    "DELETE_HABIT",
)

HABIT_PROMPT = """\
HABIT RULES:
ADD_HABIT data: name (string), frequency (optional: 'daily'/'weekly', default 'daily')
COMPLETE_HABIT data: name (or id)
DELETE_HABIT data: name (or id)

Habit Examples:
- "add habit drink water" → ADD_HABIT {name: "Drink water", frequency: "daily"}
- "I did my exercise today" → COMPLETE_HABIT {name: "exercise"}
- "mark meditation done" → COMPLETE_HABIT {name: "meditation"}
- "drop the reading habit" → DELETE_HABIT {name: "reading"}"""


class NewHabit(Payload):
    name: str = Field(validation_alias=AliasChoices("name", "habit_name"))
    frequency: str = "daily"


class HabitRef(Payload):
    id: str | None = None
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "habit_name"))


async def _add_habit(action: str, p: NewHabit, hooks: HabitCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    await hooks.add_habit({"name": p.name, "frequency": p.frequency.lower()})
    return ActionOutcome.done(action)


def _by_reference(mutation: str):
    async def handler(action: str, p: HabitRef, hooks: HabitCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
        target = resolve_record(resolver, hooks.habits, "name", p.name, p.id)
        if target is None:
            reference = p.name or p.id
            if not reference:
                return ActionOutcome.skipped(action, "no habit reference given")
            return ActionOutcome.not_found(action, reference, "habit")
        await getattr(hooks, mutation)(str(field_value(target, "id")))
        return ActionOutcome.done(action)

    return handler


_HANDLERS = {
    "ADD_HABIT": (NewHabit, _add_habit),
    "COMPLETE_HABIT": (HabitRef, _by_reference("complete_habit")),
    "DELETE_HABIT": (HabitRef, _by_reference("delete_habit")),
}


async def execute(
    action: str,
    data: dict,
    hooks: HabitCapabilities,
    resolver: ResolutionStrategy = DEFAULT_RESOLVER,
) -> ActionOutcome:
    return await run_handler(_HANDLERS, action, data, hooks, resolver)


MODULE = ModuleDescriptor(
    name="habits",
    actions=HABIT_ACTIONS,
    prompt_fragment=HABIT_PROMPT,
    executor=execute,
)

"""
Nova Assistant — Notes module.
"""

from __future__ import annotations

from pydantic import field_validator

from nova.core.outcomes import ActionOutcome
from nova.core.registry import ModuleDescriptor
from nova.core.resolver import DEFAULT_RESOLVER, ResolutionStrategy, field_value, resolve_record
from nova.modules.common import Payload, run_handler
from nova.ports.capabilities import NoteCapabilities

NOTE_ACTIONS = (
    "ADD_NOTE",
    "DELETE_NOTE",
)

NOTE_PROMPT = """\
NOTE RULES:
ADD_NOTE data: title (string), content (string), tags (optional, comma separated)
DELETE_NOTE data: title (or id)

Note Examples:
- "note: remember to check the oven" → ADD_NOTE {title: "Reminder", content: "Check the oven"}
- "save note meeting at 3pm" → ADD_NOTE {title: "Meeting", content: "At 3pm"}
- "delete the meeting note" → DELETE_NOTE {title: "meeting"}"""


class NewNote(Payload):
    title: str = "Quick Note"
    content: str | None = None
    tags: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _join_tags(cls, v: object) -> object:
        if isinstance(v, list):
            return ", ".join(str(t) for t in v)
        return v


class NoteRef(Payload):
    id: str | None = None
    title: str | None = None


async def _add_note(action: str, p: NewNote, hooks: NoteCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    note = {"title": p.title, "content": p.content or p.title}
    if p.tags:
        note["tags"] = p.tags
    await hooks.add_note(note)
    return ActionOutcome.done(action)


async def _delete_note(action: str, p: NoteRef, hooks: NoteCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    target = resolve_record(resolver, hooks.notes, "title", p.title, p.id)
    if target is None:
        reference = p.title or p.id
        if not reference:
            return ActionOutcome.skipped(action, "no note reference given")
        return ActionOutcome.not_found(action, reference, "note")
    await hooks.delete_note(str(field_value(target, "id")))
    return ActionOutcome.done(action)


_HANDLERS = {
    "ADD_NOTE": (NewNote, _add_note),
    "DELETE_NOTE": (NoteRef, _delete_note),
}


async def execute(
    action: str,
    data: dict,
    hooks: NoteCapabilities,
    resolver: ResolutionStrategy = DEFAULT_RESOLVER,
) -> ActionOutcome:
    return await run_handler(_HANDLERS, action, data, hooks, resolver)


MODULE = ModuleDescriptor(
    name="notes",
    actions=NOTE_ACTIONS,
    prompt_fragment=NOTE_PROMPT,
    executor=execute,
)

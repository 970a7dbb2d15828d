"""
Nova Assistant — Study module.

Study material is a hierarchy: Subject → Chapter → Part. References are
resolved top-down, so "waves in physics" looks for a chapter named like
"waves" only among the chapters of the subject matching "physics".

Presets are named templates (revision plans, exam drills) attached to a
chapter, optionally scoped to one part or to every part via the "all-parts"
sentinel. Only top-level presets can be attached; presets with a parent_id
are sub-steps of another preset and never match by name.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from nova.core.outcomes import ActionOutcome
from nova.core.registry import ModuleDescriptor
from nova.core.resolver import DEFAULT_RESOLVER, ResolutionStrategy, field_value, resolve_record
from nova.modules.common import Payload, run_handler
from nova.ports.capabilities import StudyCapabilities

logger = logging.getLogger(__name__)

ALL_PARTS = "all-parts"

STUDY_ACTIONS = (
    "ADD_STUDY_SUBJECT",
    "DELETE_STUDY_SUBJECT",
    "ADD_STUDY_CHAPTER",
    "DELETE_STUDY_CHAPTER",
    "ADD_STUDY_PART",
    "DELETE_STUDY_PART",
    "UPDATE_STUDY_PROGRESS",
    "APPLY_STUDY_PRESET",
)

STUDY_PROMPT = """\
STUDY RULES:
Study material is organised as Subject → Chapter → Part. Always pass the names you know at every level.
ADD_STUDY_SUBJECT data: name
DELETE_STUDY_SUBJECT data: name
ADD_STUDY_CHAPTER data: subject_name, chapter_name (the subject must exist; add it first in the same batch if it is new)
DELETE_STUDY_CHAPTER data: chapter_name, subject_name (optional)
ADD_STUDY_PART data: chapter_name, part_name, subject_name (optional)
DELETE_STUDY_PART data: chapter_name, part_name, subject_name (optional)
UPDATE_STUDY_PROGRESS data: chapter_name, progress_percentage (0-100), part_name (optional), subject_name (optional), mastery_rating (optional 1 = hard … 5 = easy)
APPLY_STUDY_PRESET data: preset_name, chapter_name, subject_name (optional), part_name (optional; use "all-parts" to apply it to every part)

Study Examples:
- "add physics with a chapter on waves" → batch: ADD_STUDY_SUBJECT {name: "Physics"}, ADD_STUDY_CHAPTER {subject_name: "Physics", chapter_name: "Waves"}
- "I'm 60% through calculus" → UPDATE_STUDY_PROGRESS {chapter_name: "calculus", progress_percentage: 60}
- "finished part 2 of optics, it was easy" → UPDATE_STUDY_PROGRESS {chapter_name: "optics", part_name: "part 2", progress_percentage: 100, mastery_rating: 5}
- "use the exam drill preset for all parts of thermodynamics" → APPLY_STUDY_PRESET {preset_name: "exam drill", chapter_name: "thermodynamics", part_name: "all-parts"}
- "delete the physics chapter" → DELETE_STUDY_CHAPTER {chapter_name: "physics"}"""


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

_SUBJECT = AliasChoices("subject_name", "subject")
_CHAPTER = AliasChoices("chapter_name", "chapter", "title")
_PART = AliasChoices("part_name", "part")


class NewSubject(Payload):
    name: str = Field(validation_alias=AliasChoices("name", "subject_name", "subject"))


class SubjectRef(Payload):
    id: str | None = None
    name: str | None = Field(default=None, validation_alias=AliasChoices("name", "subject_name", "subject"))


class ChapterRef(Payload):
    id: str | None = None
    subject_name: str | None = Field(default=None, validation_alias=_SUBJECT)
    chapter_name: str | None = Field(default=None, validation_alias=_CHAPTER)


class NewChapter(Payload):
    subject_name: str = Field(validation_alias=_SUBJECT)
    chapter_name: str = Field(validation_alias=_CHAPTER)


class PartRef(Payload):
    subject_name: str | None = Field(default=None, validation_alias=_SUBJECT)
    chapter_name: str = Field(validation_alias=_CHAPTER)
    part_name: str = Field(validation_alias=_PART)


class ProgressUpdate(Payload):
    subject_name: str | None = Field(default=None, validation_alias=_SUBJECT)
    chapter_name: str = Field(validation_alias=_CHAPTER)
    part_name: str | None = Field(default=None, validation_alias=_PART)
    progress_percentage: float = Field(validation_alias=AliasChoices("progress_percentage", "progress"))
    mastery_rating: int | None = Field(default=None, ge=1, le=5)


class PresetApplication(Payload):
    preset_name: str = Field(validation_alias=AliasChoices("preset_name", "preset"))
    subject_name: str | None = Field(default=None, validation_alias=_SUBJECT)
    chapter_name: str = Field(validation_alias=_CHAPTER)
    part_name: str | None = Field(default=None, validation_alias=_PART)

    @field_validator("part_name", mode="before")
    @classmethod
    def _normalize_all_parts(cls, v: object) -> object:
        if isinstance(v, str) and v.strip().lower() in (ALL_PARTS, "all parts"):
            return ALL_PARTS
        return v


# ---------------------------------------------------------------------------
# Hierarchical resolution
# ---------------------------------------------------------------------------


def _locate_chapter(
    action: str,
    hooks: StudyCapabilities,
    resolver: ResolutionStrategy,
    subject_name: str | None,
    chapter_name: str | None,
    chapter_id: str | None = None,
) -> tuple[Any, ActionOutcome | None]:
    """Resolve a chapter, scoped to the named subject when one is given."""
    chapters = list(hooks.chapters or ())
    if subject_name:
        subject = resolver.resolve(subject_name, hooks.subjects, "name")
        if subject is None:
            return None, ActionOutcome.not_found(action, subject_name, "subject")
        subject_id = field_value(subject, "id")
        chapters = [c for c in chapters if field_value(c, "subject_id") == subject_id]

    chapter = resolve_record(resolver, chapters, "name", chapter_name, chapter_id)
    if chapter is None:
        reference = chapter_name or chapter_id
        if not reference:
            return None, ActionOutcome.skipped(action, "no chapter reference given")
        return None, ActionOutcome.not_found(action, reference, "chapter")
    return chapter, None


def _locate_part(
    action: str,
    hooks: StudyCapabilities,
    resolver: ResolutionStrategy,
    chapter: Any,
    part_name: str,
) -> tuple[Any, ActionOutcome | None]:
    chapter_id = field_value(chapter, "id")
    parts = [p for p in (hooks.parts or ()) if field_value(p, "chapter_id") == chapter_id]
    part = resolver.resolve(part_name, parts, "name")
    if part is None:
        return None, ActionOutcome.not_found(action, part_name, "part")
    return part, None


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _add_subject(action: str, p: NewSubject, hooks: StudyCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    await hooks.add_subject({"name": p.name})
    return ActionOutcome.done(action)


async def _delete_subject(action: str, p: SubjectRef, hooks: StudyCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    subject = resolve_record(resolver, hooks.subjects, "name", p.name, p.id)
    if subject is None:
        reference = p.name or p.id
        if not reference:
            return ActionOutcome.skipped(action, "no subject reference given")
        return ActionOutcome.not_found(action, reference, "subject")
    await hooks.delete_subject(str(field_value(subject, "id")))
    return ActionOutcome.done(action)


async def _add_chapter(action: str, p: NewChapter, hooks: StudyCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    subject = resolver.resolve(p.subject_name, hooks.subjects, "name")
    if subject is None:
        return ActionOutcome.not_found(action, p.subject_name, "subject")
    await hooks.add_chapter({
        "subject_id": field_value(subject, "id"),
        "subject": field_value(subject, "name"),
        "name": p.chapter_name,
    })
    logger.info("Added chapter '%s' to subject '%s'", p.chapter_name, field_value(subject, "name"))
    return ActionOutcome.done(action)


async def _delete_chapter(action: str, p: ChapterRef, hooks: StudyCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    chapter, miss = _locate_chapter(action, hooks, resolver, p.subject_name, p.chapter_name, p.id)
    if miss:
        return miss
    await hooks.delete_chapter(str(field_value(chapter, "id")))
    return ActionOutcome.done(action)


async def _add_part(action: str, p: PartRef, hooks: StudyCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    chapter, miss = _locate_chapter(action, hooks, resolver, p.subject_name, p.chapter_name)
    if miss:
        return miss
    await hooks.add_part({"chapter_id": field_value(chapter, "id"), "name": p.part_name})
    return ActionOutcome.done(action)


async def _delete_part(action: str, p: PartRef, hooks: StudyCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    chapter, miss = _locate_chapter(action, hooks, resolver, p.subject_name, p.chapter_name)
    if miss:
        return miss
    part, miss = _locate_part(action, hooks, resolver, chapter, p.part_name)
    if miss:
        return miss
    await hooks.delete_part(str(field_value(part, "id")))
    return ActionOutcome.done(action)


async def _update_progress(action: str, p: ProgressUpdate, hooks: StudyCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    chapter, miss = _locate_chapter(action, hooks, resolver, p.subject_name, p.chapter_name)
    if miss:
        return miss

    target, target_id = "chapter", field_value(chapter, "id")
    if p.part_name:
        part, miss = _locate_part(action, hooks, resolver, chapter, p.part_name)
        if miss:
            return miss
        target, target_id = "part", field_value(part, "id")

    progress = {
        "target": target,
        "id": str(target_id),
        "progress_percentage": min(100.0, max(0.0, p.progress_percentage)),
    }
    if p.mastery_rating is not None:
        progress["mastery_rating"] = p.mastery_rating
    await hooks.update_progress(progress)
    return ActionOutcome.done(action)


async def _apply_preset(action: str, p: PresetApplication, hooks: StudyCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    top_level = [s for s in (hooks.presets or ()) if not field_value(s, "parent_id")]
    preset = resolver.resolve(p.preset_name, top_level, "name")
    if preset is None:
        return ActionOutcome.not_found(action, p.preset_name, "preset")

    chapter, miss = _locate_chapter(action, hooks, resolver, p.subject_name, p.chapter_name)
    if miss:
        return miss

    part_id: str | None = None
    if p.part_name == ALL_PARTS:
        part_id = ALL_PARTS
    elif p.part_name:
        part, miss = _locate_part(action, hooks, resolver, chapter, p.part_name)
        if miss:
            return miss
        part_id = str(field_value(part, "id"))

    await hooks.apply_preset({
        "preset_id": str(field_value(preset, "id")),
        "chapter_id": str(field_value(chapter, "id")),
        "part_id": part_id,
    })
    return ActionOutcome.done(action)


_HANDLERS = {
    "ADD_STUDY_SUBJECT": (NewSubject, _add_subject),
    "DELETE_STUDY_SUBJECT": (SubjectRef, _delete_subject),
    "ADD_STUDY_CHAPTER": (NewChapter, _add_chapter),
    "DELETE_STUDY_CHAPTER": (ChapterRef, _delete_chapter),
    "ADD_STUDY_PART": (PartRef, _add_part),
    "DELETE_STUDY_PART": (PartRef, _delete_part),
    "UPDATE_STUDY_PROGRESS": (ProgressUpdate, _update_progress),
    "APPLY_STUDY_PRESET": (PresetApplication, _apply_preset),
}


async def execute(
    action: str,
    data: dict,
    hooks: StudyCapabilities,
    resolver: ResolutionStrategy = DEFAULT_RESOLVER,
) -> ActionOutcome:
    return await run_handler(_HANDLERS, action, data, hooks, resolver)


MODULE = ModuleDescriptor(
    name="study",
    actions=STUDY_ACTIONS,
    prompt_fragment=STUDY_PROMPT,
    executor=execute,
)

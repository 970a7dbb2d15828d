"""
Nova Assistant — Note enhancement.

Rewrites, extends or generates a note in markdown on the user's request.
Unlike the chat pipeline this asks for free text, not JSON.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from nova.data.models import ConversationMessage, Role

logger = logging.getLogger(__name__)

MAX_CONTEXT_NOTES = 20
ENHANCE_TEMPERATURE = 0.5
ENHANCE_MAX_TOKENS = 2048

NOTE_ENHANCER_PROMPT = """\
You are an expert note-writing assistant in LifeOS. Your role is to enhance, rewrite, or generate notes based on user instructions.

FORMATTING RULES (always use markdown):
- Use **bold** for important terms and headings
- Use *italic* for emphasis
- Use - [ ] for unchecked checklist items
- Use - [x] for checked/completed items
- Use - for bullet points (without checkboxes)
- Use ## for section headings
- Use numbered lists (1. 2. 3.) when order matters
- Use `code` for technical terms
- Use --- for horizontal rules between sections

WRITING STYLE:
- Be concise but comprehensive
- Use clear, well-structured sections
- Make checklists actionable; each item should be a specific task
- Keep a professional yet warm tone

IMPORTANT:
- Return ONLY the note content: no meta-commentary, no "here's your note", no code fences around the whole response
- Only modify the CURRENT NOTE. Use "ALL USER'S NOTES FOR CONTEXT" only when the user explicitly asks for it \
(e.g. "summarize all my notes on this topic")
- When enhancing existing content, keep the user's intent
- When generating new content, create well-organized notes"""


class NoteEnhancementError(Exception):
    """The model returned nothing usable for the note."""


@dataclass
class NoteContext:
    title: str = ""
    content: str = ""
    tags: str = ""


def _render_context(notes: list[NoteContext]) -> str:
    return "\n---\n".join(
        f"[Note {i}] Title: {n.title}\nTags: {n.tags or 'none'}\n{n.content or '(empty)'}\n"
        for i, n in enumerate(notes[:MAX_CONTEXT_NOTES], start=1)
    )


async def enhance_note(
    prompt: str,
    current_note: NoteContext,
    all_notes: list[NoteContext],
    completion=None,
) -> str:
    """Return the enhanced markdown for `current_note`.

    LLMError from the completion service propagates; an empty reply raises
    NoteEnhancementError.
    """
    if completion is None:
        from nova.core.llm import complete as completion

    user_message = (
        "CURRENT NOTE:\n"
        f"Title: {current_note.title or '(untitled)'}\n"
        f"Content: {current_note.content or '(empty)'}\n\n"
        "ALL USER'S NOTES FOR CONTEXT:\n"
        f"{_render_context(all_notes)}\n\n"
        f"USER'S REQUEST: {prompt}"
    )
    messages = [
        ConversationMessage(Role.SYSTEM, NOTE_ENHANCER_PROMPT),
        ConversationMessage(Role.USER, user_message),
    ]

    content = await completion(
        messages,
        temperature=ENHANCE_TEMPERATURE,
        max_tokens=ENHANCE_MAX_TOKENS,
        json_mode=False,
    )
    if not content or not content.strip():
        logger.warning("Note enhancement returned an empty reply")
        raise NoteEnhancementError("AI returned empty response")
    return content.strip()

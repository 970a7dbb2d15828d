"""
Nova Assistant — Smart Fill.

Turns a pasted blob of text ("gaming chair from Ryans, 14500, 2 year warranty")
into a JSON object matching a form's schema, so the host can pre-fill it.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from nova.core.llm import LLMError
from nova.data.models import ConversationMessage, Role

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

SMART_FILL_PROMPT = """\
You are a Smart Fill AI. Your job is to extract structured data from unstructured user text to fill a form.

TARGET JSON SCHEMA:
{schema}

INSTRUCTIONS:
1. Extract relevant information from the user's text.
2. Map it to the keys in the target schema.
3. Infer missing fields if obvious (e.g., "gaming chair" -> category: "Furniture").
4. Return ONLY valid JSON."""


class SmartFillError(Exception):
    """The model's reply could not be turned into form data."""


def _extract_json(raw: str) -> dict[str, Any]:
    match = _JSON_BLOCK.search(raw)
    data = json.loads(match.group(0) if match else raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


async def smart_fill(text: str, schema_description: str, completion=None) -> dict[str, Any]:
    """Extract form fields described by `schema_description` from `text`.

    Raises SmartFillError when the service fails or the reply holds no
    usable JSON object.
    """
    if completion is None:
        from nova.core.llm import complete as completion

    messages = [
        ConversationMessage(Role.SYSTEM, SMART_FILL_PROMPT.format(schema=schema_description)),
        ConversationMessage(Role.USER, f'Input Text: "{text}"'),
    ]

    try:
        raw = await completion(messages)
    except LLMError as exc:
        logger.error("Smart fill completion failed: %s", exc)
        raise SmartFillError("Failed to parse input text.") from exc

    try:
        return _extract_json(raw)
    except ValueError as exc:
        logger.error("Smart fill reply was not usable JSON: %s (raw: '%s')", exc, raw[:200])
        raise SmartFillError("Failed to parse input text.") from exc

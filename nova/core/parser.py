"""
Nova Assistant — Response Parser.

Turns the raw completion text into one or more structured Intents.
A single reply may carry one action or a batch of actions that share a
response text. Parsing is fail-soft: a malformed model reply degrades to a
CHAT intent asking the user to rephrase, and nothing raises past
`parse_response()`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared JSON contract: produced by the model, consumed by the dispatcher
# ---------------------------------------------------------------------------

CHAT = "CHAT"
NAVIGATE = "NAVIGATE"
CONTROL_ACTIONS = frozenset({CHAT, NAVIGATE})

DEFAULT_RESPONSE_TEXT = "I'm not sure how to help with that."
DEFAULT_BATCH_RESPONSE_TEXT = "Done!"
PARSE_FAILURE_TEXT = "Sorry, I had trouble understanding that. Could you try again?"


class Intent(BaseModel):
    """One structured action derived from free-form user text.

    JSON example:
    {
        "action": "ADD_EXPENSE",
        "data": {"amount": 200, "category": "Food", "description": "Coffee"},
        "response_text": "Tracked ৳200 for coffee! ☕"
    }
    """
    action: str = CHAT
    data: dict[str, Any] = Field(default_factory=dict)
    response_text: str = DEFAULT_RESPONSE_TEXT


def fallback_intent(response_text: str = PARSE_FAILURE_TEXT) -> Intent:
    """A CHAT intent carrying only a message for the user."""
    return Intent(action=CHAT, data={}, response_text=response_text)


# ---------------------------------------------------------------------------
# Response Cleaning Functions
# ---------------------------------------------------------------------------

def _clean_llm_response(raw_text: str) -> str:
    """Remove markdown code block delimiters from LLM's raw response."""
    cleaned_text = raw_text.strip()
    if cleaned_text.startswith("```json"):
        cleaned_text = cleaned_text.removeprefix("```json")
    elif cleaned_text.startswith("```"):
        cleaned_text = cleaned_text.removeprefix("```")
    if cleaned_text.endswith("```"):
        cleaned_text = cleaned_text.removesuffix("```")
    return cleaned_text.strip()


# ---------------------------------------------------------------------------
# Error Handling Functions
# ---------------------------------------------------------------------------

def _handle_json_decode_error(exc: json.JSONDecodeError, raw_text: str) -> None:
    """Log and handle JSON decoding errors from LLM response."""
    logger.error("Failed to parse LLM response as JSON: %s (raw: '%s')", exc, raw_text[:200])

def _handle_unexpected_shape(data: object) -> None:
    """Log and handle replies that are valid JSON but not an object."""
    logger.warning("LLM returned unexpected type: %s", type(data).__name__)

def _handle_generic_parser_error(exc: Exception) -> None:
    """Log and handle any unexpected errors during response parsing."""
    logger.error("Unexpected error in parse_response: %s", exc)


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def _coerce_action(value: object) -> str:
    if isinstance(value, str) and value:
        return value
    return CHAT


def _coerce_data(value: object) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _coerce_text(value: object, default: str) -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


# ---------------------------------------------------------------------------
# Parser function
# ---------------------------------------------------------------------------

def _intents_from_batch(payload: dict) -> list[Intent]:
    """Fan a batch reply out into one Intent per element."""
    response_text = _coerce_text(payload.get("response_text"), DEFAULT_BATCH_RESPONSE_TEXT)

    intents: list[Intent] = []
    for item in payload["actions"]:
        if not isinstance(item, dict):
            logger.warning("Skipping non-dict item in actions array: %s", item)
            continue
        intents.append(Intent(
            action=_coerce_action(item.get("action")),
            data=_coerce_data(item.get("data")),
            response_text=response_text,
        ))

    if not intents:
        logger.info("Batch reply carried no usable actions")
        return [fallback_intent(response_text)]

    logger.info("Parsed batch of %d actions: %s", len(intents), [i.action for i in intents])
    return intents


def parse_response(raw_text: str) -> list[Intent]:
    """Parse a raw completion reply into a non-empty list of Intents.

    Recognizes the single shape {action, data, response_text} and the batch
    shape {actions: [{action, data}, ...], response_text}. Never raises.
    """
    if not isinstance(raw_text, str):
        logger.warning("LLM reply is not text: %r", raw_text)
        return [fallback_intent()]

    cleaned = _clean_llm_response(raw_text)
    logger.debug("LLM raw response: %s", cleaned)

    try:
        payload = json.loads(cleaned)

        if not isinstance(payload, dict):
            _handle_unexpected_shape(payload)
            return [fallback_intent()]

        if isinstance(payload.get("actions"), list):
            return _intents_from_batch(payload)

        intent = Intent(
            action=_coerce_action(payload.get("action")),
            data=_coerce_data(payload.get("data")),
            response_text=_coerce_text(payload.get("response_text"), DEFAULT_RESPONSE_TEXT),
        )
        logger.info("Parsed single action: %s", intent.action)
        return [intent]

    except json.JSONDecodeError as exc:
        _handle_json_decode_error(exc, cleaned)
        return [fallback_intent()]
    except Exception as exc:
        _handle_generic_parser_error(exc)
        return [fallback_intent()]

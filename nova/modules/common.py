"""Shared plumbing for the domain executors.

Every action has a pydantic payload model. Decoding is lax (numeric strings
become numbers, blank values count as absent) but a payload that still does
not fit is reported as a skipped action instead of being guessed at.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from nova.core.outcomes import ActionOutcome
from nova.core.resolver import ResolutionStrategy

logger = logging.getLogger(__name__)


class Payload(BaseModel):
    """Base for action payloads decoded from an Intent's `data`."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_blank(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data


Handler = Callable[[str, Any, Any, ResolutionStrategy], Awaitable[ActionOutcome]]


def local_now() -> datetime:
    """Current wall-clock time in the configured timezone."""
    from nova.config import settings

    return datetime.now(ZoneInfo(settings.TIMEZONE))


def today() -> str:
    """Today's date (YYYY-MM-DD) in the configured timezone."""
    return local_now().date().isoformat()


def only_set(**fields: Any) -> dict[str, Any]:
    """Drop None values so updates only carry the fields the user mentioned."""
    return {k: v for k, v in fields.items() if v is not None}


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "data"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


async def run_handler(
    handlers: dict[str, tuple[type[Payload], Handler]],
    action: str,
    data: dict,
    hooks: Any,
    resolver: ResolutionStrategy,
) -> ActionOutcome:
    """Decode `data` for `action` and run its handler."""
    entry = handlers.get(action)
    if entry is None:
        logger.warning("No handler for action: %s", action)
        return ActionOutcome.skipped(action, "action not handled by this module")

    model, handler = entry
    try:
        payload = model.model_validate(data or {})
    except ValidationError as exc:
        reason = _summarize(exc)
        logger.warning("Invalid payload for %s: %s", action, reason)
        return ActionOutcome.skipped(action, f"invalid payload: {reason}")

    return await handler(action, payload, hooks, resolver)

"""Structured results of executing intents.

Executors never raise for a missed lookup; they report what happened so the
host can decide whether to tell the user.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutcomeStatus(Enum):
    DONE = "done"
    NOT_FOUND = "not_found"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ActionOutcome:
    action: str
    status: OutcomeStatus
    reference: str = ""     # the unresolved entity reference, for NOT_FOUND
    reason: str = ""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.DONE

    @classmethod
    def done(cls, action: str) -> ActionOutcome:
        return cls(action=action, status=OutcomeStatus.DONE)

    @classmethod
    def not_found(cls, action: str, reference: str, entity: str = "") -> ActionOutcome:
        reason = f"no {entity} matching '{reference}'" if entity else f"nothing matching '{reference}'"
        return cls(action=action, status=OutcomeStatus.NOT_FOUND, reference=reference, reason=reason)

    @classmethod
    def skipped(cls, action: str, reason: str) -> ActionOutcome:
        return cls(action=action, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, action: str, error: Exception) -> ActionOutcome:
        return cls(action=action, status=OutcomeStatus.FAILED, reason=str(error), error=error)


@dataclass
class BatchResult:
    outcomes: list[ActionOutcome] = field(default_factory=list)
    aborted: bool = False

    @property
    def succeeded(self) -> list[ActionOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.DONE]

    @property
    def not_found(self) -> list[ActionOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.NOT_FOUND]

    @property
    def failed(self) -> list[ActionOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILED]

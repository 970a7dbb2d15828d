"""Compound operations made of several capability calls.

A saga runs its steps in order. When a later step fails, the completed steps
are compensated in reverse order and a PartialFailureError tells the host
exactly which step broke and whether the undo went through. A failure in the
first step propagates unchanged since nothing needs undoing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class PartialFailureError(Exception):
    """A compound operation failed after some of its steps had already run."""

    def __init__(
        self, procedure: str, failed_step: str, cause: Exception, compensated: bool,
    ) -> None:
        state = "rolled back" if compensated else "NOT rolled back"
        super().__init__(f"{procedure}: step '{failed_step}' failed ({cause}); earlier steps {state}")
        self.procedure = procedure
        self.failed_step = failed_step
        self.cause = cause
        self.compensated = compensated


@dataclass
class SagaStep:
    name: str
    run: Callable[[], Awaitable[None]]
    compensate: Callable[[], Awaitable[None]] | None = None


async def _compensate(procedure: str, completed: list[SagaStep]) -> bool:
    ok = True
    for step in reversed(completed):
        if step.compensate is None:
            ok = False
            continue
        try:
            await step.compensate()
            logger.info("%s: compensated step '%s'", procedure, step.name)
        except Exception as exc:
            logger.error("%s: compensation for '%s' failed: %s", procedure, step.name, exc)
            ok = False
    return ok


async def run_saga(procedure: str, steps: list[SagaStep]) -> None:
    """Run `steps` sequentially, compensating on a mid-way failure."""
    completed: list[SagaStep] = []
    for step in steps:
        try:
            await step.run()
        except Exception as exc:
            if not completed:
                raise
            logger.error("%s: step '%s' failed: %s", procedure, step.name, exc)
            compensated = await _compensate(procedure, completed)
            raise PartialFailureError(procedure, step.name, exc, compensated) from exc
        completed.append(step)

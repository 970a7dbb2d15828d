"""
Nova Assistant — Dispatcher.

Routes each Intent to the module that declared its action, handing that
module only its own domain's capabilities. Control actions (CHAT, NAVIGATE)
and actions nobody declared are logged no-ops.

Batches run strictly in order, one await at a time, so a later action sees
the effects of an earlier one (e.g. ADD_STUDY_SUBJECT then
ADD_STUDY_CHAPTER for the same subject).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from nova.core.outcomes import ActionOutcome, BatchResult, OutcomeStatus
from nova.core.parser import CONTROL_ACTIONS
from nova.core.resolver import DEFAULT_RESOLVER

if TYPE_CHECKING:
    from nova.core.parser import Intent
    from nova.core.registry import ModuleRegistry
    from nova.core.resolver import ResolutionStrategy
    from nova.ports.capabilities import AppCapabilities

logger = logging.getLogger(__name__)


class BatchPolicy(Enum):
    CONTINUE = "continue"   # record the failure, run the rest
    ABORT = "abort"         # record the failure, skip the rest


async def dispatch(
    intent: Intent,
    capabilities: AppCapabilities,
    registry: ModuleRegistry,
    resolver: ResolutionStrategy | None = None,
) -> ActionOutcome:
    """Execute one intent against the owning module.

    Exceptions raised by the executor (or by a capability it calls)
    propagate to the caller; dispatch_batch() turns them into FAILED.
    """
    action = intent.action
    module = registry.owner_of(action)
    if module is None:
        if action in CONTROL_ACTIONS:
            logger.debug("Control action %s, nothing to execute", action)
            return ActionOutcome.skipped(action, "control action")
        logger.warning("Unknown action: %s", action)
        return ActionOutcome.skipped(action, "unknown action")

    hooks = capabilities.for_domain(module.name)
    if hooks is None:
        logger.warning("Action %s needs %s capabilities but none were supplied", action, module.name)
        return ActionOutcome.skipped(action, f"no capabilities for {module.name}")

    logger.info("Dispatching %s to %s", action, module.name)
    outcome = await module.executor(action, intent.data, hooks, resolver or DEFAULT_RESOLVER)
    if outcome.status is OutcomeStatus.NOT_FOUND:
        logger.warning("%s: %s", action, outcome.reason)
    return outcome


async def dispatch_batch(
    intents: list[Intent],
    capabilities: AppCapabilities,
    registry: ModuleRegistry,
    policy: BatchPolicy = BatchPolicy.CONTINUE,
    resolver: ResolutionStrategy | None = None,
) -> BatchResult:
    """Execute intents sequentially, in the order the model listed them."""
    result = BatchResult()

    for position, intent in enumerate(intents):
        try:
            outcome = await dispatch(intent, capabilities, registry, resolver)
        except Exception as exc:
            logger.error("Batch item %d (%s) failed: %s", position, intent.action, exc)
            result.outcomes.append(ActionOutcome.failed(intent.action, exc))
            if policy is BatchPolicy.ABORT:
                result.aborted = True
                result.outcomes.extend(
                    ActionOutcome.skipped(rest.action, "aborted") for rest in intents[position + 1:]
                )
                break
            continue
        result.outcomes.append(outcome)

    return result

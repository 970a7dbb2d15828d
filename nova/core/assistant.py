"""
Nova Assistant — UI-Agnostic Assistant Service.

Orchestrates one user turn:
history window -> system prompt -> completion -> parse -> dispatch -> reply.

The host (console, web, chat bot) supplies fresh capabilities on every call
and renders the returned AssistantReply in its own way. The service never
prints or sends anything itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from nova.core.dispatcher import BatchPolicy, dispatch_batch
from nova.core.llm import LLMError
from nova.core.outcomes import BatchResult
from nova.core.parser import CONTROL_ACTIONS, NAVIGATE, Intent, fallback_intent, parse_response
from nova.core.prompt import build_system_prompt
from nova.data.models import ConversationMessage, Role, recent_window

if TYPE_CHECKING:
    from nova.core.registry import ModuleRegistry
    from nova.core.resolver import ResolutionStrategy
    from nova.ports.capabilities import AppCapabilities
    from nova.ports.completion_port import CompletionPort

logger = logging.getLogger(__name__)

ERROR_TEXT = "Oops! Something went wrong. Mind trying again? 🙏"


# ---------------------------------------------------------------------------
# Response types
# ---------------------------------------------------------------------------


class ResponseKind(Enum):
    ACTIONS = "actions"     # at least one domain action was dispatched
    CHAT = "chat"           # conversation only, nothing to execute
    NAVIGATE = "navigate"   # the host should switch pages
    STALE = "stale"         # superseded by a newer message, nothing dispatched


@dataclass
class AssistantReply:
    kind: ResponseKind
    message: str
    intents: list[Intent] = field(default_factory=list)
    result: BatchResult = field(default_factory=BatchResult)
    navigate_to: str | None = None

    @property
    def stale(self) -> bool:
        return self.kind is ResponseKind.STALE


# ---------------------------------------------------------------------------
# AssistantService
# ---------------------------------------------------------------------------


class AssistantService:
    """Turns free text into executed actions.

    Holds no conversation state beyond a generation counter used to drop
    replies that were overtaken by a newer message.
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        completion: CompletionPort | None = None,
        policy: BatchPolicy | None = None,
        resolver: ResolutionStrategy | None = None,
        history_window: int | None = None,
    ) -> None:
        from nova.config import settings

        if completion is None:
            from nova.core.llm import complete as completion

        self._registry = registry
        self._complete = completion
        self._policy = policy or BatchPolicy(settings.BATCH_POLICY)
        self._resolver = resolver
        self._history_window = settings.HISTORY_WINDOW if history_window is None else history_window
        self._generation = 0

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Public: text -> intents
    # ------------------------------------------------------------------

    def build_messages(
        self,
        text: str,
        history: list[ConversationMessage] | None = None,
        page_context: str | None = None,
    ) -> list[ConversationMessage]:
        """System prompt, the trailing history window, then the new user turn."""
        system = ConversationMessage(Role.SYSTEM, build_system_prompt(self._registry, page_context))
        turns = [m for m in (history or []) if m.role is not Role.SYSTEM]
        return [
            system,
            *recent_window(turns, self._history_window),
            ConversationMessage(Role.USER, text),
        ]

    async def process_message(
        self,
        text: str,
        history: list[ConversationMessage] | None = None,
        page_context: str | None = None,
    ) -> list[Intent]:
        """Ask the model what to do. Always returns at least one Intent."""
        messages = self.build_messages(text, history, page_context)

        try:
            raw = await self._complete(messages)
        except LLMError as exc:
            logger.error("Completion failed: %s", exc)
            return [fallback_intent(ERROR_TEXT)]
        except Exception as exc:
            logger.exception("Unexpected error during completion: %s", exc)
            return [fallback_intent(ERROR_TEXT)]

        return self._known_intents(parse_response(raw))

    def _known_intents(self, intents: list[Intent]) -> list[Intent]:
        known = []
        for intent in intents:
            if intent.action in CONTROL_ACTIONS or intent.action in self._registry:
                known.append(intent)
            else:
                logger.warning("Dropping unknown action from model reply: %s", intent.action)
        if not known:
            return [fallback_intent(intents[0].response_text)]
        return known

    # ------------------------------------------------------------------
    # Public: full turn
    # ------------------------------------------------------------------

    async def handle_message(
        self,
        text: str,
        capabilities: AppCapabilities,
        history: list[ConversationMessage] | None = None,
        page_context: str | None = None,
    ) -> AssistantReply:
        """Process one user message end to end.

        If handle_message() is called again while this call is still waiting
        on the model, this call's reply comes back with kind STALE and none
        of its intents run.
        """
        self._generation += 1
        generation = self._generation

        intents = await self.process_message(text, history, page_context)
        message = intents[0].response_text

        if generation != self._generation:
            logger.info("Discarding stale reply for generation %d (latest %d)", generation, self._generation)
            return AssistantReply(kind=ResponseKind.STALE, message=message, intents=intents)

        result = await dispatch_batch(
            intents, capabilities, self._registry, self._policy, self._resolver,
        )
        return AssistantReply(
            kind=self._kind_of(intents),
            message=message,
            intents=intents,
            result=result,
            navigate_to=self._navigation_target(intents),
        )

    @staticmethod
    def _kind_of(intents: list[Intent]) -> ResponseKind:
        if any(i.action not in CONTROL_ACTIONS for i in intents):
            return ResponseKind.ACTIONS
        if any(i.action == NAVIGATE for i in intents):
            return ResponseKind.NAVIGATE
        return ResponseKind.CHAT

    @staticmethod
    def _navigation_target(intents: list[Intent]) -> str | None:
        for intent in intents:
            if intent.action == NAVIGATE:
                path = intent.data.get("path") or intent.data.get("route")
                if isinstance(path, str) and path:
                    return path if path.startswith("/") else f"/{path}"
        return None

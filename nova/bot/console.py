"""
Nova Assistant — Console host.

A terminal chat over the in-memory stores. It plays the part a UI host
plays: keeps the chat history, tracks the current page, rebuilds the app
context before every turn and renders the AssistantReply.

Commands:
    /page <path>   pretend the user switched to another page
    /context       print the app context that is sent to the model
    /clear         forget the chat history
    /quit          leave
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from nova.core.assistant import AssistantService, ResponseKind
from nova.core.context import build_app_context
from nova.core.outcomes import OutcomeStatus
from nova.core.registry import default_registry
from nova.data.memory_store import memory_capabilities
from nova.data.models import ConversationMessage, Role

if TYPE_CHECKING:
    from nova.core.assistant import AssistantReply
    from nova.ports.capabilities import AppCapabilities

logger = logging.getLogger(__name__)

_STATUS_MARK = {
    OutcomeStatus.DONE: "✅",
    OutcomeStatus.NOT_FOUND: "🔍",
    OutcomeStatus.SKIPPED: "⏭️",
    OutcomeStatus.FAILED: "❌",
}


def render_reply(reply: AssistantReply) -> str:
    """Format a reply for the terminal."""
    lines = [f"Nova: {reply.message}"]
    for outcome in reply.result.outcomes:
        if outcome.status is OutcomeStatus.SKIPPED and outcome.reason == "control action":
            continue
        detail = f" ({outcome.reason})" if outcome.reason else ""
        lines.append(f"  {_STATUS_MARK[outcome.status]} {outcome.action}{detail}")
    if reply.kind is ResponseKind.NAVIGATE and reply.navigate_to:
        lines.append(f"  → navigating to {reply.navigate_to}")
    return "\n".join(lines)


class ConsoleSession:
    def __init__(self, service: AssistantService, capabilities: AppCapabilities) -> None:
        self._service = service
        self._capabilities = capabilities
        self._history: list[ConversationMessage] = []
        self.page = "/"

    def page_context(self) -> str:
        return f"User is viewing {self.page}\n\n{build_app_context(self._capabilities)}"

    async def send(self, text: str) -> AssistantReply:
        reply = await self._service.handle_message(
            text, self._capabilities, self._history, self.page_context(),
        )
        if reply.stale:
            return reply
        self._history.append(ConversationMessage(Role.USER, text))
        self._history.append(ConversationMessage(Role.ASSISTANT, reply.message))
        if reply.navigate_to:
            self.page = reply.navigate_to
        return reply

    def command(self, line: str) -> str | None:
        """Handle a slash command; returns the text to print, None to quit."""
        name, _, arg = line.partition(" ")
        if name == "/quit":
            return None
        if name == "/page":
            self.page = arg.strip() or "/"
            return f"(now on {self.page})"
        if name == "/context":
            return self.page_context()
        if name == "/clear":
            self._history.clear()
            return "(history cleared)"
        return f"Unknown command: {name}"


async def run_console() -> None:
    session = ConsoleSession(AssistantService(default_registry()), memory_capabilities())
    print("Nova is listening. /quit to leave.")

    while True:
        try:
            line = (await asyncio.to_thread(input, "> ")).strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not line:
            continue
        if line.startswith("/"):
            output = session.command(line)
            if output is None:
                break
            print(output)
            continue

        reply = await session.send(line)
        print(render_reply(reply))

    logger.info("Console session ended")


def main() -> None:
    """Run the console chat until the user quits."""
    asyncio.run(run_console())

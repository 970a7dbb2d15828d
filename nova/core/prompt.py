"""
Nova Assistant — Prompt Assembler.

Builds the system prompt from the persona, the registry's action lists and
every module's rules. Pure: the same registry and page context always give
the same prompt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nova.core.personality import NOVA_PERSONALITY, RESPONSE_EXAMPLES

if TYPE_CHECKING:
    from nova.core.registry import ModuleRegistry

NAVIGATION_LINE = "NAVIGATION: NAVIGATE"


def available_actions(registry: ModuleRegistry) -> str:
    """One "<DOMAIN>: a, b, c" line per module, plus the navigation line."""
    lines = [f"{module.label}: {', '.join(module.actions)}" for module in registry]
    lines.append(NAVIGATION_LINE)
    return "\n".join(lines)


def build_system_prompt(registry: ModuleRegistry, page_context: str | None = None) -> str:
    fragments = "\n\n".join(module.prompt_fragment for module in registry)

    prompt = (
        f"{NOVA_PERSONALITY}\n\n"
        f"Available actions:\n{available_actions(registry)}\n\n"
        f"{fragments}\n\n"
        f"{RESPONSE_EXAMPLES}"
    )
    if page_context:
        prompt += f"\n\nCURRENT APP CONTEXT:\n{page_context}"
    return prompt

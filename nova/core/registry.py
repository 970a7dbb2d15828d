"""Module registry — which domain owns which action.

Built once at startup and passed explicitly to the prompt assembler and the
dispatcher. Construction validates the registry, so an overlapping action
name is a startup error rather than a silent routing ambiguity.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable

from nova.core.outcomes import ActionOutcome
from nova.core.parser import CONTROL_ACTIONS
from nova.core.resolver import ResolutionStrategy

Executor = Callable[[str, dict, Any, ResolutionStrategy], Awaitable[ActionOutcome]]


class RegistryError(Exception):
    """Raised when module descriptors conflict with each other."""


@dataclass(frozen=True)
class ModuleDescriptor:
    """One domain: its actions, the prompt text describing them, and its executor."""

    name: str
    actions: tuple[str, ...]
    prompt_fragment: str
    executor: Executor

    @property
    def label(self) -> str:
        return self.name.upper()

    def owns(self, action: str) -> bool:
        return action in self.actions


class ModuleRegistry:
    """Immutable, validated collection of module descriptors."""

    def __init__(self, modules: Iterable[ModuleDescriptor]) -> None:
        self._modules = tuple(modules)
        index: dict[str, ModuleDescriptor] = {}
        names: set[str] = set()

        for module in self._modules:
            if module.name in names:
                raise RegistryError(f"Module {module.name!r} is registered twice")
            names.add(module.name)

            if len(set(module.actions)) != len(module.actions):
                raise RegistryError(f"Module {module.name!r} lists an action more than once")

            for action in module.actions:
                if action in CONTROL_ACTIONS:
                    raise RegistryError(
                        f"Module {module.name!r} cannot claim control action {action!r}"
                    )
                if action in index:
                    raise RegistryError(
                        f"Action {action!r} is declared by both "
                        f"{index[action].name!r} and {module.name!r}"
                    )
                index[action] = module

        self._index = MappingProxyType(index)

    @property
    def modules(self) -> tuple[ModuleDescriptor, ...]:
        return self._modules

    @property
    def action_names(self) -> frozenset[str]:
        return frozenset(self._index)

    def owner_of(self, action: str) -> ModuleDescriptor | None:
        """The module that declared `action`, or None for control/unknown actions."""
        return self._index.get(action)

    def __contains__(self, action: object) -> bool:
        return action in self._index

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)


def default_registry() -> ModuleRegistry:
    """The six built-in domains, in prompt order."""
    from nova.modules import finance, habits, inventory, notes, study, tasks

    return ModuleRegistry([
        finance.MODULE,
        tasks.MODULE,
        notes.MODULE,
        habits.MODULE,
        study.MODULE,
        inventory.MODULE,
    ])

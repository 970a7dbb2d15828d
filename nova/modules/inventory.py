"""
Nova Assistant — Inventory module.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, ConfigDict, Field

from nova.core.outcomes import ActionOutcome
from nova.core.registry import ModuleDescriptor
from nova.core.resolver import DEFAULT_RESOLVER, ResolutionStrategy, field_value
from nova.modules.common import Payload, only_set, run_handler
from nova.ports.capabilities import InventoryCapabilities

INVENTORY_ACTIONS = (
    "ADD_INVENTORY",
    "UPDATE_INVENTORY",
    "DELETE_INVENTORY",
)

INVENTORY_PROMPT = """\
INVENTORY RULES:
ADD_INVENTORY data: item_name (string), quantity (number, default 1), category (string, default 'General'), cost (optional number), store (optional string)
UPDATE_INVENTORY data: item_name (to find the item) and any fields to change (quantity, status, notes, warranty_expiry, category)
DELETE_INVENTORY data: item_name

Inventory Examples:
- "bought 5 pens" → ADD_INVENTORY {item_name: "Pens", quantity: 5}
- "got a new monitor from Star Tech for 18000" → ADD_INVENTORY {item_name: "Monitor", category: "Electronics", cost: 18000, store: "Star Tech"}
- "sold my old phone" → UPDATE_INVENTORY {item_name: "phone", status: "sold"}
- "macbook warranty runs to 2026-01-01" → UPDATE_INVENTORY {item_name: "macbook", warranty_expiry: "2026-01-01"}
- "throw out the broken kettle" → DELETE_INVENTORY {item_name: "kettle"}"""

_ITEM_NAME = AliasChoices("item_name", "name", "item")


class NewItem(Payload):
    item_name: str = Field(validation_alias=_ITEM_NAME)
    quantity: int = 1
    category: str = "General"
    cost: float | None = None
    store: str | None = None


class ItemUpdate(Payload):
    """Any extra field the model sends is carried into the update."""

    model_config = ConfigDict(extra="allow")

    item_name: str = Field(validation_alias=_ITEM_NAME)
    quantity: int | None = None
    cost: float | None = None


class ItemRef(Payload):
    item_name: str = Field(validation_alias=_ITEM_NAME)


def _as_dict(record: Any) -> dict:
    if isinstance(record, Mapping):
        return dict(record)
    return {k: v for k, v in vars(record).items() if not k.startswith("_")}


async def _add_item(action: str, p: NewItem, hooks: InventoryCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    item = {"item_name": p.item_name, "quantity": p.quantity, "category": p.category}
    item.update(only_set(cost=p.cost, store=p.store))
    await hooks.add_item(item)
    return ActionOutcome.done(action)


async def _update_item(action: str, p: ItemUpdate, hooks: InventoryCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    target = resolver.resolve(p.item_name, hooks.items, "item_name")
    if target is None:
        return ActionOutcome.not_found(action, p.item_name, "item")

    changes = p.model_dump(exclude_none=True)
    # item_name in the payload is the lookup key, not a rename
    changes.pop("item_name", None)
    changes.pop("id", None)

    merged = _as_dict(target)
    merged.update(changes)
    merged["id"] = field_value(target, "id")
    await hooks.update_item(merged)
    return ActionOutcome.done(action)


async def _delete_item(action: str, p: ItemRef, hooks: InventoryCapabilities, resolver: ResolutionStrategy) -> ActionOutcome:
    target = resolver.resolve(p.item_name, hooks.items, "item_name")
    if target is None:
        return ActionOutcome.not_found(action, p.item_name, "item")
    await hooks.delete_item(str(field_value(target, "id")))
    return ActionOutcome.done(action)


_HANDLERS = {
    "ADD_INVENTORY": (NewItem, _add_item),
    "UPDATE_INVENTORY": (ItemUpdate, _update_item),
    "DELETE_INVENTORY": (ItemRef, _delete_item),
}


async def execute(
    action: str,
    data: dict,
    hooks: InventoryCapabilities,
    resolver: ResolutionStrategy = DEFAULT_RESOLVER,
) -> ActionOutcome:
    return await run_handler(_HANDLERS, action, data, hooks, resolver)


MODULE = ModuleDescriptor(
    name="inventory",
    actions=INVENTORY_ACTIONS,
    prompt_fragment=INVENTORY_PROMPT,
    executor=execute,
)

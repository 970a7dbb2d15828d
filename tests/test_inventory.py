"""Tests for nova.modules.inventory."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from nova.core.outcomes import OutcomeStatus
from nova.modules.inventory import execute


class TestInventory:
    @pytest.mark.asyncio
    async def test_add_defaults(self, capabilities):
        await execute("ADD_INVENTORY", {"item_name": "Pens"}, capabilities.inventory)
        item = capabilities.inventory.items[0]
        assert item["quantity"] == 1
        assert item["category"] == "General"
        assert "cost" not in item

    @pytest.mark.asyncio
    async def test_add_with_cost_and_store(self, capabilities):
        await execute(
            "ADD_INVENTORY",
            {"item_name": "Monitor", "quantity": "2", "cost": "18000", "store": "Star Tech"},
            capabilities.inventory,
        )
        item = capabilities.inventory.items[0]
        assert item["quantity"] == 2
        assert item["cost"] == 18000.0
        assert item["store"] == "Star Tech"

    @pytest.mark.asyncio
    async def test_update_merges_record_and_keeps_id(self):
        hooks = MagicMock()
        hooks.items = [{"id": "i1", "item_name": "Old Phone", "quantity": 1, "category": "Electronics"}]
        hooks.update_item = AsyncMock()

        await execute(
            "UPDATE_INVENTORY",
            {"item_name": "phone", "status": "sold", "warranty_expiry": "2026-01-01", "id": "bogus"},
            hooks,
        )

        hooks.update_item.assert_awaited_once_with({
            "id": "i1",
            "item_name": "Old Phone",
            "quantity": 1,
            "category": "Electronics",
            "status": "sold",
            "warranty_expiry": "2026-01-01",
        })

    @pytest.mark.asyncio
    async def test_delete_by_item_name(self, capabilities):
        await execute("ADD_INVENTORY", {"item_name": "Broken kettle"}, capabilities.inventory)
        outcome = await execute("DELETE_INVENTORY", {"item_name": "kettle"}, capabilities.inventory)
        assert outcome.ok
        assert capabilities.inventory.items == []

    @pytest.mark.asyncio
    async def test_missing_item(self, capabilities):
        outcome = await execute("DELETE_INVENTORY", {"item_name": "kettle"}, capabilities.inventory)
        assert outcome.status is OutcomeStatus.NOT_FOUND

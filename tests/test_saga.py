"""Tests for nova.core.saga — compensation on mid-way failures."""

import pytest
from unittest.mock import AsyncMock

from nova.core.saga import PartialFailureError, SagaStep, run_saga


class TestRunSaga:
    @pytest.mark.asyncio
    async def test_all_steps_run_in_order(self):
        calls = []

        async def step(name):
            calls.append(name)

        await run_saga("demo", [
            SagaStep("one", lambda: step("one")),
            SagaStep("two", lambda: step("two")),
        ])
        assert calls == ["one", "two"]

    @pytest.mark.asyncio
    async def test_compensates_completed_steps_in_reverse(self):
        undo = []
        first_undo = AsyncMock(side_effect=lambda: undo.append("one"))
        second_undo = AsyncMock(side_effect=lambda: undo.append("two"))

        with pytest.raises(PartialFailureError) as exc_info:
            await run_saga("demo", [
                SagaStep("one", AsyncMock(), first_undo),
                SagaStep("two", AsyncMock(), second_undo),
                SagaStep("three", AsyncMock(side_effect=ValueError("nope"))),
            ])

        err = exc_info.value
        assert undo == ["two", "one"]
        assert err.procedure == "demo"
        assert err.failed_step == "three"
        assert isinstance(err.cause, ValueError)
        assert err.compensated is True

    @pytest.mark.asyncio
    async def test_failed_compensation_is_reported(self):
        with pytest.raises(PartialFailureError) as exc_info:
            await run_saga("demo", [
                SagaStep("one", AsyncMock(), AsyncMock(side_effect=RuntimeError("undo broke"))),
                SagaStep("two", AsyncMock(side_effect=ValueError("nope"))),
            ])
        assert exc_info.value.compensated is False
        assert "NOT rolled back" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_step_without_compensation_counts_as_not_compensated(self):
        with pytest.raises(PartialFailureError) as exc_info:
            await run_saga("demo", [
                SagaStep("one", AsyncMock()),
                SagaStep("two", AsyncMock(side_effect=ValueError("nope"))),
            ])
        assert exc_info.value.compensated is False

    @pytest.mark.asyncio
    async def test_first_step_failure_propagates_unchanged(self):
        with pytest.raises(ValueError, match="first"):
            await run_saga("demo", [
                SagaStep("one", AsyncMock(side_effect=ValueError("first"))),
                SagaStep("two", AsyncMock()),
            ])

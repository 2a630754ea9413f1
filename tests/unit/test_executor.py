"""Unit tests for the bounded executor."""

from __future__ import annotations

import asyncio

import pytest

from workflow_trigger.trigger.executor import run_bounded


class ConcurrencyProbe:
    def __init__(self) -> None:
        self.current = 0
        self.peak = 0

    async def work(self, item: tuple[int, float]) -> int:
        value, delay = item
        self.current += 1
        self.peak = max(self.peak, self.current)
        try:
            await asyncio.sleep(delay)
        finally:
            self.current -= 1
        if value < 0:
            raise ValueError(f"bad item {value}")
        return value * 10


def _on_error(item: tuple[int, float], exc: Exception) -> int:
    return -1


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", [1, 2, 3, 10])
async def test_results_are_positional_and_bounded(limit: int) -> None:
    # Later items finish first to shake out ordering bugs.
    items = [(i, 0.01 * (6 - i)) for i in range(6)]
    probe = ConcurrencyProbe()

    results = await run_bounded(items, limit, probe.work, _on_error)

    assert results == [0, 10, 20, 30, 40, 50]
    assert probe.peak <= limit
    assert probe.peak == min(limit, len(items))


@pytest.mark.asyncio
async def test_failures_are_contained_and_do_not_stop_the_batch() -> None:
    items = [(1, 0.0), (-1, 0.0), (3, 0.01)]
    probe = ConcurrencyProbe()

    results = await run_bounded(items, 2, probe.work, _on_error)

    assert results == [10, -1, 30]


@pytest.mark.asyncio
async def test_on_error_receives_item_and_exception() -> None:
    seen: list[tuple[tuple[int, float], str]] = []

    def on_error(item: tuple[int, float], exc: Exception) -> int:
        seen.append((item, str(exc)))
        return 0

    await run_bounded([(-5, 0.0)], 1, ConcurrencyProbe().work, on_error)

    assert seen == [((-5, 0.0), "bad item -5")]


@pytest.mark.asyncio
async def test_empty_input_returns_immediately() -> None:
    async def never(_: object) -> int:
        raise AssertionError("should not be called")

    assert await run_bounded([], 3, never, lambda _i, _e: 0) == []


@pytest.mark.asyncio
async def test_limit_one_runs_sequentially() -> None:
    order: list[str] = []

    async def work(name: str) -> str:
        order.append(f"start:{name}")
        await asyncio.sleep(0)
        order.append(f"end:{name}")
        return name

    await run_bounded(["a", "b", "c"], 1, work, lambda _i, _e: "")

    assert order == ["start:a", "end:a", "start:b", "end:b", "start:c", "end:c"]


@pytest.mark.asyncio
async def test_invalid_limit_is_rejected() -> None:
    with pytest.raises(ValueError):
        await run_bounded([(1, 0.0)], 0, ConcurrencyProbe().work, _on_error)

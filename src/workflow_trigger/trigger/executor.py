"""Bounded-concurrency runner for a batch of independent tasks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar, cast

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_bounded(
    items: Sequence[T],
    limit: int,
    worker: Callable[[T], Awaitable[R]],
    on_error: Callable[[T, Exception], R],
) -> list[R]:
    """Run `worker` over `items` with at most `limit` calls in flight.

    A sliding window: a new call starts as soon as fewer than `limit` are
    running. Results are positional. An exception escaping `worker` is turned
    into a result by `on_error`, so one failing item never stops the batch.
    The call returns once every started item has finished.
    """

    if limit < 1:
        raise ValueError("limit must be a positive integer")
    if not items:
        return []

    results: list[R | None] = [None] * len(items)
    in_flight: dict[asyncio.Task[R], int] = {}

    def _collect(done: set[asyncio.Task[R]]) -> None:
        for finished in done:
            idx = in_flight.pop(finished)
            if finished.cancelled():
                results[idx] = on_error(items[idx], RuntimeError("task was cancelled"))
                continue
            exc = finished.exception()
            if exc is None:
                results[idx] = finished.result()
                continue
            if not isinstance(exc, Exception):
                raise exc
            logger.exception(
                "Task raised past its boundary", exc_info=exc, extra={"index": idx}
            )
            results[idx] = on_error(items[idx], exc)

    try:
        for idx, item in enumerate(items):
            if len(in_flight) >= limit:
                done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
                _collect(done)
            in_flight[asyncio.ensure_future(worker(item))] = idx

        while in_flight:
            done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
            _collect(done)
    finally:
        # Only reached with work pending if the batch itself was cancelled.
        for pending in in_flight:
            pending.cancel()

    return cast(list[R], results)

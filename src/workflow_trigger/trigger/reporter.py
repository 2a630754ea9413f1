"""Outcome reporting: structured events plus fire-and-forget notifications."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from workflow_trigger.trigger.outcomes import BatchSummary

logger = logging.getLogger("workflow_trigger.events")


class Notifier(Protocol):
    async def send(self, text: str) -> None: ...


class OutcomeReporter:
    """Turns task transitions into log events and external notifications.

    Notifications are deliberately detached from the decision pipeline:
    :meth:`notify` schedules the send and returns at once, and the send's
    result is discarded. A failing send is logged here and goes nowhere else.
    Pending sends are tracked only so :meth:`drain` can let them finish before
    the run ends.
    """

    def __init__(self, notifier: Notifier | None = None) -> None:
        self._notifier = notifier
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def event(self, name: str, **fields: Any) -> None:
        logger.info(name, extra={"event": name, **fields})

    def summary(self, summary: BatchSummary) -> None:
        self.event("SUMMARY", **summary.to_json())

    def notify(self, text: str) -> None:
        if self._notifier is None:
            return
        task = asyncio.get_running_loop().create_task(self._send(text))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, text: str) -> None:
        assert self._notifier is not None
        try:
            await self._notifier.send(text)
        except Exception:
            logger.warning("Notification failed", exc_info=True)

    async def drain(self) -> None:
        """Wait for every scheduled notification to settle."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

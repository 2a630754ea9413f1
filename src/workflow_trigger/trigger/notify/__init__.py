"""Best-effort outcome notifications."""

from __future__ import annotations

from workflow_trigger.trigger.notify.telegram import TelegramNotifier

__all__ = ["TelegramNotifier"]

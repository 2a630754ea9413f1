"""Run-all: process every configured task once.

This is the single operation behind the CLI timer and the HTTP trigger.
Individual task failures never surface here as exceptions; callers see them
as `failed` outcomes and in the SUMMARY event.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from workflow_trigger.trigger.config import TriggerSettings
from workflow_trigger.trigger.cooldown import CooldownStore, JsonFileCooldownStore
from workflow_trigger.trigger.engine import Actuator, DecisionEngine, utc_now
from workflow_trigger.trigger.errors import TaskConfigError, classify_exception
from workflow_trigger.trigger.executor import run_bounded
from workflow_trigger.trigger.github.client import WorkflowClient
from workflow_trigger.trigger.notify.telegram import TelegramNotifier
from workflow_trigger.trigger.outcomes import BatchSummary, TaskOutcome
from workflow_trigger.trigger.reporter import Notifier, OutcomeReporter
from workflow_trigger.trigger.tasks import TaskSpec, load_tasks

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5


def require_cooldown_store(tasks: Sequence[TaskSpec], store: CooldownStore | None) -> None:
    """Fail fast when a task needs cooldown gating but nothing backs it."""

    if store is not None:
        return
    needing = [t.name for t in tasks if t.uses_cooldown]
    if needing:
        raise TaskConfigError(
            "TRIGGER_COOLDOWN_STATE_PATH is required; tasks with a cooldown: "
            + ", ".join(needing)
        )


async def run_all(
    tasks: Sequence[TaskSpec],
    *,
    actuator: Actuator,
    store: CooldownStore | None = None,
    notifier: Notifier | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    clock: Callable[[], datetime] = utc_now,
) -> list[TaskOutcome]:
    """Process `tasks` with at most `concurrency` in flight.

    Returns one outcome per task, in input order. Pending notifications are
    drained before returning.
    """

    reporter = OutcomeReporter(notifier)
    engine = DecisionEngine(actuator=actuator, reporter=reporter, store=store, clock=clock)

    def _contain(task: TaskSpec, exc: Exception) -> TaskOutcome:
        kind = classify_exception(exc)
        return TaskOutcome.failed(task.name, kind, str(exc) or type(exc).__name__)

    try:
        outcomes = await run_bounded(tasks, concurrency, engine.process, _contain)
        reporter.summary(BatchSummary.from_outcomes(outcomes))
    finally:
        await reporter.drain()
    return outcomes


def build_store(settings: TriggerSettings) -> CooldownStore | None:
    if settings.cooldown_state_path is None:
        return None
    return JsonFileCooldownStore(settings.cooldown_state_path)


async def run_from_settings(
    settings: TriggerSettings, *, tasks: Sequence[TaskSpec] | None = None
) -> list[TaskOutcome]:
    """Load tasks and bindings from `settings`, then run every task once."""

    if tasks is None:
        tasks = load_tasks(settings.tasks_file)
    store = build_store(settings)
    require_cooldown_store(tasks, store)

    notifier: TelegramNotifier | None = None
    if settings.notifications_enabled:
        notifier = TelegramNotifier(
            bot_token=settings.telegram_bot_token, chat_id=settings.telegram_chat_id
        )
    else:
        logger.info("Telegram credentials missing; notifications disabled")

    async with WorkflowClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
        probe_timeout=settings.probe_timeout_seconds,
        dispatch_timeout=settings.dispatch_timeout_seconds,
    ) as client:
        return await run_all(
            tasks,
            actuator=client,
            store=store,
            notifier=notifier,
            concurrency=settings.concurrency,
        )


def summarize(outcomes: Sequence[TaskOutcome]) -> str:
    summary = BatchSummary.from_outcomes(outcomes)
    return (
        f"Tasks: {summary.total} total, {summary.triggered} triggered, "
        f"{summary.skipped} skipped, {summary.failed} failed"
    )

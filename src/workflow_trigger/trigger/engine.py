"""Per-task decision logic: probe, match, cooldown gate, trigger.

Conditional tasks move through

    probe -> match -> cooldown gate -> dispatch -> record cooldown

and stop early as `skipped` when the status does not match or the cooldown is
still active. Scheduled tasks dispatch directly and never consult the cooldown
store, even when a window is configured.

`process` never raises: any failure becomes a `failed` outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Protocol

from workflow_trigger.trigger.cooldown import CooldownStore
from workflow_trigger.trigger.errors import (
    ErrorKind,
    TaskConfigError,
    TriggerError,
    classify_exception,
)
from workflow_trigger.trigger.notify.telegram import (
    format_condition_met,
    format_cooldown,
    format_failure,
    format_scheduled,
    format_status_normal,
)
from workflow_trigger.trigger.outcomes import OutcomeReason, OutcomeStatus, TaskOutcome
from workflow_trigger.trigger.reporter import OutcomeReporter
from workflow_trigger.trigger.tasks import DispatchTarget, TaskMode, TaskSpec, cooldown_key

logger = logging.getLogger(__name__)


class Actuator(Protocol):
    async def probe(self, url: str) -> int: ...

    async def dispatch(
        self, target: DispatchTarget, inputs: Mapping[str, str] | None = None
    ) -> None: ...


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class DecisionEngine:
    def __init__(
        self,
        *,
        actuator: Actuator,
        reporter: OutcomeReporter,
        store: CooldownStore | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._actuator = actuator
        self._reporter = reporter
        self._store = store
        self._clock = clock

    async def process(self, task: TaskSpec) -> TaskOutcome:
        self._reporter.event("TASK_START", task_name=task.name, mode=task.mode.value)
        try:
            if task.mode is TaskMode.CONDITIONAL:
                return await self._process_conditional(task)
            return await self._process_scheduled(task)
        except Exception as e:
            return self._fail(task, e)

    async def _process_conditional(self, task: TaskSpec) -> TaskOutcome:
        assert task.check_url is not None
        self._reporter.event("MODE_CHECK", task_name=task.name, check_url=task.check_url)

        status_code = await self._actuator.probe(task.check_url)

        if status_code not in task.trigger_status_codes:
            self._reporter.event(
                "CHECK_SKIP",
                task_name=task.name,
                status_code=status_code,
                trigger_codes=list(task.trigger_status_codes),
            )
            if task.notify_on_skip:
                self._reporter.notify(format_status_normal(task.name, status_code))
            return TaskOutcome(
                task_name=task.name,
                status=OutcomeStatus.SKIPPED,
                reason=OutcomeReason.STATUS_CODE_NOT_TRIGGER,
                status_code=status_code,
            )

        key = cooldown_key(task.check_url, status_code)
        now = self._clock()

        if task.uses_cooldown:
            store = self._require_store(task)
            last_triggered = await store.get(key)
            if last_triggered is not None:
                elapsed = now - last_triggered
                if elapsed < task.cooldown_window:
                    remaining = (task.cooldown_window - elapsed).total_seconds()
                    self._reporter.event(
                        "COOLDOWN_SKIP",
                        task_name=task.name,
                        remaining_minutes=round(remaining / 60),
                    )
                    if task.notify_on_skip:
                        self._reporter.notify(format_cooldown(task.name, remaining))
                    return TaskOutcome(
                        task_name=task.name,
                        status=OutcomeStatus.SKIPPED,
                        reason=OutcomeReason.COOLDOWN_ACTIVE,
                        status_code=status_code,
                        remaining_seconds=remaining,
                    )

        self._reporter.event("TRIGGER_EXECUTE", task_name=task.name, status_code=status_code)
        target = task.dispatch_target
        await self._actuator.dispatch(target, task.inputs)

        if task.uses_cooldown:
            # Written only after a successful dispatch.
            try:
                await self._require_store(task).put(key, now)
            except TriggerError as e:
                raise TriggerError(
                    f"workflow {target.label} dispatched but cooldown not recorded: {e}",
                    kind=ErrorKind.STORE_ERROR,
                ) from e

        self._reporter.event(
            "TRIGGER_SUCCESS", task_name=task.name, workflow=target.label, ref=target.ref
        )
        self._reporter.notify(format_condition_met(task.name, status_code, target.label))
        return TaskOutcome(
            task_name=task.name,
            status=OutcomeStatus.TRIGGERED,
            reason=OutcomeReason.CONDITION_MET,
            status_code=status_code,
        )

    async def _process_scheduled(self, task: TaskSpec) -> TaskOutcome:
        self._reporter.event("SCHEDULED_EXECUTE", task_name=task.name)
        target = task.dispatch_target
        await self._actuator.dispatch(target, task.inputs)

        self._reporter.event(
            "TRIGGER_SUCCESS", task_name=task.name, workflow=target.label, ref=target.ref
        )
        self._reporter.notify(format_scheduled(task.name, target.label))
        return TaskOutcome(
            task_name=task.name,
            status=OutcomeStatus.TRIGGERED,
            reason=OutcomeReason.SCHEDULED,
        )

    def _require_store(self, task: TaskSpec) -> CooldownStore:
        if self._store is None:
            raise TaskConfigError(f"task {task.name!r} uses a cooldown but no store is bound")
        return self._store

    def _fail(self, task: TaskSpec, exc: Exception) -> TaskOutcome:
        kind = classify_exception(exc)
        message = str(exc) or type(exc).__name__
        if kind is ErrorKind.UNKNOWN_ERROR:
            logger.debug("Unclassified task failure", exc_info=exc)

        self._reporter.event(
            "TASK_ERROR",
            task_name=task.name,
            error_type=kind.value,
            error_message=message,
        )
        self._reporter.notify(format_failure(task.name, kind.value, message))
        return TaskOutcome.failed(task.name, kind, message)

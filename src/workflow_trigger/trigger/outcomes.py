"""Per-task outcomes and the batch summary.

Outcomes live for one run and are handed back to the caller; only cooldown
timestamps are persisted.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from workflow_trigger.trigger.errors import ErrorKind


class OutcomeStatus(str, Enum):
    TRIGGERED = "triggered"
    SKIPPED = "skipped"
    FAILED = "failed"


class OutcomeReason(str, Enum):
    STATUS_CODE_NOT_TRIGGER = "status_code_not_trigger"
    COOLDOWN_ACTIVE = "cooldown_active"
    CONDITION_MET = "condition_met"
    SCHEDULED = "scheduled"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class TaskOutcome:
    """Result of processing one task."""

    task_name: str
    status: OutcomeStatus
    reason: OutcomeReason
    status_code: int | None = None
    remaining_seconds: float | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None

    @classmethod
    def failed(cls, task_name: str, kind: ErrorKind, message: str) -> TaskOutcome:
        return cls(
            task_name=task_name,
            status=OutcomeStatus.FAILED,
            reason=OutcomeReason.ERROR,
            error_kind=kind,
            error_message=message,
        )

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "task_name": self.task_name,
            "status": self.status.value,
            "reason": self.reason.value,
        }
        if self.status_code is not None:
            out["status_code"] = self.status_code
        if self.remaining_seconds is not None:
            out["remaining_seconds"] = self.remaining_seconds
        if self.error_kind is not None:
            out["error_type"] = self.error_kind.value
        if self.error_message is not None:
            out["error_message"] = self.error_message
        return out


@dataclass(frozen=True, slots=True)
class BatchSummary:
    total: int
    triggered: int
    skipped: int
    failed: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[TaskOutcome]) -> BatchSummary:
        def _count(status: OutcomeStatus) -> int:
            return sum(1 for o in outcomes if o.status is status)

        return cls(
            total=len(outcomes),
            triggered=_count(OutcomeStatus.TRIGGERED),
            skipped=_count(OutcomeStatus.SKIPPED),
            failed=_count(OutcomeStatus.FAILED),
        )

    def to_json(self) -> dict[str, object]:
        return {
            "total_tasks": self.total,
            "triggered": self.triggered,
            "skipped": self.skipped,
            "failed": self.failed,
            "timestamp": self.timestamp.isoformat(),
        }

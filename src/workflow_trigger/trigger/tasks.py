"""Task specifications and the JSON task file loader.

A task either probes a URL and triggers a workflow when the response status
matches (conditional mode), or triggers the workflow on every run (scheduled
mode). The task list is supplied by the caller and never mutated.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from workflow_trigger.trigger.errors import TaskConfigError

logger = logging.getLogger(__name__)

COOLDOWN_KEY_PREFIX = "last_trigger"


class TaskMode(str, Enum):
    CONDITIONAL = "conditional"
    SCHEDULED = "scheduled"


@dataclass(frozen=True, slots=True)
class DispatchTarget:
    """The remote workflow a task starts."""

    owner: str
    repo: str
    workflow_id: str
    ref: str

    @property
    def label(self) -> str:
        return f"{self.owner}/{self.repo}/{self.workflow_id}"


class TaskSpec(BaseModel):
    """One monitored or scheduled unit of work.

    `check_interval` is the cooldown window in milliseconds; 0 disables cooldown
    gating. Scheduled tasks keep `check_url`/`trigger_status_codes` if given but
    never use them.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    check_url: str | None = None
    trigger_status_codes: tuple[int, ...] = ()
    owner: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    workflow_id: str = Field(min_length=1)
    ref: str = Field(default="main", min_length=1)
    enable_check: bool = False
    check_interval: int = Field(default=0, ge=0, description="Cooldown window in milliseconds")
    notify_on_skip: bool = False
    inputs: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _require_check_target(self) -> TaskSpec:
        if not self.enable_check:
            return self
        if not (self.check_url or "").strip():
            raise ValueError(f"task {self.name!r}: check_url is required when enable_check is true")
        if not self.trigger_status_codes:
            raise ValueError(
                f"task {self.name!r}: trigger_status_codes is required when enable_check is true"
            )
        return self

    @property
    def mode(self) -> TaskMode:
        return TaskMode.CONDITIONAL if self.enable_check else TaskMode.SCHEDULED

    @property
    def cooldown_window(self) -> timedelta:
        return timedelta(milliseconds=self.check_interval)

    @property
    def uses_cooldown(self) -> bool:
        """True when the cooldown gate is reachable for this task."""

        return self.mode is TaskMode.CONDITIONAL and self.check_interval > 0

    @property
    def dispatch_target(self) -> DispatchTarget:
        return DispatchTarget(
            owner=self.owner, repo=self.repo, workflow_id=self.workflow_id, ref=self.ref
        )


def cooldown_key(check_url: str, status_code: int) -> str:
    """Dedup key for a (check target, matched status) pair."""

    return f"{COOLDOWN_KEY_PREFIX}:{check_url}:{status_code}"


def parse_tasks(raw: Any) -> list[TaskSpec]:
    """Validate a decoded task document.

    Accepts either a JSON array of tasks or an object with a `tasks` array.
    """

    if isinstance(raw, dict):
        raw = raw.get("tasks")
    if not isinstance(raw, list):
        raise TaskConfigError("task configuration must be a list of tasks")

    tasks: list[TaskSpec] = []
    for idx, item in enumerate(raw):
        try:
            tasks.append(TaskSpec.model_validate(item))
        except ValidationError as e:
            raise TaskConfigError(f"invalid task at index {idx}: {e}") from e
    return tasks


def load_tasks(path: Path) -> list[TaskSpec]:
    """Load and validate the task list from a JSON file."""

    if not path.exists():
        raise TaskConfigError(f"task file not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TaskConfigError(f"task file is not valid JSON: {path}: {e}") from e

    tasks = parse_tasks(raw)
    logger.debug("Loaded task configuration", extra={"path": str(path), "tasks": len(tasks)})
    return tasks

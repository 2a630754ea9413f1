"""GitHub Actions dispatch and status probing."""

from __future__ import annotations

from workflow_trigger.trigger.github.client import WorkflowClient

__all__ = ["WorkflowClient"]

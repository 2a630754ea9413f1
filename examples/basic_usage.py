#!/usr/bin/env python3
"""Programmatic run-all example.

This demonstrates using the trigger components directly:

* load settings from `.env`
* build the task list in code instead of reading `TRIGGER_TASKS_FILE`
* run every task once and print the per-task outcomes

The cooldown state is kept in `--state` so repeated runs are throttled.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Sequence

from workflow_trigger.trigger.config import TriggerSettings
from workflow_trigger.trigger.logging import configure_logging
from workflow_trigger.trigger.service import run_from_settings, summarize
from workflow_trigger.trigger.tasks import TaskSpec


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trigger a workflow when a page returns 404.")
    parser.add_argument("--repo", required=True, help='Target repository in the form "owner/repo"')
    parser.add_argument("--workflow", required=True, help='Workflow file, e.g. "deploy.yml"')
    parser.add_argument("--url", required=True, help="URL to probe")
    parser.add_argument("--ref", default="main", help="Branch to run the workflow on")
    parser.add_argument(
        "--state",
        type=Path,
        default=Path("agent_state/cooldown.json"),
        help="Cooldown state file",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    owner, _, repo = args.repo.partition("/")

    settings = TriggerSettings().model_copy(update={"cooldown_state_path": args.state})
    configure_logging(settings.log_level)

    task = TaskSpec(
        name=f"{args.repo} watcher",
        check_url=args.url,
        trigger_status_codes=(404,),
        owner=owner,
        repo=repo,
        workflow_id=args.workflow,
        ref=args.ref,
        enable_check=True,
        check_interval=30 * 60 * 1000,
    )

    outcomes = asyncio.run(run_from_settings(settings, tasks=[task]))
    for outcome in outcomes:
        print(outcome.to_json())
    print(summarize(outcomes))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

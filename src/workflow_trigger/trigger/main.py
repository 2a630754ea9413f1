"""CLI entrypoint for the workflow trigger.

Commands:
- `run`: process every task once (point an external cron here)
- `loop`: process every task on a fixed interval
- `validate`: check the task file without touching the network
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from workflow_trigger import __version__
from workflow_trigger.trigger.config import TriggerSettings
from workflow_trigger.trigger.errors import TaskConfigError
from workflow_trigger.trigger.logging import configure_logging
from workflow_trigger.trigger.service import (
    build_store,
    require_cooldown_store,
    run_from_settings,
    summarize,
)
from workflow_trigger.trigger.tasks import TaskMode, load_tasks

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-trigger",
        description="Probe endpoints and dispatch GitHub Actions workflows",
    )
    parser.add_argument(
        "--version", action="version", version=f"github-workflow-trigger {__version__}"
    )
    parser.add_argument(
        "--tasks",
        dest="tasks_file",
        type=Path,
        default=None,
        help="Task file (JSON). Overrides TRIGGER_TASKS_FILE.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Process every task once")

    loop = subparsers.add_parser("loop", help="Process every task on a fixed interval")
    loop.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between runs. Overrides TRIGGER_INTERVAL_SECONDS.",
    )
    loop.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Stop after this many runs (default: run forever)",
    )

    subparsers.add_parser("validate", help="Validate the task file and print the tasks")
    return parser


async def _loop(settings: TriggerSettings, *, interval: float, iterations: int | None) -> None:
    completed = 0
    while iterations is None or completed < iterations:
        outcomes = await run_from_settings(settings)
        print(summarize(outcomes))
        completed += 1
        if iterations is not None and completed >= iterations:
            break
        await asyncio.sleep(interval)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = TriggerSettings()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.tasks_file is not None:
        settings = settings.model_copy(update={"tasks_file": args.tasks_file})

    configure_logging(settings.log_level)

    try:
        if args.command == "validate":
            tasks = load_tasks(settings.tasks_file)
            require_cooldown_store(tasks, build_store(settings))
            for task in tasks:
                target = task.dispatch_target
                if task.mode is TaskMode.CONDITIONAL:
                    detail = (
                        f"check {task.check_url} for {list(task.trigger_status_codes)}, "
                        f"cooldown {task.check_interval}ms"
                    )
                else:
                    detail = "scheduled"
                print(f"{task.name}: {detail} -> {target.label}@{target.ref}")
            print(f"{len(tasks)} task(s) OK")
            return 0

        if args.command == "run":
            outcomes = asyncio.run(run_from_settings(settings))
            print(summarize(outcomes))
            return 0

        if args.command == "loop":
            interval = args.interval if args.interval is not None else settings.interval_seconds
            if interval <= 0:
                parser.error("--interval must be positive")
            asyncio.run(_loop(settings, interval=interval, iterations=args.iterations))
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except TaskConfigError as e:
        logger.error(str(e))
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

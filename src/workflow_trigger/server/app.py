"""FastAPI app factory.

The HTTP surface is a manual trigger: it runs the same run-all as the timer
and always answers with a fixed acknowledgement. Per-task results are only
visible in the structured event stream.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from workflow_trigger import __version__
from workflow_trigger.trigger.config import TriggerSettings
from workflow_trigger.trigger.outcomes import TaskOutcome
from workflow_trigger.trigger.service import run_from_settings

logger = logging.getLogger(__name__)

ACKNOWLEDGEMENT = (
    "Workflow trigger check completed. See the logs and notifications for details.\n"
)

RunAll = Callable[[TriggerSettings], Awaitable[list[TaskOutcome]]]


def create_app(
    settings: TriggerSettings | None = None, *, run_all: RunAll = run_from_settings
) -> FastAPI:
    settings = settings or TriggerSettings()

    app = FastAPI(
        title="GitHub Workflow Trigger",
        version=__version__,
        description="Manual trigger for the workflow trigger run-all.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url=None,
    )

    app.state.settings = settings

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    async def _run() -> PlainTextResponse:
        try:
            outcomes = await run_all(settings)
            logger.info("Manual run completed", extra={"tasks": len(outcomes)})
        except Exception:
            logger.exception("Manual run failed")
        return PlainTextResponse(ACKNOWLEDGEMENT, status_code=200)

    app.add_api_route("/", _run, methods=["GET"], include_in_schema=False)
    app.add_api_route("/run", _run, methods=["POST"])

    return app

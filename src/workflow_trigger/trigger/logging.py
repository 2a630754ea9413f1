"""Structured logging configuration.

Every record is one JSON line on stdout. Trigger events (records logged with
an ``event`` extra, see :mod:`workflow_trigger.trigger.reporter`) are emitted
flat: ``{"timestamp", "level", "event", ...fields}``, so a log pipeline can
filter on ``event`` and read fields such as ``task_name`` directly. Ordinary
diagnostics keep their message and nest any extras under ``"extra"``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

# Attributes every LogRecord carries; anything else came in through `extra=`.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

_QUIET_LOGGERS = ("httpx", "httpcore")


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Return the caller-supplied extras of `record`."""

    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        fields = record_fields(record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
        }

        event = fields.pop("event", None)
        if event is not None:
            payload["event"] = event
            for key, value in fields.items():
                payload.setdefault(key, value)
        else:
            payload["logger"] = record.name
            payload["message"] = record.getMessage()
            if fields:
                payload["extra"] = fields

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str) -> None:
    """Send JSON lines to stdout at `level`, replacing existing root handlers."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    # httpx logs every request at INFO; keep it out of the event stream.
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.WARNING))

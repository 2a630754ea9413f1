"""Failure taxonomy for probe, dispatch and cooldown store operations.

The kind is attached where the failure is raised. Classification is advisory:
it feeds logs and notifications and never changes control flow.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    AUTH_ERROR = "AUTH_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER_ERROR = "SERVER_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    STORE_ERROR = "STORE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class TriggerError(Exception):
    """A classified failure from a remote call or the cooldown store."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.UNKNOWN_ERROR,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, status_code: int, body: str) -> TriggerError:
        return cls(
            f"HTTP {status_code}: {body}",
            kind=classify_status(status_code),
            status_code=status_code,
            body=body,
        )


class TaskConfigError(ValueError):
    """Raised when the task list or its bindings are invalid."""


def classify_status(status_code: int) -> ErrorKind:
    if status_code in (401, 403):
        return ErrorKind.AUTH_ERROR
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 429:
        return ErrorKind.RATE_LIMIT
    if 500 <= status_code <= 599:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.UNKNOWN_ERROR


def classify_exception(exc: BaseException) -> ErrorKind:
    if isinstance(exc, TriggerError):
        return exc.kind
    if isinstance(exc, TimeoutError):
        return ErrorKind.TIMEOUT
    return ErrorKind.UNKNOWN_ERROR

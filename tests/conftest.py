"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from workflow_trigger.trigger.tasks import DispatchTarget, TaskSpec


class FakeActuator:
    """Records probe/dispatch calls and returns canned results."""

    def __init__(
        self,
        *,
        statuses: Mapping[str, int] | None = None,
        probe_error: Exception | None = None,
        dispatch_error: Exception | None = None,
    ) -> None:
        self.statuses: dict[str, int] = dict(statuses or {})
        self.probe_error = probe_error
        self.dispatch_error = dispatch_error
        self.probes: list[str] = []
        self.dispatches: list[tuple[DispatchTarget, dict[str, str]]] = []

    async def probe(self, url: str) -> int:
        self.probes.append(url)
        if self.probe_error is not None:
            raise self.probe_error
        return self.statuses.get(url, 200)

    async def dispatch(
        self, target: DispatchTarget, inputs: Mapping[str, str] | None = None
    ) -> None:
        self.dispatches.append((target, dict(inputs or {})))
        if self.dispatch_error is not None:
            raise self.dispatch_error


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def send(self, text: str) -> None:
        self.messages.append(text)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_task(**overrides: Any) -> TaskSpec:
    data: dict[str, Any] = {
        "name": "site monitor",
        "check_url": "https://x/y",
        "trigger_status_codes": [404],
        "owner": "octo-org",
        "repo": "octo-repo",
        "workflow_id": "check-site.yml",
        "ref": "main",
        "enable_check": True,
        "check_interval": 60 * 60 * 1000,
        "notify_on_skip": False,
    }
    data.update(overrides)
    return TaskSpec.model_validate(data)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TRIGGER_GITHUB_TOKEN",
        "GITHUB_TOKEN",
        "GITHUB_BASE_URL",
        "TELEGRAM_BOT_TOKEN",
        "TELEGRAM_CHAT_ID",
        "TRIGGER_TASKS_FILE",
        "TRIGGER_COOLDOWN_STATE_PATH",
        "TRIGGER_CONCURRENCY",
        "TRIGGER_INTERVAL_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

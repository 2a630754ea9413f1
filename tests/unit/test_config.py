"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from workflow_trigger.trigger.config import TriggerSettings


def test_settings_loads_from_dotenv(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(
        "\n".join(
            [
                "TRIGGER_GITHUB_TOKEN=test-token",
                "TRIGGER_COOLDOWN_STATE_PATH=state/cooldown.json",
                "TRIGGER_CONCURRENCY=3",
                "LOG_LEVEL=DEBUG",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = TriggerSettings()

    assert settings.github_token == "test-token"
    assert settings.cooldown_state_path == Path("state/cooldown.json")
    assert settings.concurrency == 3
    assert settings.log_level == "DEBUG"


def test_settings_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_TOKEN", "fallback-token")

    settings = TriggerSettings()

    assert settings.github_token == "fallback-token"
    assert settings.github_base_url == "https://api.github.com"
    assert settings.tasks_file == Path("tasks.json")
    assert settings.cooldown_state_path is None
    assert settings.concurrency == 5
    assert settings.probe_timeout_seconds == 10.0
    assert settings.dispatch_timeout_seconds == 15.0
    assert settings.notifications_enabled is False


def test_settings_require_token(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None
) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError, match="TRIGGER_GITHUB_TOKEN"):
        TriggerSettings()


def test_notifications_need_both_telegram_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TRIGGER_GITHUB_TOKEN", "t")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")

    assert TriggerSettings().notifications_enabled is False

    monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")
    assert TriggerSettings().notifications_enabled is True

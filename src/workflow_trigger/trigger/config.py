"""Configuration for the workflow trigger.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The dispatch token is read from `TRIGGER_GITHUB_TOKEN`, falling back to
`GITHUB_TOKEN` for deployments that already export it.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TriggerSettings(BaseSettings):
    """Settings for a trigger run.

    Environment variables:
    - TRIGGER_GITHUB_TOKEN (or GITHUB_TOKEN)
    - GITHUB_BASE_URL                  (optional)
    - TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID (optional, both needed for notifications)
    - TRIGGER_TASKS_FILE               (optional)
    - TRIGGER_COOLDOWN_STATE_PATH      (required when any task uses a cooldown)
    - TRIGGER_CONCURRENCY              (optional)
    - LOG_LEVEL                        (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `TriggerSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("TRIGGER_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="GitHub token with the 'workflow' scope, used for dispatches",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    telegram_bot_token: str = Field(default="", validation_alias="TELEGRAM_BOT_TOKEN")
    telegram_chat_id: str = Field(default="", validation_alias="TELEGRAM_CHAT_ID")

    tasks_file: Path = Field(
        default=Path("tasks.json"),
        validation_alias="TRIGGER_TASKS_FILE",
        description="JSON file holding the task list",
    )
    cooldown_state_path: Path | None = Field(
        default=None,
        validation_alias="TRIGGER_COOLDOWN_STATE_PATH",
        description="JSON file backing the cooldown store",
    )

    concurrency: int = Field(
        default=5,
        validation_alias="TRIGGER_CONCURRENCY",
        description="Maximum number of tasks processed at the same time",
        ge=1,
        le=50,
    )
    probe_timeout_seconds: float = Field(
        default=10.0, validation_alias="TRIGGER_PROBE_TIMEOUT_SECONDS", gt=0
    )
    dispatch_timeout_seconds: float = Field(
        default=15.0, validation_alias="TRIGGER_DISPATCH_TIMEOUT_SECONDS", gt=0
    )
    interval_seconds: float = Field(
        default=300.0,
        validation_alias="TRIGGER_INTERVAL_SECONDS",
        description="Period of the `loop` command",
        gt=0,
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> TriggerSettings:
        if not self.github_token.strip():
            raise ValueError("TRIGGER_GITHUB_TOKEN (or GITHUB_TOKEN) is required")
        return self

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.telegram_bot_token.strip() and self.telegram_chat_id.strip())

"""Telegram bot notifier for trigger outcomes.

Sends plain Markdown messages through the Bot API. All failures are logged but
not raised, so notification issues never affect a task's outcome. Messages are
sent once; there are no retries.
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
SEND_TIMEOUT_SECONDS = 5.0


class TelegramNotifier:
    """Posts messages to one Telegram chat.

    If either the bot token or the chat id is missing the notifier is disabled
    and :meth:`send` only logs that it skipped the message.
    """

    def __init__(
        self,
        *,
        bot_token: str = "",
        chat_id: str = "",
        api_base: str = TELEGRAM_API_BASE,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = bot_token.strip()
        self._chat_id = chat_id.strip()
        self._api_base = api_base.rstrip("/")
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    async def send(self, text: str) -> None:
        if not self.enabled:
            logger.debug("Telegram not configured; skipping notification")
            return

        url = f"{self._api_base}/bot{self._bot_token}/sendMessage"
        payload = {"chat_id": self._chat_id, "text": text, "parse_mode": "Markdown"}

        try:
            async with httpx.AsyncClient(
                timeout=SEND_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                response = await client.post(url, json=payload)

            if response.status_code >= 400:
                logger.warning(
                    f"Telegram API returned {response.status_code}: {response.text}"
                )
        except httpx.TimeoutException:
            logger.warning("Telegram notification timed out")
        except httpx.ConnectError:
            logger.warning("Failed to connect to Telegram API")
        except Exception as e:
            logger.warning(f"Telegram notification error: {e}")


def _minutes(seconds: float) -> int:
    return round(seconds / 60)


def format_status_normal(task_name: str, status_code: int) -> str:
    return f"🔍 {task_name}\nTarget status normal (HTTP {status_code})\nNo workflow triggered"


def format_cooldown(task_name: str, remaining_seconds: float) -> str:
    return (
        f"⏳ {task_name}\nCooldown active, "
        f"{_minutes(remaining_seconds)} more minute(s) before the next trigger"
    )


def format_condition_met(task_name: str, status_code: int, workflow: str) -> str:
    return (
        f"✅ {task_name}\nTrigger condition met (HTTP {status_code})\n"
        f"✅ Workflow triggered: {workflow}"
    )


def format_scheduled(task_name: str, workflow: str) -> str:
    return f"⏰ {task_name}\nScheduled trigger\n✅ Workflow started: {workflow}"


def format_failure(task_name: str, error_kind: str, message: str) -> str:
    return f"❌ {task_name}\nProcessing failed [{error_kind}]: {message}"

"""Cooldown store: last successful trigger time per dedup key.

The decision engine only reads and writes single keys. Records are never
deleted; a record expires implicitly once it is older than the task's
cooldown window. Concurrent writers to one key simply overwrite each other,
so the cooldown is a best-effort throttle.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path

from workflow_trigger.trigger.errors import ErrorKind, TriggerError

logger = logging.getLogger(__name__)


def encode_timestamp(value: datetime) -> str:
    """Encode as ISO-8601 in UTC, keeping microseconds."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def decode_timestamp(raw: str) -> datetime:
    """Decode an ISO-8601 string or legacy epoch milliseconds."""

    text = raw.strip()
    if text.isdigit():
        return datetime.fromtimestamp(int(text) / 1000, tz=UTC)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class CooldownStore(ABC):
    """Key-value store of last trigger timestamps.

    Implementations raise :class:`TriggerError` with ``STORE_ERROR`` when the
    backing service is unavailable. Callers treat that as a task failure, never
    as a missing record.
    """

    @abstractmethod
    async def get(self, key: str) -> datetime | None:
        """Return the last trigger time for `key`, or None if absent."""

    @abstractmethod
    async def put(self, key: str, timestamp: datetime) -> None:
        """Record `timestamp` as the last trigger time for `key`."""


class InMemoryCooldownStore(CooldownStore):
    """Process-local store. Useful for tests and one-shot runs."""

    def __init__(self, initial: dict[str, datetime] | None = None) -> None:
        self._records: dict[str, str] = {
            key: encode_timestamp(value) for key, value in (initial or {}).items()
        }

    async def get(self, key: str) -> datetime | None:
        raw = self._records.get(key)
        return decode_timestamp(raw) if raw is not None else None

    async def put(self, key: str, timestamp: datetime) -> None:
        self._records[key] = encode_timestamp(timestamp)


class JsonFileCooldownStore(CooldownStore):
    """JSON-file backed store mapping dedup key -> ISO-8601 timestamp."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load_unlocked(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError both land here.
            logger.warning(
                "Cooldown state file is unreadable; treating as empty",
                extra={"path": str(self._path)},
            )
            return {}
        if not isinstance(raw, dict):
            logger.warning(
                "Cooldown state file has unexpected shape; treating as empty",
                extra={"path": str(self._path)},
            )
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _save_unlocked(self, records: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(
            json.dumps(records, indent=2, sort_keys=True, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        os.replace(tmp, self._path)

    def _put_unlocked(self, key: str, value: str) -> None:
        records = self._load_unlocked()
        records[key] = value
        self._save_unlocked(records)

    async def get(self, key: str) -> datetime | None:
        async with self._lock:
            try:
                records = await asyncio.to_thread(self._load_unlocked)
            except OSError as e:
                raise TriggerError(
                    f"cooldown store read failed: {e}", kind=ErrorKind.STORE_ERROR
                ) from e
        raw = records.get(key)
        if raw is None:
            return None
        try:
            return decode_timestamp(raw)
        except ValueError:
            logger.warning(
                "Ignoring unreadable cooldown timestamp", extra={"key": key, "value": raw}
            )
            return None

    async def put(self, key: str, timestamp: datetime) -> None:
        async with self._lock:
            try:
                await asyncio.to_thread(self._put_unlocked, key, encode_timestamp(timestamp))
            except OSError as e:
                raise TriggerError(
                    f"cooldown store write failed: {e}", kind=ErrorKind.STORE_ERROR
                ) from e

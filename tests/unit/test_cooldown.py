"""Unit tests for cooldown stores."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from workflow_trigger.trigger.cooldown import (
    InMemoryCooldownStore,
    JsonFileCooldownStore,
    decode_timestamp,
    encode_timestamp,
)
from workflow_trigger.trigger.tasks import cooldown_key

T = datetime(2025, 1, 1, 12, 30, tzinfo=UTC)


def test_timestamp_encoding_is_iso_utc() -> None:
    assert encode_timestamp(T) == "2025-01-01T12:30:00+00:00"
    assert encode_timestamp(datetime(2025, 1, 1, 12, 30)) == "2025-01-01T12:30:00+00:00"


def test_decode_accepts_epoch_milliseconds() -> None:
    assert decode_timestamp("1735734600000") == T


def test_decode_accepts_iso_strings() -> None:
    assert decode_timestamp("2025-01-01T12:30:00Z") == T
    assert decode_timestamp("2025-01-01T12:30:00") == T


@pytest.mark.asyncio
async def test_in_memory_roundtrip() -> None:
    store = InMemoryCooldownStore()
    key = cooldown_key("https://x/y", 404)

    assert await store.get(key) is None
    await store.put(key, T)
    assert await store.get(key) == T


@pytest.mark.asyncio
async def test_json_file_roundtrip_and_layout(tmp_path: Path) -> None:
    path = tmp_path / "state" / "cooldown.json"
    store = JsonFileCooldownStore(path)
    key = cooldown_key("https://x/y", 404)

    assert await store.get(key) is None
    await store.put(key, T)

    assert await store.get(key) == T
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw == {"last_trigger:https://x/y:404": "2025-01-01T12:30:00+00:00"}

    # A fresh instance sees the persisted record.
    assert await JsonFileCooldownStore(path).get(key) == T


@pytest.mark.asyncio
async def test_json_file_put_overwrites_and_keeps_other_keys(tmp_path: Path) -> None:
    store = JsonFileCooldownStore(tmp_path / "cooldown.json")
    later = datetime(2025, 1, 2, tzinfo=UTC)

    await store.put("a", T)
    await store.put("b", T)
    await store.put("a", later)

    assert await store.get("a") == later
    assert await store.get("b") == T


@pytest.mark.asyncio
async def test_json_file_corrupt_state_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "cooldown.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonFileCooldownStore(path)

    assert await store.get("a") is None
    await store.put("a", T)
    assert await store.get("a") == T


@pytest.mark.asyncio
async def test_json_file_undecodable_bytes_read_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "cooldown.json"
    path.write_bytes(b"\xff\xfe{garbage")

    store = JsonFileCooldownStore(path)

    assert await store.get("a") is None
    await store.put("a", T)
    assert await store.get("a") == T


@pytest.mark.asyncio
@pytest.mark.parametrize("microsecond", [1, 123456, 999999])
async def test_sub_millisecond_timestamps_survive_storage(
    tmp_path: Path, microsecond: int
) -> None:
    stamp = T.replace(microsecond=microsecond)
    key = cooldown_key("https://x/y", 404)

    memory = InMemoryCooldownStore()
    await memory.put(key, stamp)
    assert await memory.get(key) == stamp

    path = tmp_path / "cooldown.json"
    await JsonFileCooldownStore(path).put(key, stamp)
    assert await JsonFileCooldownStore(path).get(key) == stamp

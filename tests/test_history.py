from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from pybattmon._constants import HISTORY_KEY
from pybattmon.models.history import HistoryEntry, iso_to_ms, ms_to_iso
from pybattmon.models.sample import EstimatorVariant
from pybattmon.state.history import HistoryBuffer, decode_history
from pybattmon.state.store import MemoryStateStore


def _entry(i: int) -> HistoryEntry:
    return HistoryEntry(timestamp_ms=1_700_000_000_000 + i * 1000, battery_pct=float(i % 100), temperature_c=30.0)


@pytest.mark.asyncio
async def test_history_is_bounded_and_keeps_latest_in_order() -> None:
    store = MemoryStateStore()
    buffer = HistoryBuffer()

    for i in range(250):
        await buffer.append(_entry(i), store)

    entries = await buffer.entries(store)
    assert len(entries) == 200
    assert entries[0] == _entry(50)
    assert entries[-1] == _entry(249)
    assert [e.timestamp_ms for e in entries] == sorted(e.timestamp_ms for e in entries)


@pytest.mark.asyncio
async def test_persisted_shape() -> None:
    store = MemoryStateStore()
    buffer = HistoryBuffer()

    await buffer.append(HistoryEntry(timestamp_ms=0, battery_pct=84.0, temperature_c=31.25), store)

    payload = json.loads(store.snapshot()[HISTORY_KEY])
    assert payload == [{"time": "1970-01-01T00:00:00.000Z", "battery_percentage": 84.0, "battery_temperature": 31.25}]


@pytest.mark.asyncio
async def test_corrupt_payload_starts_fresh() -> None:
    store = MemoryStateStore({HISTORY_KEY: "[{broken"})
    buffer = HistoryBuffer(capacity=3)

    assert await buffer.entries(store) == []
    await buffer.append(_entry(1), store)
    assert await buffer.entries(store) == [_entry(1)]


def test_decode_drops_invalid_entries_only() -> None:
    raw = json.dumps(
        [
            {"time": "2024-06-01T08:00:00.000Z", "battery_percentage": 80, "battery_temperature": 30.5},
            {"time": "not a time", "battery_percentage": 80, "battery_temperature": 30.5},
            {"battery_percentage": 81},
            {"time": "2024-06-01T08:05:00.000Z", "battery_percentage": "79", "battery_temperature": 31},
        ]
    )
    entries = decode_history(raw)

    assert len(entries) == 2
    assert entries[0].battery_pct == 80.0
    assert entries[1].battery_pct == 79.0


def test_decode_non_list_is_empty() -> None:
    assert decode_history(None) == []
    assert decode_history('{"time": 1}') == []


def test_iso_round_trip_preserves_milliseconds() -> None:
    assert iso_to_ms(ms_to_iso(1_717_228_800_123)) == 1_717_228_800_123


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        HistoryBuffer(capacity=0)


@pytest.mark.asyncio
async def test_unrenderable_timestamp_is_dropped_and_appends_continue() -> None:
    raw = json.dumps(
        [
            {"time": 10**20, "battery_percentage": 50, "battery_temperature": 30},
            {"time": "2024-06-01T08:00:00.000Z", "battery_percentage": 80, "battery_temperature": 30.5},
        ]
    )
    store = MemoryStateStore({HISTORY_KEY: raw})
    buffer = HistoryBuffer()

    assert [e.battery_pct for e in await buffer.entries(store)] == [80.0]

    for i in range(3):
        await buffer.append(_entry(i), store)
    assert len(await buffer.entries(store)) == 4


def test_out_of_range_timestamp_fails_validation() -> None:
    with pytest.raises(ValidationError):
        HistoryEntry(timestamp_ms=10**20, battery_pct=50.0, temperature_c=30.0)


@pytest.mark.asyncio
async def test_variant_is_persisted() -> None:
    store = MemoryStateStore()
    buffer = HistoryBuffer()
    entry = HistoryEntry(timestamp_ms=0, battery_pct=50.0, temperature_c=30.0, variant=EstimatorVariant.REDUCED)

    await buffer.append(entry, store)

    assert json.loads(store.snapshot()[HISTORY_KEY])[0]["variant"] == "reduced"
    assert (await buffer.entries(store))[0].variant == EstimatorVariant.REDUCED


def test_entries_without_variant_still_load() -> None:
    raw = json.dumps(
        [
            {"time": "2024-06-01T08:00:00.000Z", "battery_percentage": 80, "battery_temperature": 30.5},
            {"time": "2024-06-01T08:01:00.000Z", "battery_percentage": 80, "battery_temperature": 30.5, "variant": "??"},
        ]
    )
    assert [e.variant for e in decode_history(raw)] == [None, None]

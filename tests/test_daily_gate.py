from __future__ import annotations

import pytest

from pybattmon.state.gate import DailyNotificationGate
from pybattmon.state.store import MemoryStateStore


@pytest.mark.asyncio
async def test_fires_once_per_day() -> None:
    store = MemoryStateStore()
    gate = DailyNotificationGate()

    assert await gate.should_fire("high_temp", "2024-06-01", store)
    await gate.mark_fired("high_temp", "2024-06-01", store)

    assert not await gate.should_fire("high_temp", "2024-06-01", store)
    assert store.snapshot()["HIGH_TEMP_NOTIFIED"] == "2024-06-01"


@pytest.mark.asyncio
async def test_next_day_fires_again() -> None:
    store = MemoryStateStore({"HIGH_TEMP_NOTIFIED": "2024-06-01"})
    gate = DailyNotificationGate()

    assert await gate.should_fire("high_temp", "2024-06-02", store)
    await gate.mark_fired("high_temp", "2024-06-02", store)
    assert await gate.last_fired("high_temp", store) == "2024-06-02"


@pytest.mark.asyncio
async def test_alerts_are_independent() -> None:
    store = MemoryStateStore()
    gate = DailyNotificationGate()

    await gate.mark_fired("high_temp", "2024-06-01", store)
    assert await gate.should_fire("low_battery", "2024-06-01", store)


@pytest.mark.asyncio
async def test_malformed_date_does_not_block_alert() -> None:
    store = MemoryStateStore({"HIGH_TEMP_NOTIFIED": "yesterday"})
    gate = DailyNotificationGate()

    assert await gate.last_fired("high_temp", store) is None
    assert await gate.should_fire("high_temp", "2024-06-01", store)

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from pybattmon.engine import SampleResult
from pybattmon.models.power_state import PowerStateEvent
from pybattmon.models.sample import EstimatedSample, EstimatorVariant
from pybattmon.triggers import (
    BackgroundFetchResult,
    BackgroundFetchTask,
    ForegroundPoller,
    PowerStateListener,
    TriggerSource,
    run_background_fetch,
)


def _result(*failed: str) -> SampleResult:
    estimated = EstimatedSample(timestamp_ms=0, battery_pct=50.0, temperature_c=30.0, variant=EstimatorVariant.REDUCED)
    return SampleResult(estimated=estimated, failed_steps=list(failed))


@dataclass
class _Runner:
    result: SampleResult | None = field(default_factory=_result)
    error: Exception | None = None
    release: asyncio.Event | None = None
    calls: list[tuple[TriggerSource, Any]] = field(default_factory=list)
    started: asyncio.Event = field(default_factory=asyncio.Event)
    finished: int = 0

    async def run_cycle(self, source: TriggerSource, *, sample: Any = None, power_event: Any = None) -> SampleResult | None:
        self.calls.append((source, power_event))
        self.started.set()
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        self.finished += 1
        return self.result


@pytest.mark.asyncio
async def test_background_fetch_results() -> None:
    assert await run_background_fetch(_Runner()) == BackgroundFetchResult.NEW_DATA
    assert await run_background_fetch(_Runner(result=None)) == BackgroundFetchResult.FAILED
    assert await run_background_fetch(_Runner(result=_result("history_append"))) == BackgroundFetchResult.FAILED
    assert await run_background_fetch(_Runner(error=RuntimeError("boom"))) == BackgroundFetchResult.FAILED


@pytest.mark.asyncio
async def test_poller_runs_immediately_and_stop_waits_for_inflight_cycle() -> None:
    runner = _Runner(release=asyncio.Event())
    poller = ForegroundPoller(runner, 60.0)
    poller.start()
    await asyncio.wait_for(runner.started.wait(), 1.0)

    stopping = asyncio.create_task(poller.stop())
    for _ in range(5):
        await asyncio.sleep(0)
    assert not stopping.done()

    assert runner.release is not None
    runner.release.set()
    await asyncio.wait_for(stopping, 1.0)

    assert runner.finished == 1
    assert runner.calls == [(TriggerSource.FOREGROUND, None)]
    assert not poller.is_running


@pytest.mark.asyncio
async def test_poller_repeats_on_interval() -> None:
    runner = _Runner()
    poller = ForegroundPoller(runner, 0.01)
    poller.start()
    await asyncio.sleep(0.1)
    await poller.stop()

    assert len(runner.calls) >= 3
    assert {source for source, _ in runner.calls} == {TriggerSource.FOREGROUND}


@pytest.mark.asyncio
async def test_background_task_records_last_result() -> None:
    runner = _Runner(result=_result("uptime_advance"))
    task = BackgroundFetchTask(runner, 0.01, jitter=0.0)
    task.start()
    await asyncio.wait_for(runner.started.wait(), 1.0)
    await asyncio.sleep(0.02)
    await task.stop()

    assert task.last_result == BackgroundFetchResult.FAILED
    assert runner.calls[0][0] == TriggerSource.BACKGROUND


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ForegroundPoller(_Runner(), 0)


@pytest.mark.asyncio
async def test_power_listener_ignores_unknown_state() -> None:
    runner = _Runner()
    listener = PowerStateListener(runner)

    listener.handle_event(PowerStateEvent.model_validate({"batteryState": "unknown"}))
    listener.handle_event(PowerStateEvent.model_validate({"batteryLevel": 0.4}))
    await listener.stop()

    assert runner.calls == []


@pytest.mark.asyncio
async def test_power_listener_runs_cycle_with_event() -> None:
    runner = _Runner()
    listener = PowerStateListener(runner)
    event = PowerStateEvent.model_validate({"batteryState": "charging", "batteryLevel": 0.5})

    listener.handle_event(event)
    await listener.stop()

    assert runner.calls == [(TriggerSource.POWER_EVENT, event)]
    assert runner.finished == 1

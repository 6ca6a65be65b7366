"""Triggers that feed samples into the monitoring engine.

Three independent sources run side by side with no coordination between
them: a fixed-interval foreground poll, a best-effort background fetch
and an edge-triggered power-state listener. Each one only calls
``run_cycle`` on its runner.

Stopping a trigger never aborts a cycle that has already started: cycles
run as separate tasks behind :func:`asyncio.shield` and ``stop()`` waits
for them to finish persisting.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from collections.abc import Awaitable
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeVar

from pybattmon._mqtt import MqttBootstrap, PowerStateMqttRuntime
from pybattmon.models.power_state import PowerStateEvent

if TYPE_CHECKING:
    from pybattmon.engine import SampleResult
    from pybattmon.models.sample import DeviceSample

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class TriggerSource(StrEnum):
    FOREGROUND = "foreground"
    BACKGROUND = "background"
    POWER_EVENT = "power_event"


class BackgroundFetchResult(StrEnum):
    NEW_DATA = "new_data"
    FAILED = "failed"


class CycleRunner(Protocol):
    async def run_cycle(
        self,
        source: TriggerSource,
        *,
        sample: DeviceSample | None = None,
        power_event: PowerStateEvent | None = None,
    ) -> SampleResult | None: ...


class _InflightCycles:
    """Track cycle tasks so teardown can wait for them."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def track(self, awaitable: Awaitable[T]) -> asyncio.Task[T]:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def __len__(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


async def run_background_fetch(runner: CycleRunner) -> BackgroundFetchResult:
    """One background wake-up: sample, decide, persist."""
    try:
        result = await runner.run_cycle(TriggerSource.BACKGROUND)
    except Exception:
        _logger.warning("Background fetch failed", exc_info=True)
        return BackgroundFetchResult.FAILED
    if result is None or result.failed_steps:
        return BackgroundFetchResult.FAILED
    return BackgroundFetchResult.NEW_DATA


class _IntervalTrigger:
    source: ClassVar[TriggerSource]
    run_immediately: ClassVar[bool] = False

    def __init__(self, runner: CycleRunner, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._runner = runner
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._inflight = _InflightCycles()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _next_delay(self) -> float:
        return self._interval

    async def _cycle(self) -> None:
        task = self._inflight.track(self._runner.run_cycle(self.source))
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            raise
        except Exception:
            _logger.warning("%s cycle failed", self.source.value, exc_info=True)

    async def _run(self) -> None:
        if self.run_immediately:
            await self._cycle()
        while True:
            await asyncio.sleep(self._next_delay())
            await self._cycle()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name=f"pybattmon-{self.source.value}")
        _logger.debug("%s trigger started interval=%.1fs", self.source.value, self._interval)

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._inflight.drain()
        _logger.debug("%s trigger stopped", self.source.value)


class ForegroundPoller(_IntervalTrigger):
    """Sample once right away, then every *interval* seconds."""

    source = TriggerSource.FOREGROUND
    run_immediately = True


class BackgroundFetchTask(_IntervalTrigger):
    """Best-effort wake-ups at least *minimum_interval* seconds apart.

    A random delay of up to ``jitter * minimum_interval`` is added to every
    wait, so the cadence is never fixed.
    """

    source = TriggerSource.BACKGROUND

    def __init__(self, runner: CycleRunner, minimum_interval: float, *, jitter: float = 0.1) -> None:
        super().__init__(runner, minimum_interval)
        self._jitter = max(0.0, jitter)
        self.last_result: BackgroundFetchResult | None = None

    def _next_delay(self) -> float:
        return self._interval + random.uniform(0.0, self._jitter * self._interval)

    async def _cycle(self) -> None:
        task = self._inflight.track(run_background_fetch(self._runner))
        self.last_result = await asyncio.shield(task)
        _logger.debug("Background fetch result=%s", self.last_result.value)


class PowerStateListener:
    """Run a cycle for every actionable power-state event.

    Events arrive on the MQTT network thread and are hopped onto the
    asyncio loop before :meth:`handle_event` runs.
    """

    def __init__(self, runner: CycleRunner, *, keepalive: int = 60) -> None:
        self._runner = runner
        self._keepalive = keepalive
        self._runtime: PowerStateMqttRuntime | None = None
        self._inflight = _InflightCycles()

    @property
    def is_running(self) -> bool:
        return self._runtime is not None and self._runtime.is_running

    def handle_event(self, event: PowerStateEvent) -> None:
        if not event.is_actionable:
            _logger.debug("Ignoring power-state event without a battery state")
            return
        self._inflight.track(self._runner.run_cycle(TriggerSource.POWER_EVENT, power_event=event))

    async def start(self, bootstrap: MqttBootstrap) -> None:
        loop = asyncio.get_running_loop()
        runtime = PowerStateMqttRuntime(loop=loop, on_event=self.handle_event, keepalive=self._keepalive)
        await loop.run_in_executor(None, runtime.start, bootstrap)
        self._runtime = runtime

    async def stop(self) -> None:
        runtime = self._runtime
        self._runtime = None
        if runtime is not None:
            try:
                await asyncio.get_running_loop().run_in_executor(None, runtime.stop)
            except Exception:
                _logger.debug("MQTT runtime stop failed", exc_info=True)
        await self._inflight.drain()

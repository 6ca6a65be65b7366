"""Sample → notification-intent decision engine.

Every trigger (foreground poll, background fetch, power-state event) calls
:meth:`MonitoringEngine.on_sample`. The engine holds no lock and keeps no
state of its own between calls; all state is in the injected store.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from pybattmon._constants import HIGH_TEMP_ALERT, HIGH_TEMP_THRESHOLD_C, HISTORY_CAPACITY
from pybattmon.clock import Clock
from pybattmon.exceptions import StoreUnavailableError
from pybattmon.models.history import HistoryEntry
from pybattmon.models.notification import (
    NotificationIntent,
    charger_connected,
    charger_disconnected,
    high_temperature,
)
from pybattmon.models.sample import DeviceSample, EstimatedSample
from pybattmon.state.charging import ChargeTransitionDetector, TransitionEvent
from pybattmon.state.gate import DailyNotificationGate
from pybattmon.state.history import HistoryBuffer
from pybattmon.state.store import StateStore
from pybattmon.state.uptime import UptimeAccumulator
from pybattmon.thermal import estimate

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class SampleResult:
    """Outcome of one :meth:`MonitoringEngine.on_sample` call."""

    estimated: EstimatedSample
    notifications: list[NotificationIntent] = field(default_factory=list)
    accumulated_hours: float | None = None
    """Today's accumulated uptime after this call, ``None`` if that step failed."""
    failed_steps: list[str] = field(default_factory=list)


class MonitoringEngine:
    """Turn one telemetry sample into notification intents and persisted state."""

    def __init__(
        self,
        store: StateStore,
        clock: Clock,
        *,
        high_temp_threshold: float = HIGH_TEMP_THRESHOLD_C,
        history_capacity: int = HISTORY_CAPACITY,
        high_temp_alert: str = HIGH_TEMP_ALERT,
    ) -> None:
        self._store = store
        self._clock = clock
        self._high_temp_threshold = high_temp_threshold
        self._high_temp_alert = high_temp_alert
        self._transitions = ChargeTransitionDetector()
        self._gate = DailyNotificationGate()
        self._uptime = UptimeAccumulator(clock)
        self._history = HistoryBuffer(history_capacity)

    @property
    def store(self) -> StateStore:
        return self._store

    async def _step(self, name: str, awaitable: Awaitable[T], result: SampleResult) -> tuple[bool, T | None]:
        try:
            return True, await awaitable
        except StoreUnavailableError as exc:
            _logger.warning("Skipping %s: store unavailable (%s)", name, exc)
        except Exception:
            _logger.warning("Skipping %s: unexpected failure", name, exc_info=True)
        result.failed_steps.append(name)
        return False, None

    async def on_sample(self, sample: DeviceSample, now_ms: int) -> SampleResult:
        """Process *sample* observed at *now_ms*. Never raises."""
        try:
            uptime_so_far = await self._uptime.current(now_ms, self._store)
        except Exception:
            _logger.warning("Uptime unavailable for estimation; using 0", exc_info=True)
            uptime_so_far = 0.0

        result = SampleResult(estimated=estimate(sample, uptime_so_far))
        temperature = result.estimated.temperature_c

        ok, transition = await self._step(
            "charge_transition",
            self._transitions.detect_and_record(sample.charging, self._store),
            result,
        )
        if ok and transition is not None:
            if transition == TransitionEvent.CHARGER_CONNECTED:
                result.notifications.append(charger_connected(temperature))
            else:
                result.notifications.append(charger_disconnected())

        entry = HistoryEntry(
            timestamp_ms=result.estimated.timestamp_ms,
            battery_pct=result.estimated.battery_pct,
            temperature_c=temperature,
            variant=result.estimated.variant,
        )
        await self._step("history_append", self._history.append(entry, self._store), result)

        if sample.charging and temperature >= self._high_temp_threshold:
            await self._step("high_temp_alert", self._fire_high_temp(now_ms, temperature, result), result)

        ok, hours = await self._step("uptime_advance", self._uptime.advance(now_ms, self._store), result)
        if ok:
            result.accumulated_hours = hours

        if result.notifications:
            _logger.debug(
                "Sample at %d produced %s",
                now_ms,
                [intent.kind.value for intent in result.notifications],
            )
        return result

    async def _fire_high_temp(self, now_ms: int, temperature: float, result: SampleResult) -> None:
        today = self._clock.calendar_date(now_ms)
        if not await self._gate.should_fire(self._high_temp_alert, today, self._store):
            return
        result.notifications.append(high_temperature(temperature))
        await self._gate.mark_fired(self._high_temp_alert, today, self._store)

    async def accumulated_hours(self, now_ms: int) -> float:
        """Today's accumulated uptime as last persisted."""
        return await self._uptime.current(now_ms, self._store)

    async def history(self) -> list[HistoryEntry]:
        """The full bounded history, oldest first."""
        return await self._history.entries(self._store)

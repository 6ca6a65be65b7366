"""High-level async facade wiring the engine to its collaborators."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from pybattmon._constants import IP_PLACEHOLDER
from pybattmon._mqtt import MqttBootstrap
from pybattmon._network import lookup_public_ip
from pybattmon._redact import redact_for_log
from pybattmon.clock import Clock, SystemClock
from pybattmon.config import MonitorConfig
from pybattmon.engine import MonitoringEngine, SampleResult
from pybattmon.exceptions import BattMonError
from pybattmon.models.device_info import DeviceInfo
from pybattmon.models.history import HistoryEntry
from pybattmon.models.notification import NotificationIntent
from pybattmon.models.power_state import PowerStateEvent
from pybattmon.models.sample import DeviceSample
from pybattmon.notify import LoggingDispatcher, NotificationDispatcher, NotifySendDispatcher
from pybattmon.sensors import PsutilSensorReader, SensorReader, reduced_input
from pybattmon.state.store import FileStateStore, StateStore
from pybattmon.triggers import BackgroundFetchTask, ForegroundPoller, PowerStateListener, TriggerSource

_logger = logging.getLogger(__name__)

#: Seconds a resolved public IP is reused before the next lookup.
IP_REFRESH_SECONDS: float = 300.0


def build_dispatcher(config: MonitorConfig) -> NotificationDispatcher:
    if config.notify_backend == "notify-send":
        dispatcher = NotifySendDispatcher()
        if dispatcher.available:
            return dispatcher
        _logger.warning("notify-send not found; falling back to log notifications")
    return LoggingDispatcher()


class BatteryMonitor:
    """Async monitor for one device.

    Usage::

        async with BatteryMonitor(MonitorConfig.from_env()) as monitor:
            await monitor.start_triggers()
            ...
            await monitor.stop_triggers()
    """

    def __init__(
        self,
        config: MonitorConfig,
        *,
        store: StateStore | None = None,
        clock: Clock | None = None,
        sensor: SensorReader | None = None,
        dispatcher: NotificationDispatcher | None = None,
        session: aiohttp.ClientSession | None = None,
        on_update: Callable[[DeviceInfo], None] | None = None,
    ) -> None:
        self._config = config
        self._store: StateStore = store if store is not None else FileStateStore(config.state_dir)
        self._clock: Clock = clock if clock is not None else SystemClock(config.time_zone)
        self._sensor: SensorReader = sensor if sensor is not None else PsutilSensorReader()
        self._dispatcher = dispatcher if dispatcher is not None else build_dispatcher(config)
        self._external_session = session is not None
        self._http_session = session
        self._on_update = on_update
        self._engine = MonitoringEngine(
            self._store,
            self._clock,
            high_temp_threshold=config.high_temp_threshold,
            history_capacity=config.history_capacity,
        )
        self._latest_info: DeviceInfo | None = None
        self._cached_ip: str | None = None
        self._cached_ip_at: float = 0.0
        self._poller: ForegroundPoller | None = None
        self._background: BackgroundFetchTask | None = None
        self._listener: PowerStateListener | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> BatteryMonitor:
        if self._http_session is None and self._config.ip_lookup_enabled:
            self._http_session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop_triggers()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def engine(self) -> MonitoringEngine:
        return self._engine

    @property
    def latest_info(self) -> DeviceInfo | None:
        """Display snapshot from the most recent foreground cycle."""
        return self._latest_info

    async def accumulated_hours(self) -> float:
        return await self._engine.accumulated_hours(self._clock.now_ms())

    async def history(self) -> list[HistoryEntry]:
        return await self._engine.history()

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    async def _read_sample(self) -> DeviceSample | None:
        try:
            return await self._sensor.read_sample()
        except BattMonError as exc:
            _logger.warning("No sample this cycle: %s", exc)
        except Exception:
            _logger.warning("Sensor read failed", exc_info=True)
        return None

    async def _public_ip(self) -> str:
        if not self._config.ip_lookup_enabled:
            return IP_PLACEHOLDER
        now = time.monotonic()
        if self._cached_ip is not None and now - self._cached_ip_at < IP_REFRESH_SECONDS:
            return self._cached_ip
        ip = await lookup_public_ip(
            self._http_session,
            url=self._config.ip_lookup_url,
            timeout=self._config.ip_lookup_timeout,
        )
        if ip != IP_PLACEHOLDER:
            self._cached_ip = ip
            self._cached_ip_at = now
        return ip

    async def dispatch(self, intents: list[NotificationIntent]) -> None:
        """Fire each intent; a failing dispatcher is logged and skipped."""
        for intent in intents:
            try:
                await self._dispatcher.fire(intent)
            except Exception:
                _logger.warning("Dispatching %s failed", intent.kind.value, exc_info=True)

    async def run_cycle(
        self,
        source: TriggerSource,
        *,
        sample: DeviceSample | None = None,
        power_event: PowerStateEvent | None = None,
    ) -> SampleResult | None:
        """Sample (unless *sample* is given), decide, persist and dispatch.

        Returns ``None`` when no sample could be read.
        """
        if sample is None:
            sample = await self._read_sample()
            if sample is None:
                return None

        if source == TriggerSource.BACKGROUND:
            sample = reduced_input(sample)

        if power_event is not None:
            update: dict[str, Any] = {"charging": power_event.charging}
            if power_event.battery_level is not None:
                update["battery_fraction"] = power_event.battery_level
            sample = sample.model_copy(update=update)

        result = await self._engine.on_sample(sample, self._clock.now_ms())
        await self.dispatch(result.notifications)

        if source == TriggerSource.FOREGROUND:
            await self._refresh_info(sample, result)
        return result

    async def _refresh_info(self, sample: DeviceSample, result: SampleResult) -> None:
        uptime = result.accumulated_hours
        if uptime is None:
            uptime = self._latest_info.uptime_hours if self._latest_info is not None else 0.0
        info = DeviceInfo.from_sample(
            sample,
            result.estimated,
            uptime_hours=uptime,
            ip_address=await self._public_ip(),
        )
        self._latest_info = info
        _logger.debug("Device info %s", redact_for_log(info.model_dump()))
        if self._on_update is not None:
            try:
                self._on_update(info)
            except Exception:
                _logger.debug("on_update callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def start_triggers(self, *, foreground: bool = True, background: bool = True) -> None:
        """Start the triggers enabled by configuration."""
        if foreground and self._poller is None:
            self._poller = ForegroundPoller(self, self._config.poll_interval)
            self._poller.start()
        if background and self._background is None:
            self._background = BackgroundFetchTask(self, self._config.background_interval)
            self._background.start()
        if self._config.mqtt_enabled and self._listener is None:
            listener = PowerStateListener(self, keepalive=self._config.mqtt_keepalive)
            try:
                await listener.start(MqttBootstrap.from_config(self._config))
            except Exception:
                _logger.warning("Power-state listener failed to start", exc_info=True)
            else:
                self._listener = listener

    async def stop_triggers(self) -> None:
        """Stop every trigger; cycles already running are allowed to finish."""
        poller, self._poller = self._poller, None
        background, self._background = self._background, None
        listener, self._listener = self._listener, None
        for trigger in (poller, background, listener):
            if trigger is not None:
                await trigger.stop()

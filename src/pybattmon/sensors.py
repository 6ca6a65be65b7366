"""Sensor collaborator.

:class:`PsutilSensorReader` reads battery, memory and disk figures from the
host via psutil. A field that cannot be read falls back to its neutral
default; only a reader that produces nothing raises
:class:`SensorUnavailableError`.
"""

from __future__ import annotations

import asyncio
import logging
import platform
import time
from collections.abc import Callable
from typing import Any, Protocol

import psutil

from pybattmon.exceptions import SensorUnavailableError
from pybattmon.models.sample import DeviceSample

_logger = logging.getLogger(__name__)


class SensorReader(Protocol):
    async def read_sample(self) -> DeviceSample: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


def reduced_input(sample: DeviceSample) -> DeviceSample:
    """Keep only what a power-only reader knows: timestamp, level, charging."""
    return DeviceSample(
        timestamp_ms=sample.timestamp_ms,
        battery_fraction=sample.battery_fraction,
        charging=sample.charging,
        device_name=sample.device_name,
    )


class PsutilSensorReader:
    """Host telemetry through psutil.

    Parameters
    ----------
    disk_path : str
        Mount point whose usage is reported.
    use_cpu_percent : bool
        Report ``psutil.cpu_percent`` as the sample's CPU load. When off,
        the sample carries no explicit load and the memory ratio stands in.
    carrier : str
        Static carrier name; hosts have no cellular modem to ask.
    """

    def __init__(
        self,
        *,
        disk_path: str = "/",
        use_cpu_percent: bool = False,
        carrier: str = "",
        now_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self._disk_path = disk_path
        self._use_cpu_percent = use_cpu_percent
        self._carrier = carrier
        self._now_ms = now_ms

    def _field(self, name: str, reader: Callable[[], Any]) -> Any:
        try:
            return reader()
        except Exception:
            _logger.debug("Sensor field %s unavailable", name, exc_info=True)
            return None

    def _read_blocking(self) -> dict[str, Any]:
        raw: dict[str, Any] = {"timestamp_ms": self._now_ms(), "carrier": self._carrier}

        battery = self._field("battery", psutil.sensors_battery)
        if battery is not None:
            raw["battery_fraction"] = battery.percent / 100.0
            raw["charging"] = bool(battery.power_plugged) and battery.percent < 100

        memory = self._field("memory", psutil.virtual_memory)
        if memory is not None:
            raw["total_memory_bytes"] = memory.total
            raw["used_memory_bytes"] = memory.total - memory.available

        disk = self._field("disk", lambda: psutil.disk_usage(self._disk_path))
        if disk is not None:
            raw["free_disk_bytes"] = disk.free
            raw["total_disk_bytes"] = disk.total

        if self._use_cpu_percent:
            raw["cpu_load_pct"] = self._field("cpu", lambda: psutil.cpu_percent(interval=None))

        raw["device_name"] = self._field("device_name", platform.node)

        if battery is None and memory is None and disk is None:
            raise SensorUnavailableError("No telemetry could be read from this host")
        return raw

    async def read_sample(self) -> DeviceSample:
        raw = await asyncio.to_thread(self._read_blocking)
        return DeviceSample.model_validate(raw)

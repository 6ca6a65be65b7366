"""Helpers for presenting the sample history."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, tzinfo
from enum import StrEnum

from pybattmon.models.history import HistoryEntry

#: Entries shown by the statistics view.
DEFAULT_RECENT_COUNT = 12


class BatteryBand(StrEnum):
    CRITICAL = "critical"
    WARNING = "warning"
    GOOD = "good"


class TemperatureBand(StrEnum):
    HOT = "hot"
    WARM = "warm"
    COOL = "cool"


def recent(entries: Sequence[HistoryEntry], count: int = DEFAULT_RECENT_COUNT) -> list[HistoryEntry]:
    """Return the last *count* entries, oldest first."""
    if count <= 0:
        return []
    return list(entries[-count:])


def classify_battery(pct: float) -> BatteryBand:
    if pct < 20:
        return BatteryBand.CRITICAL
    if pct < 50:
        return BatteryBand.WARNING
    return BatteryBand.GOOD


def classify_temperature(temperature_c: float) -> TemperatureBand:
    if temperature_c >= 35:
        return TemperatureBand.HOT
    if temperature_c >= 30:
        return TemperatureBand.WARM
    return TemperatureBand.COOL


def format_entry(entry: HistoryEntry, tz: tzinfo | None = None) -> str:
    """Render one entry as ``"14:05  84%  31.2°C"``.

    ``tz=None`` renders in the host's local time zone.
    """
    moment = datetime.fromtimestamp(entry.timestamp_ms / 1000.0, tz=UTC)
    local = moment.astimezone(tz) if tz is not None else moment.astimezone()
    return f"{local:%H:%M}  {entry.battery_pct:.0f}%  {entry.temperature_c:.1f}°C"

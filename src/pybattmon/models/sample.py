"""Telemetry sample models.

:class:`DeviceSample` is what the sensor collaborator hands to the engine on
every poll. :class:`EstimatedSample` is what the engine derives from it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pybattmon.ingestion.normalize import clamp_fraction, clamp_percent, non_negative_or_zero, safe_bool, safe_int, safe_str


class EstimatorVariant(StrEnum):
    """Which temperature formula produced an estimate.

    The two are not interchangeable; samples from different variants
    should not be compared directly.
    """

    FULL = "full"
    REDUCED = "reduced"


class DeviceSample(BaseModel):
    """One observation of device telemetry.

    Unreadable fields fall back to neutral defaults: ``0`` for byte
    counts and battery fraction, ``False`` for charging, ``""`` for the
    carrier, ``None`` for CPU load and ``"Unknown"`` for the device name.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    timestamp_ms: int = Field(validation_alias=AliasChoices("timestamp_ms", "timestampMs"))
    """Epoch milliseconds at which the sample was taken."""
    battery_fraction: float = Field(default=0.0, validation_alias=AliasChoices("battery_fraction", "batteryFraction"))
    """Battery level, ``0..1``."""
    charging: bool = False
    used_memory_bytes: int = Field(default=0, validation_alias=AliasChoices("used_memory_bytes", "usedMemoryBytes"))
    total_memory_bytes: int = Field(default=0, validation_alias=AliasChoices("total_memory_bytes", "totalMemoryBytes"))
    free_disk_bytes: int = Field(default=0, validation_alias=AliasChoices("free_disk_bytes", "freeDiskBytes"))
    total_disk_bytes: int = Field(default=0, validation_alias=AliasChoices("total_disk_bytes", "totalDiskBytes"))
    carrier: str = ""
    cpu_load_pct: float | None = Field(default=None, validation_alias=AliasChoices("cpu_load_pct", "cpuLoadPct"))
    """Explicit CPU load figure. When absent the memory ratio stands in for it."""
    device_name: str = Field(default="Unknown", validation_alias=AliasChoices("device_name", "deviceName"))

    @property
    def battery_pct(self) -> float:
        return self.battery_fraction * 100.0

    @property
    def memory_load_pct(self) -> float | None:
        """Used/total memory in percent, ``None`` when total memory is unknown."""
        if self.total_memory_bytes <= 0:
            return None
        return min(100.0, self.used_memory_bytes / self.total_memory_bytes * 100.0)

    @property
    def effective_cpu_load_pct(self) -> float | None:
        if self.cpu_load_pct is not None:
            return self.cpu_load_pct
        return self.memory_load_pct

    @field_validator("timestamp_ms", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        parsed = safe_int(value)
        return value if parsed is None else parsed

    @field_validator("battery_fraction", mode="before")
    @classmethod
    def _coerce_fraction(cls, value: Any) -> float:
        return clamp_fraction(value)

    @field_validator("charging", mode="before")
    @classmethod
    def _coerce_charging(cls, value: Any) -> bool:
        parsed = safe_bool(value)
        return bool(parsed)

    @field_validator(
        "used_memory_bytes",
        "total_memory_bytes",
        "free_disk_bytes",
        "total_disk_bytes",
        mode="before",
    )
    @classmethod
    def _coerce_bytes(cls, value: Any) -> int:
        return non_negative_or_zero(value)

    @field_validator("carrier", mode="before")
    @classmethod
    def _coerce_carrier(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("cpu_load_pct", mode="before")
    @classmethod
    def _coerce_cpu_load(cls, value: Any) -> float | None:
        return clamp_percent(value)

    @field_validator("device_name", mode="before")
    @classmethod
    def _coerce_device_name(cls, value: Any) -> str:
        return safe_str(value) or "Unknown"


class EstimatedSample(BaseModel):
    """Derived per-invocation view of a :class:`DeviceSample`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp_ms: int
    battery_pct: float = Field(ge=0.0, le=100.0)
    temperature_c: float
    cpu_load_pct: float | None = None
    variant: EstimatorVariant

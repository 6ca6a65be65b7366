"""Display snapshot of the latest foreground sample."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict

from pybattmon.models.sample import DeviceSample, EstimatedSample

_MB = 1024 * 1024
_GB = 1024 * 1024 * 1024


class DeviceInfo(BaseModel):
    """Figures shown on the home screen.

    Memory is in megabytes, storage in gigabytes, uptime in hours.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    battery_level: float
    device_name: str
    memory_usage_mb: float
    total_memory_mb: float
    battery_charging: bool
    cpu_usage: float
    uptime_hours: float
    temperature_c: float
    storage_used_gb: float
    total_storage_gb: float
    carrier: str
    ip_address: str

    @classmethod
    def from_sample(
        cls,
        sample: DeviceSample,
        estimated: EstimatedSample,
        *,
        uptime_hours: float,
        ip_address: str,
    ) -> DeviceInfo:
        used_disk = max(0, sample.total_disk_bytes - sample.free_disk_bytes)
        return cls(
            battery_level=estimated.battery_pct,
            device_name=sample.device_name,
            memory_usage_mb=sample.used_memory_bytes / _MB,
            total_memory_mb=sample.total_memory_bytes / _MB,
            battery_charging=sample.charging,
            cpu_usage=estimated.cpu_load_pct or 0.0,
            uptime_hours=uptime_hours,
            temperature_c=estimated.temperature_c,
            storage_used_gb=used_disk / _GB,
            total_storage_gb=sample.total_disk_bytes / _GB,
            carrier=sample.carrier,
            ip_address=ip_address,
        )

    @property
    def memory_usage_pct(self) -> float:
        if self.total_memory_mb <= 0:
            return 0.0
        return self.memory_usage_mb / self.total_memory_mb * 100.0

    @property
    def storage_used_pct(self) -> float:
        if self.total_storage_gb <= 0:
            return 0.0
        return self.storage_used_gb / self.total_storage_gb * 100.0

    @property
    def uptime_display(self) -> str:
        """``"3 hrs 25 min"``."""
        hours = math.floor(self.uptime_hours)
        minutes = math.floor((self.uptime_hours % 1) * 60)
        return f"{hours} hrs {minutes} min"

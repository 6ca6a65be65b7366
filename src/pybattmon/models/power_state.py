"""Power-state event model.

Mirrors the payload of a native ``powerStateDidChange`` notification:
``{"batteryState": "charging", "batteryLevel": 0.82, "lowPowerMode": false}``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pybattmon.ingestion.normalize import safe_bool, safe_float, safe_str


class BatteryState(StrEnum):
    UNKNOWN = "unknown"
    UNPLUGGED = "unplugged"
    CHARGING = "charging"
    FULL = "full"

    @classmethod
    def _missing_(cls, value: object) -> BatteryState:
        return cls.UNKNOWN


class PowerStateEvent(BaseModel):
    """An edge-triggered power-state change."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    battery_state: BatteryState = Field(
        default=BatteryState.UNKNOWN,
        validation_alias=AliasChoices("battery_state", "batteryState"),
    )
    battery_level: float | None = Field(default=None, validation_alias=AliasChoices("battery_level", "batteryLevel"))
    low_power_mode: bool | None = Field(default=None, validation_alias=AliasChoices("low_power_mode", "lowPowerMode"))

    @property
    def is_actionable(self) -> bool:
        """Whether the event carries a usable battery state."""
        return self.battery_state != BatteryState.UNKNOWN

    @property
    def charging(self) -> bool:
        return self.battery_state == BatteryState.CHARGING

    @field_validator("battery_state", mode="before")
    @classmethod
    def _coerce_state(cls, value: Any) -> BatteryState:
        text = safe_str(value)
        return BatteryState.UNKNOWN if text is None else BatteryState(text.lower())

    @field_validator("battery_level", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> float | None:
        parsed = safe_float(value)
        if parsed is None or not 0.0 <= parsed <= 1.0:
            return None
        return parsed

    @field_validator("low_power_mode", mode="before")
    @classmethod
    def _coerce_low_power(cls, value: Any) -> bool | None:
        return safe_bool(value)

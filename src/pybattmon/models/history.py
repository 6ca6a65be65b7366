"""History entry model.

Entries are persisted as ``{"time", "battery_percentage", "battery_temperature", "variant"}``
objects where ``time`` is an ISO-8601 UTC timestamp and ``variant`` names the
temperature formula. Entries written without ``variant`` still load.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pybattmon.ingestion.normalize import safe_float, safe_int
from pybattmon.models.sample import EstimatorVariant


def ms_to_iso(timestamp_ms: int) -> str:
    """Render epoch milliseconds as ``2024-01-01T12:00:00.000Z``."""
    value = datetime.fromtimestamp(timestamp_ms / 1000.0, tz=UTC)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_to_ms(value: str) -> int:
    """Parse an ISO-8601 timestamp to epoch milliseconds (naive means UTC)."""
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(round(parsed.timestamp() * 1000))


class HistoryEntry(BaseModel):
    """One charted point: when, how full, how warm."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    timestamp_ms: int = Field(validation_alias=AliasChoices("timestamp_ms", "time"))
    battery_pct: float = Field(validation_alias=AliasChoices("battery_pct", "battery_percentage"))
    temperature_c: float = Field(validation_alias=AliasChoices("temperature_c", "battery_temperature"))
    variant: EstimatorVariant | None = None
    """Formula that produced ``temperature_c``; ``None`` for entries written without one."""

    @field_validator("timestamp_ms", mode="before")
    @classmethod
    def _coerce_time(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return iso_to_ms(value.isoformat())
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            try:
                return iso_to_ms(value)
            except ValueError:
                return value
        parsed = safe_int(value)
        return value if parsed is None else parsed

    @field_validator("timestamp_ms")
    @classmethod
    def _check_renderable(cls, value: int) -> int:
        try:
            ms_to_iso(value)
        except (ValueError, OverflowError, OSError) as exc:
            raise ValueError(f"timestamp out of range: {value}") from exc
        return value

    @field_validator("battery_pct", "temperature_c", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> Any:
        parsed = safe_float(value)
        return value if parsed is None else parsed

    @field_validator("variant", mode="before")
    @classmethod
    def _coerce_variant(cls, value: Any) -> Any:
        if value is None or isinstance(value, EstimatorVariant):
            return value
        try:
            return EstimatorVariant(str(value).strip().lower())
        except ValueError:
            return None

    def to_payload(self) -> dict[str, Any]:
        """Return the persisted JSON shape of this entry."""
        payload: dict[str, Any] = {
            "time": ms_to_iso(self.timestamp_ms),
            "battery_percentage": self.battery_pct,
            "battery_temperature": self.temperature_c,
        }
        if self.variant is not None:
            payload["variant"] = self.variant.value
        return payload

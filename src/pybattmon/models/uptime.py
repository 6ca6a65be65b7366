"""Persisted daily-uptime record."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UptimeRecord(BaseModel):
    """Accumulated monitoring hours for one calendar day."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    last_date: str
    """ISO calendar date (``YYYY-MM-DD``) of the last advance."""
    last_timestamp_ms: int
    """Epoch milliseconds of the last advance."""
    accumulated_hours: float = Field(default=0.0, ge=0.0)

    @field_validator("last_date", mode="before")
    @classmethod
    def _validate_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            date.fromisoformat(value)
        return value

"""Notification intent model.

An intent says *what* the user should be told; delivery is up to the
dispatcher the caller wires in.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class NotificationKind(StrEnum):
    CHARGER_CONNECTED = "charger_connected"
    CHARGER_DISCONNECTED = "charger_disconnected"
    HIGH_TEMPERATURE = "high_temperature"


class NotificationIntent(BaseModel):
    """A request to show a user-facing alert."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: NotificationKind
    title: str
    body: str


def charger_connected(temperature_c: float) -> NotificationIntent:
    return NotificationIntent(
        kind=NotificationKind.CHARGER_CONNECTED,
        title="🔌 Charger Connected",
        body=f"Your device is now charging. Current approx temp: {temperature_c:.1f}°C",
    )


def charger_disconnected() -> NotificationIntent:
    return NotificationIntent(
        kind=NotificationKind.CHARGER_DISCONNECTED,
        title="⚡ Charger Disconnected",
        body="Your device stopped charging.",
    )


def high_temperature(temperature_c: float) -> NotificationIntent:
    return NotificationIntent(
        kind=NotificationKind.HIGH_TEMPERATURE,
        title="⚠️ High Temperature",
        body=f"Device temperature is {temperature_c:.1f}°C while charging!",
    )

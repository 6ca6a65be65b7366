"""Monitor configuration for pybattmon."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pybattmon._constants import HIGH_TEMP_THRESHOLD_C, HISTORY_CAPACITY, IP_LOOKUP_URL
from pybattmon.exceptions import BattMonConfigError

NOTIFY_BACKENDS: frozenset[str] = frozenset({"log", "notify-send"})


def _default_state_dir() -> Path:
    return Path.home() / ".local" / "share" / "pybattmon"


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: Callable[[str], Any]) -> Any:
    try:
        return cast(value)
    except ValueError as exc:
        raise BattMonConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class MonitorConfig:
    """Monitor configuration.

    Parameters
    ----------
    state_dir : Path
        Directory holding the persisted key/value files.
    time_zone : str or None
        IANA time zone used for calendar-day boundaries. ``None`` uses
        the host's local time zone.
    poll_interval : float
        Foreground polling interval in seconds.
    background_interval : float
        Minimum interval in seconds between best-effort background fetches.
    high_temp_threshold : float
        Estimated temperature (°C) at or above which a charging device
        raises the daily high-temperature alert.
    history_capacity : int
        Maximum number of entries kept in the rolling history.
    ip_lookup_enabled : bool
        Resolve the public IP address for the display snapshot.
    ip_lookup_url : str
        JSON endpoint returning ``{"ip": "..."}``.
    ip_lookup_timeout : float
        Total timeout in seconds for the IP lookup request.
    mqtt_enabled : bool
        Subscribe to power-state events over MQTT.
    mqtt_host : str
        MQTT broker host.
    mqtt_port : int
        MQTT broker port.
    mqtt_topic : str
        Topic carrying power-state event payloads.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    notify_backend : str
        ``"log"`` or ``"notify-send"``.
    """

    state_dir: Path = dataclasses.field(default_factory=_default_state_dir)
    time_zone: str | None = None
    poll_interval: float = 5.0
    background_interval: float = 5 * 60.0
    high_temp_threshold: float = HIGH_TEMP_THRESHOLD_C
    history_capacity: int = HISTORY_CAPACITY
    ip_lookup_enabled: bool = True
    ip_lookup_url: str = IP_LOOKUP_URL
    ip_lookup_timeout: float = 5.0
    mqtt_enabled: bool = False
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_topic: str = "battmon/power_state"
    mqtt_keepalive: int = 60
    notify_backend: str = "log"

    def __post_init__(self) -> None:
        if not isinstance(self.state_dir, Path):
            object.__setattr__(self, "state_dir", Path(self.state_dir).expanduser())
        if self.poll_interval <= 0:
            raise BattMonConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.background_interval <= 0:
            raise BattMonConfigError(f"background_interval must be positive, got {self.background_interval}")
        if self.history_capacity < 1:
            raise BattMonConfigError(f"history_capacity must be at least 1, got {self.history_capacity}")
        if self.notify_backend not in NOTIFY_BACKENDS:
            raise BattMonConfigError(
                f"notify_backend must be one of {sorted(NOTIFY_BACKENDS)}, got {self.notify_backend!r}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> MonitorConfig:
        """Create configuration from ``BATTMON_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        BattMonConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_STR_MAP = {
            "BATTMON_TIME_ZONE": "time_zone",
            "BATTMON_IP_LOOKUP_URL": "ip_lookup_url",
            "BATTMON_MQTT_HOST": "mqtt_host",
            "BATTMON_MQTT_TOPIC": "mqtt_topic",
            "BATTMON_NOTIFY_BACKEND": "notify_backend",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        state_dir = env.get("BATTMON_STATE_DIR")
        if state_dir:
            config_kwargs["state_dir"] = Path(state_dir).expanduser()

        _ENV_NUMBER_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "BATTMON_POLL_INTERVAL": ("poll_interval", float),
            "BATTMON_BACKGROUND_INTERVAL": ("background_interval", float),
            "BATTMON_HIGH_TEMP_THRESHOLD": ("high_temp_threshold", float),
            "BATTMON_HISTORY_CAPACITY": ("history_capacity", int),
            "BATTMON_IP_LOOKUP_TIMEOUT": ("ip_lookup_timeout", float),
            "BATTMON_MQTT_PORT": ("mqtt_port", int),
            "BATTMON_MQTT_KEEPALIVE": ("mqtt_keepalive", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        if "ip_lookup_enabled" not in overrides:
            config_kwargs["ip_lookup_enabled"] = _env_bool(env.get("BATTMON_IP_LOOKUP_ENABLED"), True)

        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("BATTMON_MQTT_ENABLED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

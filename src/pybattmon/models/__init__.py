"""Data models for pybattmon."""

from pybattmon.models.device_info import DeviceInfo
from pybattmon.models.history import HistoryEntry
from pybattmon.models.notification import NotificationIntent, NotificationKind
from pybattmon.models.power_state import BatteryState, PowerStateEvent
from pybattmon.models.sample import DeviceSample, EstimatedSample, EstimatorVariant
from pybattmon.models.uptime import UptimeRecord

__all__ = [
    "BatteryState",
    "DeviceInfo",
    "DeviceSample",
    "EstimatedSample",
    "EstimatorVariant",
    "HistoryEntry",
    "NotificationIntent",
    "NotificationKind",
    "PowerStateEvent",
    "UptimeRecord",
]

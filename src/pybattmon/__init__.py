"""pybattmon - Async battery and temperature monitor with daily-deduplicated alerts."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybattmon")
except PackageNotFoundError:
    __version__ = "0+local"
from pybattmon.clock import Clock, SystemClock
from pybattmon.config import MonitorConfig
from pybattmon.engine import MonitoringEngine, SampleResult
from pybattmon.exceptions import (
    BattMonConfigError,
    BattMonError,
    MalformedPersistedValueError,
    NetworkUnavailableError,
    SensorUnavailableError,
    StoreUnavailableError,
)
from pybattmon.models import (
    BatteryState,
    DeviceInfo,
    DeviceSample,
    EstimatedSample,
    EstimatorVariant,
    HistoryEntry,
    NotificationIntent,
    NotificationKind,
    PowerStateEvent,
    UptimeRecord,
)
from pybattmon.monitor import BatteryMonitor
from pybattmon.state import (
    ChargeTransitionDetector,
    DailyNotificationGate,
    FileStateStore,
    HistoryBuffer,
    MemoryStateStore,
    StateStore,
    TransitionEvent,
    UptimeAccumulator,
)
from pybattmon.triggers import BackgroundFetchResult, TriggerSource

__all__ = [
    "__version__",
    "BackgroundFetchResult",
    "BatteryMonitor",
    "BatteryState",
    "BattMonConfigError",
    "BattMonError",
    "ChargeTransitionDetector",
    "Clock",
    "DailyNotificationGate",
    "DeviceInfo",
    "DeviceSample",
    "EstimatedSample",
    "EstimatorVariant",
    "FileStateStore",
    "HistoryBuffer",
    "HistoryEntry",
    "MalformedPersistedValueError",
    "MemoryStateStore",
    "MonitorConfig",
    "MonitoringEngine",
    "NetworkUnavailableError",
    "NotificationIntent",
    "NotificationKind",
    "PowerStateEvent",
    "SampleResult",
    "SensorUnavailableError",
    "StateStore",
    "StoreUnavailableError",
    "SystemClock",
    "TransitionEvent",
    "TriggerSource",
    "UptimeAccumulator",
    "UptimeRecord",
]

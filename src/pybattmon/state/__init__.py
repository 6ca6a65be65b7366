"""State layer.

Everything that reads or writes the persisted key/value store lives here.
Each component is safe to call from several uncoordinated triggers: it
either tolerates a duplicate outcome or only ever moves state forward.
"""

from pybattmon.state.charging import ChargeTransitionDetector, TransitionEvent
from pybattmon.state.gate import DailyNotificationGate
from pybattmon.state.history import HistoryBuffer
from pybattmon.state.store import FileStateStore, MemoryStateStore, StateStore
from pybattmon.state.uptime import UptimeAccumulator

__all__ = [
    "ChargeTransitionDetector",
    "DailyNotificationGate",
    "FileStateStore",
    "HistoryBuffer",
    "MemoryStateStore",
    "StateStore",
    "TransitionEvent",
    "UptimeAccumulator",
]

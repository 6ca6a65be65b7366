"""Charger connect/disconnect detection."""

from __future__ import annotations

import logging
from enum import StrEnum

from pybattmon._constants import LAST_CHARGING_STATE_KEY
from pybattmon.ingestion.normalize import safe_bool
from pybattmon.state.store import StateStore

_logger = logging.getLogger(__name__)


class TransitionEvent(StrEnum):
    CHARGER_CONNECTED = "charger_connected"
    CHARGER_DISCONNECTED = "charger_disconnected"


def _encode(charging: bool) -> str:
    return "true" if charging else "false"


class ChargeTransitionDetector:
    """Compare each charging observation with the last persisted one.

    The first observation only records a baseline. The read and the write
    are separate store calls, so two concurrent callers may both report the
    same flip; a real flip is never lost.
    """

    def __init__(self, key: str = LAST_CHARGING_STATE_KEY) -> None:
        self._key = key

    async def last_state(self, store: StateStore) -> bool | None:
        raw = await store.get(self._key)
        if raw is None:
            return None
        parsed = safe_bool(raw)
        if parsed is None:
            _logger.debug("Ignoring malformed %s=%r", self._key, raw)
        return parsed

    async def detect_and_record(self, current_charging: bool, store: StateStore) -> TransitionEvent | None:
        previous = await self.last_state(store)

        event: TransitionEvent | None = None
        if previous is not None and previous != current_charging:
            event = TransitionEvent.CHARGER_CONNECTED if current_charging else TransitionEvent.CHARGER_DISCONNECTED
            _logger.debug("Charging transition %s -> %s", previous, current_charging)

        await store.set(self._key, _encode(current_charging))
        return event

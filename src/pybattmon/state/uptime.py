"""Daily accumulated uptime.

This is a monitoring-cadence counter, not device uptime: it adds the
wall-clock time between successive ``advance`` calls on the same calendar
day. A gap of any length (process asleep for hours) is counted in full on
the next call.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from pybattmon._constants import DAILY_UPTIME_KEY, MS_PER_HOUR
from pybattmon.clock import Clock
from pybattmon.exceptions import MalformedPersistedValueError
from pybattmon.models.uptime import UptimeRecord
from pybattmon.state.store import StateStore

_logger = logging.getLogger(__name__)


def parse_uptime_record(raw: str, *, key: str = DAILY_UPTIME_KEY) -> UptimeRecord:
    try:
        return UptimeRecord.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError, TypeError) as exc:
        raise MalformedPersistedValueError(f"Unparsable {key}: {raw[:64]!r}", key=key) from exc


class UptimeAccumulator:
    def __init__(self, clock: Clock, key: str = DAILY_UPTIME_KEY) -> None:
        self._clock = clock
        self._key = key

    async def load(self, store: StateStore) -> UptimeRecord | None:
        raw = await store.get(self._key)
        if raw is None:
            return None
        try:
            return parse_uptime_record(raw, key=self._key)
        except MalformedPersistedValueError:
            _logger.debug("Treating malformed %s as absent", self._key, exc_info=True)
            return None

    async def current(self, now_ms: int, store: StateStore) -> float:
        """Accumulated hours for today as last persisted (read-only)."""
        record = await self.load(store)
        if record is None or record.last_date != self._clock.calendar_date(now_ms):
            return 0.0
        return record.accumulated_hours

    async def advance(self, now_ms: int, store: StateStore) -> float:
        """Add the time since the last call (same day) and persist; return the new total."""
        today = self._clock.calendar_date(now_ms)
        record = await self.load(store)

        if record is not None and record.last_date == today:
            elapsed_ms = max(0, now_ms - record.last_timestamp_ms)
            accumulated = record.accumulated_hours + elapsed_ms / MS_PER_HOUR
        else:
            accumulated = 0.0

        updated = UptimeRecord(last_date=today, last_timestamp_ms=now_ms, accumulated_hours=accumulated)
        await store.set(self._key, updated.model_dump_json())
        return accumulated

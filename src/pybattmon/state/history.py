"""Bounded rolling history of samples."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from pybattmon._constants import HISTORY_CAPACITY, HISTORY_KEY
from pybattmon.models.history import HistoryEntry
from pybattmon.state.store import StateStore

_logger = logging.getLogger(__name__)


def decode_history(raw: str | None) -> list[HistoryEntry]:
    """Parse a persisted history payload.

    Absent or non-list payloads decode to ``[]``. Individual entries that
    fail validation are dropped; the rest keep their order.
    """
    if raw is None:
        return []
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError:
        _logger.debug("History payload is not JSON; starting over")
        return []
    if not isinstance(payload, list):
        _logger.debug("History payload is not a list; starting over")
        return []

    entries: list[HistoryEntry] = []
    for item in payload:
        try:
            entries.append(HistoryEntry.model_validate(item))
        except ValidationError:
            _logger.debug("Dropping malformed history entry %r", item)
    return entries


def encode_history(entries: list[HistoryEntry]) -> str:
    return json.dumps([entry.to_payload() for entry in entries], separators=(",", ":"), ensure_ascii=False)


class HistoryBuffer:
    """FIFO ring persisted as one serialized list.

    Appends go to the end; when the list exceeds *capacity* the oldest
    entries are dropped. Under concurrent writers order follows the order
    in which writes land, not sample time.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY, key: str = HISTORY_KEY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._key = key

    @property
    def capacity(self) -> int:
        return self._capacity

    async def entries(self, store: StateStore) -> list[HistoryEntry]:
        return decode_history(await store.get(self._key))

    async def append(self, entry: HistoryEntry, store: StateStore) -> None:
        entries = await self.entries(store)
        entries.append(entry)
        if len(entries) > self._capacity:
            entries = entries[-self._capacity :]
        await store.set(self._key, encode_history(entries))

"""Once-per-calendar-day alert gate."""

from __future__ import annotations

import logging
from datetime import date

from pybattmon._constants import notified_key
from pybattmon.state.store import StateStore

_logger = logging.getLogger(__name__)


def _is_iso_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


class DailyNotificationGate:
    """Remember the last calendar day an alert fired.

    The gate knows nothing about the alert's triggering condition; callers
    only consult it once that condition holds. ISO dates sort as strings,
    so ``stored < today`` is a plain string comparison.
    """

    async def last_fired(self, alert_key: str, store: StateStore) -> str | None:
        key = notified_key(alert_key)
        raw = await store.get(key)
        if raw is None:
            return None
        value = raw.strip()
        if not _is_iso_date(value):
            _logger.debug("Ignoring malformed %s=%r", key, raw)
            return None
        return value

    async def should_fire(self, alert_key: str, today: str, store: StateStore) -> bool:
        last = await self.last_fired(alert_key, store)
        return last is None or last < today

    async def mark_fired(self, alert_key: str, today: str, store: StateStore) -> None:
        await store.set(notified_key(alert_key), today)

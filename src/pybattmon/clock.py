"""Wall clock and calendar-day collaborator."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pybattmon.exceptions import BattMonConfigError


class Clock(Protocol):
    def now_ms(self) -> int: ...

    def calendar_date(self, ms: int) -> str:
        """ISO date (``YYYY-MM-DD``) of *ms* in device-local time."""
        ...


class SystemClock:
    """Host clock. ``time_zone=None`` uses the host's local time zone."""

    def __init__(self, time_zone: str | None = None) -> None:
        self._tz: ZoneInfo | None = None
        if time_zone:
            try:
                self._tz = ZoneInfo(time_zone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise BattMonConfigError(f"Unknown time zone: {time_zone!r}") from exc

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def local_datetime(self, ms: int) -> datetime:
        if self._tz is None:
            return datetime.fromtimestamp(ms / 1000.0).astimezone()
        return datetime.fromtimestamp(ms / 1000.0, tz=self._tz)

    def calendar_date(self, ms: int) -> str:
        return self.local_datetime(ms).date().isoformat()

"""Notification dispatchers.

Dispatch is fire-and-forget from the engine's point of view: the monitor
logs dispatcher failures and moves on.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Awaitable, Callable
from typing import Protocol

from pybattmon.models.notification import NotificationIntent, NotificationKind

_logger = logging.getLogger(__name__)

_URGENCY: dict[NotificationKind, str] = {
    NotificationKind.CHARGER_CONNECTED: "normal",
    NotificationKind.CHARGER_DISCONNECTED: "normal",
    NotificationKind.HIGH_TEMPERATURE: "critical",
}


class NotificationDispatcher(Protocol):
    async def fire(self, intent: NotificationIntent) -> None: ...


class LoggingDispatcher:
    """Write intents to the log (INFO)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    async def fire(self, intent: NotificationIntent) -> None:
        self._logger.info("%s: %s", intent.title, intent.body)


class CallbackDispatcher:
    """Hand intents to a plain or async callable."""

    def __init__(self, callback: Callable[[NotificationIntent], Awaitable[None] | None]) -> None:
        self._callback = callback

    async def fire(self, intent: NotificationIntent) -> None:
        outcome = self._callback(intent)
        if outcome is not None:
            await outcome


class NotifySendDispatcher:
    """Desktop notifications through ``notify-send``."""

    def __init__(self, executable: str = "notify-send", timeout: float = 5.0) -> None:
        self._executable = executable
        self._timeout = timeout

    @property
    def available(self) -> bool:
        return shutil.which(self._executable) is not None

    async def fire(self, intent: NotificationIntent) -> None:
        proc = await asyncio.create_subprocess_exec(
            self._executable,
            "-u",
            _URGENCY.get(intent.kind, "normal"),
            intent.title,
            intent.body,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), self._timeout)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            raise
        if proc.returncode != 0:
            _logger.debug(
                "%s exited with %s: %s",
                self._executable,
                proc.returncode,
                stderr.decode("utf-8", errors="replace").strip(),
            )

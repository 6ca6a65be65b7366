"""Custom exception hierarchy for pybattmon."""

from __future__ import annotations


class BattMonError(Exception):
    """Base exception for all pybattmon errors."""


class BattMonConfigError(BattMonError):
    """Invalid or missing configuration."""


class SensorUnavailableError(BattMonError):
    """The sensor collaborator could not produce a sample at all.

    Individual fields that fail to read are substituted with neutral
    defaults instead; this is only raised when nothing could be read.
    """


class StoreUnavailableError(BattMonError):
    """A persisted-state get or set failed."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class MalformedPersistedValueError(BattMonError):
    """A stored value could not be parsed.

    Components catch this and treat the key as absent.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class NetworkUnavailableError(BattMonError):
    """An outbound lookup (e.g. public IP) failed."""

    def __init__(self, message: str, *, url: str = "", status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)

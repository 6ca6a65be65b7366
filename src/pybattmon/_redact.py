"""Helpers for safe debug logging.

Display snapshots carry identifying fields (public IP, device name,
carrier). These helpers mask them before a snapshot reaches DEBUG logs.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Mapping
from typing import Any

from pybattmon._constants import IP_PLACEHOLDER

_MASKED = "<redacted>"

_IDENTIFYING_KEYS: frozenset[str] = frozenset({"device_name", "carrier", "hostname"})
_IP_KEYS: frozenset[str] = frozenset({"ip", "ip_address"})


def mask_ip(value: str) -> str:
    """Keep the network half of an address: ``203.0.113.7`` -> ``203.0.x.x``."""
    if value == IP_PLACEHOLDER:
        return value
    try:
        address = ipaddress.ip_address(value.strip())
    except ValueError:
        return _MASKED
    if address.version == 4:
        head = str(address).split(".")[:2]
        return ".".join([*head, "x", "x"])
    groups = address.exploded.split(":")[:2]
    return ":".join([*groups, "x"])


def redact_for_log(values: Mapping[str, Any]) -> dict[str, Any]:
    """Return a shallow copy of *values* with identifying fields masked."""
    redacted: dict[str, Any] = {}
    for key, value in values.items():
        lowered = str(key).lower()
        if lowered in _IP_KEYS and isinstance(value, str):
            redacted[key] = mask_ip(value)
        elif lowered in _IDENTIFYING_KEYS and value:
            redacted[key] = _MASKED
        else:
            redacted[key] = value
    return redacted

"""Normalization helpers.

Centralizes defensive parsing of sensor readings and stored values.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def safe_bool(value: Any) -> bool | None:
    """Parse booleans the way they are persisted (``"true"``/``"false"``).

    Numbers are accepted as ``0``/non-zero. Anything else is ``None``.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off"}:
            return False
    return None


def non_negative_or_zero(value: Any) -> int:
    parsed = safe_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def clamp_fraction(value: Any) -> float:
    """Clamp a battery fraction to ``0..1``; unreadable values become ``0.0``."""
    parsed = safe_float(value)
    if parsed is None:
        return 0.0
    return min(1.0, max(0.0, parsed))


def clamp_percent(value: Any) -> float | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return min(100.0, max(0.0, parsed))

"""Normalization helpers.

Centralizes defensive parsing and placeholder handling for inbound reports
and remote payloads.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--" or isinstance(value, bool):
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
    """Return a stripped string, or ``None`` when nothing meaningful remains."""
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def is_present(value: Any) -> bool:
    """Return True when an optional field carries a usable value.

    Classification codes arrive as strings; an empty or whitespace-only
    string means "not supplied" and must never clear a known value.
    """

    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def parse_position(value: Any) -> tuple[float, float] | None:
    """Parse a ``[lon, lat]`` pair into a ``(lon, lat)`` tuple of floats.

    Returns ``None`` for anything that is not a two-element sequence of
    finite numbers within the valid coordinate ranges.
    """

    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    lon = safe_float(value[0])
    lat = safe_float(value[1])
    if lon is None or lat is None:
        return None
    if not -180.0 <= lon <= 180.0 or not -90.0 <= lat <= 90.0:
        return None
    return lon, lat

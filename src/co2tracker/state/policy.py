"""Deterministic position filtering policy.

This module intentionally contains *no* payload parsing. The ingestion
boundary is responsible for producing validated reports; these helpers only
decide what a report means for a track.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any


class Movement(StrEnum):
    JUMP = "jump"
    MOVE = "move"
    NOISE = "noise"


def classify_movement(distance_km: float, *, max_jump_km: float, min_move_km: float) -> Movement:
    """Classify the distance between two consecutive fixes.

    Longer than *max_jump_km* is a teleported/corrupted fix, longer than
    *min_move_km* is genuine movement, anything else is positional noise.
    """
    if distance_km > max_jump_km:
        return Movement.JUMP
    if distance_km > min_move_km:
        return Movement.MOVE
    return Movement.NOISE


def is_stale_position(position_age_seconds: float | None, threshold_seconds: float) -> bool:
    """A missing age is treated as fresh."""
    if position_age_seconds is None:
        return False
    return position_age_seconds > threshold_seconds


def is_duplicate_fix(stored_position_time: Any, incoming_position_time: Any) -> bool:
    """Same source timestamp as the stored baseline means the fix was re-delivered."""
    if stored_position_time is None or incoming_position_time is None:
        return False
    return bool(stored_position_time == incoming_position_time)


def is_expired(now: datetime, last_seen_at: datetime, max_age: timedelta) -> bool:
    return now - last_seen_at > max_age

"""Overlap detection for an instructor's recurring weekly slots.

Time ranges are half-open ``[start, end)`` in minutes since midnight, so a
slot ending at 10:00 and one starting at 10:00 do not collide.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Union

from ..common.datetime_utils import time_to_minutes
from .model import TimetableSlot


def _day_key(day: Union[str, Enum]) -> str:
    if isinstance(day, Enum):
        day = day.value
    return str(day).strip().lower()


def ranges_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a


def check_overlap(
    existing: Iterable[TimetableSlot],
    *,
    day: Union[str, Enum],
    start_time: str,
    end_time: str,
) -> Optional[TimetableSlot]:
    """Return the first stored slot on ``day`` overlapping the candidate range, else None."""

    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    key = _day_key(day)

    for slot in existing:
        if _day_key(slot.day) != key:
            continue
        if ranges_overlap(start, end, time_to_minutes(slot.start_time), time_to_minutes(slot.end_time)):
            return slot
    return None

"""
Slot partitioning

Turns an availability window into the ordered list of fixed-length slots it
offers. Slots advance by slot_duration + break_duration; a trailing slot that
would run past the window end is dropped, never shortened.
"""

from datetime import datetime, timedelta, timezone
from typing import List, NamedTuple
from zoneinfo import ZoneInfo


class SlotInterval(NamedTuple):
    start: datetime
    end: datetime


def window_bounds(window) -> SlotInterval:
    """
    The window's [start, end) as UTC instants.

    A wall-clock time the zone skips (02:30 on a spring-forward day) resolves
    with the pre-transition offset, landing after the gap; a repeated one
    (01:30 on a fall-back day) resolves to its first occurrence.
    """
    zone = ZoneInfo(window.timezone)
    start = datetime.combine(window.date, window.start_time, tzinfo=zone)
    end = datetime.combine(window.date, window.end_time, tzinfo=zone)
    return SlotInterval(start.astimezone(timezone.utc), end.astimezone(timezone.utc))


def partition(window) -> List[SlotInterval]:
    """
    Partition a window into slot intervals.

    The cursor walks in UTC, so every slot lasts exactly slot_duration even
    on days where the window's zone changes offset.

    Args:
        window: anything exposing date, start_time, end_time, timezone,
            slot_duration and break_duration (an ORM row or a request)

    Returns:
        list[SlotInterval]: UTC intervals ordered by start. Empty when
        slot_duration exceeds the window.
    """
    window_start, window_end = window_bounds(window)
    slot_length = timedelta(minutes=window.slot_duration)
    step = slot_length + timedelta(minutes=window.break_duration or 0)

    slots = []
    cursor = window_start
    while cursor + slot_length <= window_end:
        slots.append(SlotInterval(cursor, cursor + slot_length))
        cursor += step
    return slots


def count_slots(window) -> int:
    return len(partition(window))

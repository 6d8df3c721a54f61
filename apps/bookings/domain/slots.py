"""Slot grid for a court on one date.

Pure calculation: fixed-length slots from opening time while they fit
before closing time, each marked booked, past or available.
"""

from datetime import date, datetime, tzinfo
from typing import Iterable, List

from apps.venues.domain.operating_hours import OperatingWindow
from shared.domain.value_objects import Interval, TimeOfDay, civil_date, minutes_of_day

from .results import Slot


def generate_slots(
    windows: Iterable[OperatingWindow],
    on: date,
    booked: Iterable[Interval],
    now: datetime,
    slot_minutes: int = 60,
    tz: tzinfo | None = None,
) -> List[Slot]:
    booked = list(booked)
    today = civil_date(now, tz)
    current = minutes_of_day(now, tz)

    slots: List[Slot] = []
    for window in sorted(windows, key=lambda w: w.open_time):
        if not window.is_open:
            continue
        start = window.open_time.minutes
        while start + slot_minutes <= window.close_time.minutes:
            interval = Interval(TimeOfDay(start), TimeOfDay(start + slot_minutes))
            if on < today or (on == today and start <= current):
                status = Slot.PAST
            elif any(interval.overlaps(b) for b in booked):
                status = Slot.BOOKED
            else:
                status = Slot.AVAILABLE
            slots.append(Slot(interval=interval, status=status))
            start += slot_minutes
    return slots

"""
Operating hours domain

An OperatingWindow says when a court (or every court of a venue) can be
booked on one weekday. Windows come from three sources with different
shapes; all of them are normalised to OperatingWindow before anything
else looks at them.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Mapping

from shared.domain.base import ValueObject
from shared.domain.errors import FormatError, ValidationError
from shared.domain.value_objects import Interval, TimeOfDay

# Legacy blobs may omit the times; the court is then open all day.
LEGACY_DEFAULT_OPEN = TimeOfDay.of(0, 0)
LEGACY_DEFAULT_CLOSE = TimeOfDay.of(23, 59)


@dataclass(frozen=True)
class OperatingWindow(ValueObject):
    """
    Weekly operating window

    day_of_week is Sunday-based (0-6). effective_from / effective_to are
    inclusive; either may be None for an open-ended range.
    """
    day_of_week: int
    open_time: TimeOfDay
    close_time: TimeOfDay
    is_open: bool = True
    effective_from: date | None = None
    effective_to: date | None = None

    def in_effect_on(self, on: date) -> bool:
        if self.effective_from is not None and on < self.effective_from:
            return False
        if self.effective_to is not None and on > self.effective_to:
            return False
        return True

    def covers(self, interval: Interval) -> bool:
        return self.open_time <= interval.start and interval.end <= self.close_time

    def validate(self) -> None:
        if isinstance(self.day_of_week, bool) or not isinstance(self.day_of_week, int) \
                or not 0 <= self.day_of_week <= 6:
            raise ValidationError(
                f"day_of_week must be between 0 (Sunday) and 6 (Saturday), got {self.day_of_week!r}.",
                field="day_of_week",
            )
        if self.is_open and self.open_time >= self.close_time:
            raise ValidationError(
                f"Close time must be after open time ({self.open_time}-{self.close_time}).",
                field="close_time",
            )
        if self.effective_from and self.effective_to and self.effective_from > self.effective_to:
            raise ValidationError(
                "effective_from must not be after effective_to.",
                field="effective_from",
            )


def validate_weekly_hours(windows: Iterable[OperatingWindow]) -> List[OperatingWindow]:
    """Validate a full replacement set: every window valid, one per weekday."""
    windows = list(windows)
    seen = set()
    for window in windows:
        window.validate()
        if window.day_of_week in seen:
            raise ValidationError(
                f"Duplicate operating window for day {window.day_of_week}.",
                field="day_of_week",
            )
        seen.add(window.day_of_week)
    return sorted(windows, key=lambda w: w.day_of_week)


def _parse_legacy_date(value) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise FormatError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


def windows_from_legacy_schedule(blob: Mapping) -> List[OperatingWindow]:
    """
    Normalise the court's older JSON availability format

        {"daysOfWeek": [1, 2, 3], "startTime": "08:00", "endTime": "22:00",
         "startDate": "2024-01-01", "endDate": "2024-12-31"}

    Days not listed are closed. Raises FormatError on malformed values.
    """
    if not isinstance(blob, Mapping):
        raise FormatError("Legacy schedule must be an object")

    days = blob.get("daysOfWeek") or []
    open_time = TimeOfDay.parse(blob["startTime"]) if blob.get("startTime") else LEGACY_DEFAULT_OPEN
    close_time = TimeOfDay.parse(blob["endTime"]) if blob.get("endTime") else LEGACY_DEFAULT_CLOSE
    if open_time >= close_time:
        raise FormatError(f"Legacy schedule closes ({close_time}) before it opens ({open_time})")
    effective_from = _parse_legacy_date(blob.get("startDate"))
    effective_to = _parse_legacy_date(blob.get("endDate"))

    for day in days:
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            raise FormatError(f"Invalid day of week {day!r} in legacy schedule")

    windows = []
    for day in sorted(set(days)):
        windows.append(
            OperatingWindow(
                day_of_week=day,
                open_time=open_time,
                close_time=close_time,
                effective_from=effective_from,
                effective_to=effective_to,
            )
        )
    return windows

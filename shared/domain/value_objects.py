"""
Common Value Objects

Value objects used across the venue and booking domains:
- TimeOfDay: minutes since midnight on a civil calendar day
- Interval: half-open [start, end) range of TimeOfDay
- Money: non-negative monetary amount
- DateRange: range of civil dates (start inclusive, end exclusive)
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator

from shared.domain.base import ValueObject
from shared.domain.errors import FormatError, InvalidIntervalError

MINUTES_PER_DAY = 24 * 60

TIME_OF_DAY_PATTERN = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


def day_of_week(value: date) -> int:
    """Sunday-based weekday number (0 = Sunday ... 6 = Saturday)."""
    return (value.weekday() + 1) % 7


def weekday_name(day: int) -> str:
    return WEEKDAY_NAMES[day]


def _localize(now: datetime, tz: tzinfo | None) -> datetime:
    if now.tzinfo is not None and tz is not None:
        return now.astimezone(tz)
    return now


def civil_date(now: datetime, tz: tzinfo | None = None) -> date:
    """Calendar date of ``now`` in the venue time zone.

    Aware datetimes are converted to ``tz``; naive ones are taken as local.
    """
    return _localize(now, tz).date()


def minutes_of_day(now: datetime, tz: tzinfo | None = None) -> int:
    local = _localize(now, tz)
    return local.hour * 60 + local.minute


@dataclass(frozen=True, order=True)
class TimeOfDay(ValueObject):
    """
    Time of day value object

    Stored as minutes since midnight, range [0, 1440).
    No date and no timezone: comparisons are civil clock comparisons.
    """
    minutes: int

    def __post_init__(self):
        if isinstance(self.minutes, bool) or not isinstance(self.minutes, int):
            raise FormatError(f"Time of day must be whole minutes, got {self.minutes!r}")
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise FormatError(f"Time of day must be within 00:00-23:59, got {self.minutes} minutes")

    @classmethod
    def parse(cls, value: str) -> 'TimeOfDay':
        """Parse an ``HH:MM`` string (leading zero on the hour optional)."""
        if not isinstance(value, str) or not TIME_OF_DAY_PATTERN.match(value):
            raise FormatError(f"Invalid time {value!r}, expected HH:MM")
        hours, minutes = value.split(":")
        return cls(int(hours) * 60 + int(minutes))

    @classmethod
    def from_time(cls, value: time) -> 'TimeOfDay':
        return cls(value.hour * 60 + value.minute)

    @classmethod
    def of(cls, hour: int, minute: int = 0) -> 'TimeOfDay':
        return cls(hour * 60 + minute)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def __str__(self):
        return f"{self.hour:02d}:{self.minute:02d}"

    def __repr__(self):
        return f"TimeOfDay({self})"


def parse_time_of_day(value: str) -> TimeOfDay:
    return TimeOfDay.parse(value)


def compare(a: TimeOfDay, b: TimeOfDay) -> int:
    """Three-way comparison: -1, 0 or 1."""
    return (a.minutes > b.minutes) - (a.minutes < b.minutes)


@dataclass(frozen=True)
class Interval(ValueObject):
    """
    Interval value object

    Half-open range [start, end) of TimeOfDay on one civil date.
    start < end is enforced at construction, so duration is always positive.
    """
    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self):
        if not self.start < self.end:
            raise InvalidIntervalError(
                f"End time ({self.end}) must be after start time ({self.start})."
            )

    @classmethod
    def parse(cls, start: str, end: str) -> 'Interval':
        return cls(TimeOfDay.parse(start), TimeOfDay.parse(end))

    def overlaps(self, other: 'Interval') -> bool:
        """
        Check if this interval overlaps another

        Adjacent intervals do not overlap:
            - 09:00-10:00 overlaps 09:30-11:00 -> True
            - 09:00-10:00 overlaps 10:00-11:00 -> False (back to back)
        """
        if not isinstance(other, Interval):
            raise TypeError("Can only check overlap with another Interval")
        return self.start < other.end and other.start < self.end

    def contains(self, other: 'Interval') -> bool:
        return self.start <= other.start and other.end <= self.end

    @property
    def duration_minutes(self) -> int:
        return self.end.minutes - self.start.minutes

    @property
    def duration_hours(self) -> Decimal:
        return Decimal(self.duration_minutes) / Decimal(60)

    def __str__(self):
        return f"{self.start}-{self.end}"

    def __repr__(self):
        return f"Interval({self})"


def overlaps(a: Interval, b: Interval) -> bool:
    return a.overlaps(b)


def duration_minutes(interval: Interval) -> int:
    return interval.duration_minutes


CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Non-negative amount rounded to cents. Currency-agnostic: the court price
    and the booking total are expressed in the venue's currency.
    """
    amount: Decimal

    def __post_init__(self):
        amount = self.amount
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        if amount < 0:
            raise ValueError("Amount cannot be negative")
        object.__setattr__(self, 'amount', amount.quantize(CENT, rounding=ROUND_HALF_UP))

    @classmethod
    def zero(cls) -> 'Money':
        return cls(Decimal("0"))

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        return Money(self.amount + other.amount)

    def __mul__(self, factor) -> 'Money':
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(self.amount * factor)

    __rmul__ = __mul__

    def __str__(self):
        return f"{self.amount:.2f}"

    def __repr__(self):
        return f"Money({self.amount})"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for owner reporting windows.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise InvalidIntervalError(
                f"Start date ({self.start_date}) must be before end date ({self.end_date})"
            )

    @classmethod
    def inclusive(cls, first: date, last: date) -> 'DateRange':
        return cls(first, last + timedelta(days=1))

    def overlaps_with(self, other: 'DateRange') -> bool:
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start_date < other.end_date and self.end_date > other.start_date

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date < self.end_date

    def days(self) -> Iterator[date]:
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"

"""
Availability Evaluator

Decides whether a court can be booked for an interval on a date. Pure
reads: the store is only asked for operating windows and nothing is
written. Overlap with existing bookings is not checked here; that happens
under lock in the ledger.

Rules, first failure wins:
1. date before today                      -> PAST_DATE
2. today and start at or before now       -> PAST_TIME
3. start not before end                   -> INVALID_RANGE
4. no open window for the weekday         -> VENUE_CLOSED
5. window exists but not in effect        -> OUTSIDE_EFFECTIVE_RANGE
6. interval not inside the window         -> OUTSIDE_OPERATING_HOURS
"""

from datetime import date, datetime, tzinfo

from shared.domain.value_objects import (
    Interval,
    TimeOfDay,
    civil_date,
    day_of_week,
    minutes_of_day,
    weekday_name,
)

from .results import Accepted, Availability, Rejected, RejectionKind


class AvailabilityEvaluator:

    def __init__(self, store, tz: tzinfo | None = None):
        self.store = store
        self.tz = tz

    def check_availability(
        self,
        court,
        on: date,
        start: TimeOfDay,
        end: TimeOfDay,
        now: datetime,
    ) -> Availability:
        today = civil_date(now, self.tz)

        if on < today:
            return Rejected(RejectionKind.PAST_DATE, "Cannot book for past dates.")

        if on == today:
            current = minutes_of_day(now, self.tz)
            if start.minutes <= current:
                return Rejected(
                    RejectionKind.PAST_TIME,
                    f"Cannot book for past or current times. Current time is "
                    f"{current // 60}:{current % 60:02d}. Please select a future time slot.",
                )

        if start >= end:
            return Rejected(RejectionKind.INVALID_RANGE, "End time must be after start time.")
        interval = Interval(start, end)

        open_windows = [w for w in self.store.windows_for_weekday(court, on) if w.is_open]
        if not open_windows:
            return Rejected(
                RejectionKind.VENUE_CLOSED,
                f"The venue is closed on {weekday_name(day_of_week(on))}.",
            )

        in_effect = [w for w in open_windows if w.in_effect_on(on)]
        if not in_effect:
            return Rejected(RejectionKind.OUTSIDE_EFFECTIVE_RANGE, _effective_range_message(open_windows[0], on))

        for window in in_effect:
            if window.covers(interval):
                return Accepted(window=window, interval=interval)

        window = in_effect[0]
        if interval.start < window.open_time:
            return Rejected(
                RejectionKind.OUTSIDE_OPERATING_HOURS,
                f"Booking time is outside venue operating hours. The venue opens at {window.open_time}.",
                boundary=window.open_time,
            )
        return Rejected(
            RejectionKind.OUTSIDE_OPERATING_HOURS,
            f"Booking time is outside venue operating hours. The venue closes at {window.close_time}.",
            boundary=window.close_time,
        )


def _effective_range_message(window, on: date) -> str:
    if window.effective_from is not None and on < window.effective_from:
        return f"Bookings are not available until {window.effective_from.isoformat()}."
    return f"Bookings are not available after {window.effective_to.isoformat()}."

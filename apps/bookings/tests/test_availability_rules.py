"""Unit tests for AvailabilityEvaluator rule order and messages."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone as dt_timezone

from apps.bookings.domain.availability import AvailabilityEvaluator
from apps.bookings.domain.results import Accepted, Rejected, RejectionKind
from apps.venues.domain.operating_hours import OperatingWindow
from shared.domain.value_objects import TimeOfDay, day_of_week

NOW = datetime(2030, 6, 3, 10, 0, tzinfo=dt_timezone.utc)
TODAY = date(2030, 6, 3)
TOMORROW = TODAY + timedelta(days=1)


class StubStore:
    """Returns fixed weekly windows regardless of the court."""

    def __init__(self, windows):
        self.windows = list(windows)

    def windows_for_weekday(self, court, on):
        return [w for w in self.windows if w.day_of_week == day_of_week(on)]


def t(value: str) -> TimeOfDay:
    return TimeOfDay.parse(value)


def window(day: int, open_at="08:00", close_at="21:00", **kwargs) -> OperatingWindow:
    return OperatingWindow(day_of_week=day, open_time=t(open_at), close_time=t(close_at), **kwargs)


def evaluate(windows, on, start, end, now=NOW):
    return AvailabilityEvaluator(StubStore(windows), tz=dt_timezone.utc).check_availability(
        None, on, t(start), t(end), now
    )


def every_day(**kwargs):
    return [window(day, **kwargs) for day in range(7)]


def test_inside_hours_is_accepted():
    outcome = evaluate(every_day(), TOMORROW, "14:00", "15:00")

    assert isinstance(outcome, Accepted)
    assert str(outcome.interval) == "14:00-15:00"
    assert outcome.window.day_of_week == day_of_week(TOMORROW)


def test_past_date_is_rejected():
    outcome = evaluate(every_day(), TODAY - timedelta(days=1), "14:00", "15:00")

    assert outcome.kind == RejectionKind.PAST_DATE
    assert outcome.message == "Cannot book for past dates."
    assert outcome.category == "past_time"


def test_start_at_current_minute_is_past_time():
    outcome = evaluate(every_day(), TODAY, "10:00", "11:00")

    assert outcome.kind == RejectionKind.PAST_TIME
    assert outcome.message == (
        "Cannot book for past or current times. Current time is 10:00. Please select a future time slot."
    )


def test_later_today_is_accepted():
    assert isinstance(evaluate(every_day(), TODAY, "10:01", "11:00"), Accepted)


def test_current_time_in_message_has_unpadded_hour():
    outcome = evaluate(every_day(), TODAY, "09:00", "11:00", now=NOW.replace(hour=9, minute=5))

    assert "Current time is 9:05." in outcome.message


def test_end_not_after_start_is_invalid_range():
    outcome = evaluate(every_day(), TOMORROW, "15:00", "14:00")

    assert outcome.kind == RejectionKind.INVALID_RANGE
    assert outcome.message == "End time must be after start time."
    assert outcome.category == "validation"


def test_past_date_wins_over_invalid_range():
    outcome = evaluate([], TODAY - timedelta(days=3), "15:00", "14:00")

    assert outcome.kind == RejectionKind.PAST_DATE


def test_invalid_range_wins_over_closed_venue():
    outcome = evaluate([], TOMORROW, "15:00", "15:00")

    assert outcome.kind == RejectionKind.INVALID_RANGE


def test_no_windows_means_closed():
    outcome = evaluate([], TOMORROW, "14:00", "15:00")

    assert outcome.kind == RejectionKind.VENUE_CLOSED
    assert outcome.message == "The venue is closed on Tuesday."
    assert outcome.category == "venue_closed"


def test_closed_window_means_closed():
    outcome = evaluate([window(day_of_week(TOMORROW), is_open=False)], TOMORROW, "14:00", "15:00")

    assert outcome.kind == RejectionKind.VENUE_CLOSED


def test_window_not_yet_in_effect():
    starts = TOMORROW + timedelta(days=7)
    outcome = evaluate(every_day(effective_from=starts), TOMORROW, "14:00", "15:00")

    assert outcome.kind == RejectionKind.OUTSIDE_EFFECTIVE_RANGE
    assert outcome.message == f"Bookings are not available until {starts.isoformat()}."


def test_window_no_longer_in_effect():
    ended = TODAY
    outcome = evaluate(every_day(effective_to=ended), TOMORROW, "14:00", "15:00")

    assert outcome.kind == RejectionKind.OUTSIDE_EFFECTIVE_RANGE
    assert outcome.message == f"Bookings are not available after {ended.isoformat()}."


def test_effective_range_bounds_are_inclusive():
    outcome = evaluate(every_day(effective_from=TOMORROW, effective_to=TOMORROW), TOMORROW, "14:00", "15:00")

    assert isinstance(outcome, Accepted)


def test_start_before_opening_reports_opening_time():
    outcome = evaluate(every_day(), TOMORROW, "07:00", "09:00")

    assert outcome.kind == RejectionKind.OUTSIDE_OPERATING_HOURS
    assert outcome.message == "Booking time is outside venue operating hours. The venue opens at 08:00."
    assert outcome.boundary == t("08:00")


def test_end_after_closing_reports_closing_time():
    outcome = evaluate(every_day(), TOMORROW, "20:30", "21:30")

    assert outcome.kind == RejectionKind.OUTSIDE_OPERATING_HOURS
    assert "21:00" in outcome.message
    assert outcome.to_dict()["boundary"] == "21:00"


def test_interval_may_touch_both_boundaries():
    assert isinstance(evaluate(every_day(), TOMORROW, "08:00", "21:00"), Accepted)


def test_any_covering_window_accepts():
    day = day_of_week(TOMORROW)
    split = [window(day, "08:00", "12:00"), window(day, "16:00", "22:00")]

    assert isinstance(evaluate(split, TOMORROW, "17:00", "18:00"), Accepted)
    assert isinstance(evaluate(split, TOMORROW, "11:00", "17:00"), Rejected)

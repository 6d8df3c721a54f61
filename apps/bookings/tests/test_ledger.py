"""Tests for BookingLedger reservations and state changes."""

from __future__ import annotations

from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

import pytest
from django.db import OperationalError

from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.results import Conflict
from apps.bookings.ledger import BookingLedger, ReservationRequest
from apps.bookings.models import Booking as BookingRow, CourtDay
from shared.domain.errors import ConcurrencyError, InvalidTransitionError, NotFoundError
from shared.domain.value_objects import Interval, Money

ON = date(2030, 6, 4)


@pytest.fixture
def ledger() -> BookingLedger:
    return BookingLedger(tz=dt_timezone.utc)


@pytest.fixture
def request_for(court):
    def build(user, key=None) -> ReservationRequest:
        return ReservationRequest(
            user_id=user.pk,
            venue_id=court.venue_id,
            total_amount=Money(Decimal("20.00")),
            idempotency_key=key,
        )

    return build


@pytest.mark.django_db
class TestTryReserve:
    def test_reserves_and_confirms(self, ledger, court, player, request_for):
        booking = ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))

        assert booking.id is not None
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PENDING
        assert booking.confirmed_at is not None
        assert CourtDay.objects.filter(court=court, date=ON).count() == 1

    def test_overlap_returns_conflict_and_writes_nothing(self, ledger, court, player, other_player, request_for):
        first = ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))

        outcome = ledger.try_reserve(court, ON, Interval.parse("14:30", "15:30"), request_for(other_player))

        assert isinstance(outcome, Conflict)
        assert [b.id for b in outcome.overlapping] == [first.id]
        assert BookingRow.objects.count() == 1

    def test_back_to_back_bookings_are_allowed(self, ledger, court, player, other_player, request_for):
        ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))

        second = ledger.try_reserve(court, ON, Interval.parse("15:00", "16:00"), request_for(other_player))

        assert second.status == BookingStatus.CONFIRMED

    def test_cancelled_booking_frees_its_slot(self, ledger, court, player, other_player, request_for):
        first = ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))
        ledger.release(first.id, "changed plans")

        second = ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(other_player))

        assert second.status == BookingStatus.CONFIRMED

    def test_replacing_cancels_the_old_booking(self, ledger, court, player, request_for):
        old = ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))

        new = ledger.try_reserve(
            court, ON, Interval.parse("14:30", "15:30"), request_for(player), replacing=old.id
        )

        assert new.rescheduled_from_id == old.id
        old = ledger.get(old.id)
        assert old.status == BookingStatus.CANCELLED
        assert old.cancellation_reason == f"Rescheduled to #{new.id}"

    def test_lock_contention_is_retried_once_then_reported(self, ledger, court, player, request_for):
        with mock.patch.object(
            BookingLedger, "_reserve_once", side_effect=OperationalError("database is locked")
        ) as reserve:
            with pytest.raises(ConcurrencyError):
                ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))

        assert reserve.call_count == 2

    def test_transient_lock_error_recovers(self, ledger, court, player, request_for):
        real = BookingLedger._reserve_once
        calls = []

        def flaky(self, *args):
            calls.append(args)
            if len(calls) == 1:
                raise OperationalError("database is locked")
            return real(self, *args)

        with mock.patch.object(BookingLedger, "_reserve_once", flaky):
            booking = ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))

        assert booking.status == BookingStatus.CONFIRMED
        assert len(calls) == 2


@pytest.mark.django_db
class TestRelease:
    def test_release_is_idempotent(self, ledger, court, player, request_for):
        booking = ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))

        first = ledger.release(booking.id, "rain")
        second = ledger.release(booking.id, "again")

        assert first.status == second.status == BookingStatus.CANCELLED
        assert second.cancellation_reason == "rain"
        assert second.cancelled_at == first.cancelled_at

    def test_completed_booking_cannot_be_cancelled(self, ledger, court, player, request_for):
        booking = ledger.try_reserve(court, ON, Interval.parse("14:00", "15:00"), request_for(player))
        BookingRow.objects.filter(pk=booking.id).update(status=BookingRow.Status.COMPLETED)

        with pytest.raises(InvalidTransitionError):
            ledger.release(booking.id, "too late")

    def test_unknown_booking(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.release(999, "nope")


@pytest.mark.django_db
class TestCompletion:
    def test_completes_only_finished_confirmed_bookings(self, ledger, court, player, request_for):
        done = ledger.try_reserve(court, ON, Interval.parse("08:00", "09:00"), request_for(player))
        running = ledger.try_reserve(court, ON, Interval.parse("09:30", "10:30"), request_for(player))
        cancelled = ledger.try_reserve(court, ON, Interval.parse("07:00", "08:00"), request_for(player))
        ledger.release(cancelled.id, "rain")

        count = ledger.complete_finished(datetime(2030, 6, 4, 10, 0, tzinfo=dt_timezone.utc))

        assert count == 1
        assert ledger.get(done.id).status == BookingStatus.COMPLETED
        assert ledger.get(running.id).status == BookingStatus.CONFIRMED
        assert ledger.get(cancelled.id).status == BookingStatus.CANCELLED

    def test_mark_paid(self, ledger, court, player, request_for):
        booking = ledger.try_reserve(court, ON, Interval.parse("08:00", "09:00"), request_for(player))

        assert ledger.mark_paid(booking.id).payment_status == PaymentStatus.PAID
        assert BookingRow.objects.get(pk=booking.id).payment_status == BookingRow.PaymentStatus.PAID

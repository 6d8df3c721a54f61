"""Booking ledger.

Persistent record of bookings and the only place where court time is
reserved. Reservations for one court and date are serialised on the
CourtDay lock row; the overlap scan and the insert happen under that lock
in a single transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import List

import structlog
from django.db import IntegrityError, OperationalError, transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import ConcurrencyError, InvalidTransitionError, NotFoundError
from shared.domain.value_objects import Interval, Money, TimeOfDay, civil_date, minutes_of_day

from .domain.entities import Booking, BookingStatus, PaymentStatus
from .domain.results import Conflict
from .models import Booking as BookingRow, CourtDay

logger = structlog.get_logger(__name__)

RESERVE_ATTEMPTS = 2


@dataclass(frozen=True)
class ReservationRequest:
    """Everything besides court, date and interval that a new booking records."""
    user_id: int
    venue_id: int
    total_amount: Money
    notes: str = ''
    idempotency_key: str | None = None


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def to_entity(row: BookingRow) -> Booking:
    return Booking(
        id=row.pk,
        court_id=row.court_id,
        venue_id=row.venue_id,
        user_id=row.user_id,
        date=row.date,
        interval=Interval(TimeOfDay.from_time(row.start_time), TimeOfDay.from_time(row.end_time)),
        total_amount=Money(row.total_amount),
        status=BookingStatus(row.status),
        payment_status=PaymentStatus(row.payment_status),
        notes=row.notes,
        idempotency_key=row.idempotency_key,
        rescheduled_from_id=row.rescheduled_from_id,
        created_at=row.created_at,
        confirmed_at=row.confirmed_at,
        cancelled_at=row.cancelled_at,
        cancellation_reason=row.cancellation_reason,
    )


def _overlap_filter(interval: Interval) -> Q:
    # Half-open: [a, b) and [c, d) overlap when a < d and c < b
    return Q(start_time__lt=interval.end.to_time()) & Q(end_time__gt=interval.start.to_time())


class BookingLedger:

    def __init__(self, tz: tzinfo | None = None):
        self.tz = tz

    # ------------------------------------------------------------------- reads
    def get(self, booking_id: int) -> Booking:
        row = BookingRow.objects.filter(pk=booking_id).first()
        if row is None:
            raise NotFoundError("Booking", booking_id)
        return to_entity(row)

    def find_by_idempotency_key(self, user_id: int, key: str) -> Booking | None:
        row = BookingRow.objects.filter(user_id=user_id, idempotency_key=key).first()
        return to_entity(row) if row is not None else None

    def list_active_bookings(self, court_id: int, on: date) -> List[Booking]:
        rows = BookingRow.objects.filter(
            court_id=court_id,
            date=on,
            status__in=BookingRow.ACTIVE_STATUSES,
        ).order_by("start_time", "pk")
        return [to_entity(row) for row in rows]

    def list_user_bookings(self, user_id: int):
        return BookingRow.objects.filter(user_id=user_id).select_related("court", "venue")

    def list_venue_bookings(self, venue_id: int, first: date, last: date) -> List[Booking]:
        rows = BookingRow.objects.filter(
            venue_id=venue_id,
            date__gte=first,
            date__lte=last,
        ).order_by("date", "start_time", "pk")
        return [to_entity(row) for row in rows]

    def find_overlapping(
        self,
        court_id: int,
        on: date,
        interval: Interval,
        exclude_booking_id: int | None = None,
    ) -> List[Booking]:
        """Active bookings overlapping ``interval``. Advisory: takes no lock."""
        queryset = BookingRow.objects.filter(
            court_id=court_id,
            date=on,
            status__in=BookingRow.ACTIVE_STATUSES,
        ).filter(_overlap_filter(interval))
        if exclude_booking_id is not None:
            queryset = queryset.exclude(pk=exclude_booking_id)
        return [to_entity(row) for row in queryset.order_by("start_time", "pk")]

    # ------------------------------------------------------------------ writes
    def try_reserve(
        self,
        court,
        on: date,
        interval: Interval,
        request: ReservationRequest,
        replacing: int | None = None,
    ) -> Booking | Conflict:
        """
        Reserve ``interval`` on ``court`` for ``on``.

        Returns the confirmed booking, or Conflict with the overlapping
        bookings and nothing written. With ``replacing`` the given booking
        is ignored by the overlap scan and cancelled in the same
        transaction.
        """
        for attempt in range(1, RESERVE_ATTEMPTS + 1):
            try:
                return self._reserve_once(court, on, interval, request, replacing)
            except OperationalError as exc:
                if attempt == RESERVE_ATTEMPTS:
                    logger.error(
                        "booking.reserve_failed",
                        court_id=court.pk,
                        date=on.isoformat(),
                        interval=str(interval),
                        error=str(exc),
                    )
                    raise ConcurrencyError() from exc
                logger.warning("booking.reserve_retry", court_id=court.pk, date=on.isoformat(), error=str(exc))
            except IntegrityError:
                # Same user and key raced past the replay check
                if request.idempotency_key:
                    existing = self.find_by_idempotency_key(request.user_id, request.idempotency_key)
                    if existing is not None:
                        return existing
                raise
        raise ConcurrencyError()

    def _reserve_once(self, court, on, interval, request, replacing) -> Booking | Conflict:
        now = timezone.now()
        with DjangoUnitOfWork() as uow:
            CourtDay.objects.get_or_create(court_id=court.pk, date=on)
            _lock_queryset_if_possible(CourtDay.objects.filter(court_id=court.pk, date=on)).get()

            overlapping = self.find_overlapping(court.pk, on, interval, exclude_booking_id=replacing)
            if overlapping:
                logger.info(
                    "booking.conflict",
                    court_id=court.pk,
                    date=on.isoformat(),
                    interval=str(interval),
                    conflicts=[b.id for b in overlapping],
                )
                return Conflict(overlapping=tuple(overlapping))

            if replacing is not None:
                old_row = _lock_queryset_if_possible(BookingRow.objects.filter(pk=replacing)).first()
                if old_row is None:
                    raise NotFoundError("Booking", replacing)
                old = to_entity(old_row)
                if not old.can_be_cancelled:
                    raise InvalidTransitionError(old.status.value, BookingStatus.CANCELLED.value)

            row = BookingRow.objects.create(
                court_id=court.pk,
                venue_id=request.venue_id,
                user_id=request.user_id,
                date=on,
                start_time=interval.start.to_time(),
                end_time=interval.end.to_time(),
                status=BookingRow.Status.CONFIRMED,
                payment_status=BookingRow.PaymentStatus.PENDING,
                total_amount=request.total_amount.amount,
                notes=request.notes,
                idempotency_key=request.idempotency_key or None,
                rescheduled_from_id=replacing,
                confirmed_at=now,
            )
            booking = to_entity(row)

            if replacing is not None:
                old.cancel(f"Rescheduled to #{booking.id}", now)
                self._save(old_row, old)
                uow.collect_events(old)

            booking.record_confirmed()
            uow.collect_events(booking)

        logger.info(
            "booking.reserved",
            booking_id=booking.id,
            court_id=court.pk,
            date=on.isoformat(),
            interval=str(interval),
            replacing=replacing,
        )
        return booking

    def release(self, booking_id: int, reason: str) -> Booking:
        """Cancel a booking. Cancelling a cancelled booking changes nothing."""
        with DjangoUnitOfWork() as uow:
            row = _lock_queryset_if_possible(BookingRow.objects.filter(pk=booking_id)).first()
            if row is None:
                raise NotFoundError("Booking", booking_id)
            booking = to_entity(row)
            if not booking.cancel(reason, timezone.now()):
                return booking
            self._save(row, booking)
            uow.collect_events(booking)

        logger.info("booking.released", booking_id=booking_id, reason=reason)
        return booking

    def mark_paid(self, booking_id: int) -> Booking:
        return self._update_payment(booking_id, Booking.mark_paid)

    def mark_payment_failed(self, booking_id: int) -> Booking:
        return self._update_payment(booking_id, Booking.mark_payment_failed)

    def _update_payment(self, booking_id: int, transition) -> Booking:
        with transaction.atomic():
            row = _lock_queryset_if_possible(BookingRow.objects.filter(pk=booking_id)).first()
            if row is None:
                raise NotFoundError("Booking", booking_id)
            booking = to_entity(row)
            transition(booking)
            self._save(row, booking)
        logger.info("booking.payment_updated", booking_id=booking_id, payment_status=booking.payment_status.value)
        return booking

    def complete_finished(self, now: datetime) -> int:
        """Move confirmed bookings whose slot has ended to completed."""
        today = civil_date(now, self.tz)
        current = TimeOfDay(minutes_of_day(now, self.tz))
        finished = Q(date__lt=today) | Q(date=today, end_time__lte=current.to_time())

        completed = 0
        with DjangoUnitOfWork() as uow:
            rows = _lock_queryset_if_possible(
                BookingRow.objects.filter(status=BookingRow.Status.CONFIRMED).filter(finished)
            )
            for row in rows:
                booking = to_entity(row)
                booking.complete()
                self._save(row, booking)
                uow.collect_events(booking)
                completed += 1

        if completed:
            logger.info("booking.completed_finished", count=completed)
        return completed

    @staticmethod
    def _save(row: BookingRow, booking: Booking) -> None:
        row.status = booking.status.value
        row.payment_status = booking.payment_status.value
        row.cancelled_at = booking.cancelled_at
        row.cancellation_reason = booking.cancellation_reason
        row.save(update_fields=["status", "payment_status", "cancelled_at", "cancellation_reason", "updated_at"])

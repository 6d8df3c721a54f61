"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: aggregate representing a court reservation
- BookingStatus: lifecycle states
- PaymentStatus: payment state tracking
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from shared.domain.base import Aggregate
from shared.domain.errors import InvalidTransitionError
from shared.domain.value_objects import Interval, Money

from .events import BookingCancelled, BookingCompleted, BookingConfirmed


class BookingStatus(Enum):
    """
    Booking lifecycle

    State transitions:
    - PENDING -> CONFIRMED
    - PENDING | CONFIRMED -> CANCELLED (user, owner, admin or reschedule)
    - CONFIRMED -> COMPLETED (slot has ended)

    CANCELLED and COMPLETED are terminal.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class PaymentStatus(Enum):
    """Payment status tracking"""
    PENDING = 'pending'
    PAID = 'paid'
    FAILED = 'failed'
    REFUNDED = 'refunded'


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - interval.start < interval.end (enforced by Interval)
    - only PENDING and CONFIRMED bookings occupy their court
    - terminal states never change again
    """

    court_id: int
    venue_id: int
    user_id: int
    date: date
    interval: Interval
    total_amount: Money

    status: BookingStatus = BookingStatus.CONFIRMED
    payment_status: PaymentStatus = PaymentStatus.PENDING
    notes: str = ''
    idempotency_key: str | None = None
    rescheduled_from_id: int | None = None

    created_at: datetime | None = None
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str = ''

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def duration_minutes(self) -> int:
        return self.interval.duration_minutes

    def record_confirmed(self):
        """Raise BookingConfirmed once the booking has an id."""
        self.add_event(BookingConfirmed(aggregate_id=self.id, booking=self.to_snapshot()))

    def cancel(self, reason: str, at: datetime) -> bool:
        """
        Cancel the booking (PENDING | CONFIRMED -> CANCELLED)

        Returns False when the booking was already cancelled, leaving it
        untouched. Completed bookings cannot be cancelled.
        """
        if self.status == BookingStatus.CANCELLED:
            return False
        if self.status == BookingStatus.COMPLETED:
            raise InvalidTransitionError(self.status.value, BookingStatus.CANCELLED.value)

        self.status = BookingStatus.CANCELLED
        self.cancelled_at = at
        self.cancellation_reason = reason
        self.add_event(BookingCancelled(aggregate_id=self.id, booking=self.to_snapshot(), reason=reason))
        return True

    def complete(self):
        """CONFIRMED -> COMPLETED"""
        if self.status != BookingStatus.CONFIRMED:
            raise InvalidTransitionError(self.status.value, BookingStatus.COMPLETED.value)
        self.status = BookingStatus.COMPLETED
        self.add_event(BookingCompleted(aggregate_id=self.id, booking=self.to_snapshot()))

    def mark_paid(self):
        if self.payment_status == PaymentStatus.REFUNDED:
            raise InvalidTransitionError(self.payment_status.value, PaymentStatus.PAID.value)
        self.payment_status = PaymentStatus.PAID

    def mark_payment_failed(self):
        if self.payment_status == PaymentStatus.PAID:
            raise InvalidTransitionError(self.payment_status.value, PaymentStatus.FAILED.value)
        self.payment_status = PaymentStatus.FAILED

    def to_snapshot(self) -> dict:
        """Plain, JSON-friendly view of the booking for events and tasks."""
        return {
            'id': self.id,
            'court_id': self.court_id,
            'venue_id': self.venue_id,
            'user_id': self.user_id,
            'date': self.date.isoformat(),
            'start_time': str(self.interval.start),
            'end_time': str(self.interval.end),
            'duration_minutes': self.duration_minutes,
            'status': self.status.value,
            'payment_status': self.payment_status.value,
            'total_amount': str(self.total_amount),
            'notes': self.notes,
            'rescheduled_from_id': self.rescheduled_from_id,
            'cancellation_reason': self.cancellation_reason,
        }

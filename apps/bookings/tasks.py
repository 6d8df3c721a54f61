"""Celery tasks for the booking domain.

Tasks receive the booking snapshot carried by the domain event, so they
never read a half-written booking and never run inside the reservation
transaction.
"""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.errors import DomainError

from .collaborators import get_payment_gateway
from .domain.entities import PaymentStatus
from .ledger import BookingLedger

logger = logging.getLogger(__name__)


@shared_task(name="bookings.request_payment")
def request_payment(booking: dict) -> str:
    """Ask the configured gateway for payment and record the outcome."""

    booking_id = booking["id"]
    try:
        outcome = get_payment_gateway().request_payment(booking)
    except Exception:
        logger.error("Payment request failed for booking %s", booking_id, exc_info=True)
        outcome = PaymentStatus.FAILED

    ledger = BookingLedger(tz=timezone.get_current_timezone())
    try:
        if outcome == PaymentStatus.PAID:
            ledger.mark_paid(booking_id)
        elif outcome == PaymentStatus.FAILED:
            ledger.mark_payment_failed(booking_id)
    except DomainError as exc:
        logger.warning("Could not record payment %s for booking %s: %s", outcome.value, booking_id, exc)

    return outcome.value


@shared_task(name="bookings.notify_booking_confirmed")
def notify_booking_confirmed(booking: dict) -> None:
    logger.info(
        "Booking %s confirmed: court %s on %s %s-%s, total %s",
        booking["id"],
        booking["court_id"],
        booking["date"],
        booking["start_time"],
        booking["end_time"],
        booking["total_amount"],
    )


@shared_task(name="bookings.notify_booking_cancelled")
def notify_booking_cancelled(booking: dict, reason: str = "") -> None:
    logger.info(
        "Booking %s cancelled: court %s on %s %s-%s (%s)",
        booking["id"],
        booking["court_id"],
        booking["date"],
        booking["start_time"],
        booking["end_time"],
        reason or booking.get("cancellation_reason", ""),
    )


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Mark confirmed bookings whose slot has ended as completed.

    Returns:
        dict: {"completed": number of bookings completed}
    """
    ledger = BookingLedger(tz=timezone.get_current_timezone())
    completed = ledger.complete_finished(timezone.now())
    return {"completed": completed}

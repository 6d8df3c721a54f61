"""Outbound collaborators of the booking core.

Court pricing is read through CourtSummary. Payment goes through a
PaymentGateway selected by the ``BOOKING_PAYMENT_GATEWAY`` setting.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

from django.conf import settings  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

from apps.venues.models import Court
from shared.domain.errors import NotFoundError

from .domain.entities import PaymentStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourtSummary:
    id: int
    venue_id: int
    venue_owner_id: int
    price_per_hour: Decimal


def load_bookable_court(court_id: int) -> tuple[Court, CourtSummary]:
    """Court model and its pricing summary; NotFoundError unless bookable."""
    court = Court.objects.select_related("venue").filter(pk=court_id).first()
    if court is None or not court.is_bookable:
        raise NotFoundError("Court", court_id, message="Court not found or unavailable")
    summary = CourtSummary(
        id=court.pk,
        venue_id=court.venue_id,
        venue_owner_id=court.venue.owner_id,
        price_per_hour=court.price_per_hour,
    )
    return court, summary


class PaymentGateway(ABC):
    """Requests payment for a confirmed booking."""

    @abstractmethod
    def request_payment(self, booking: dict) -> PaymentStatus:
        """Return PAID, FAILED, or PENDING when payment happens later."""


class PayAtVenueGateway(PaymentGateway):
    """Players settle at the venue; the booking stays pending payment."""

    def request_payment(self, booking: dict) -> PaymentStatus:
        logger.info("Booking %s will be paid at the venue (%s)", booking.get("id"), booking.get("total_amount"))
        return PaymentStatus.PENDING


@lru_cache(maxsize=None)
def _gateway_class(path: str):
    return import_string(path)


def get_payment_gateway() -> PaymentGateway:
    return _gateway_class(settings.BOOKING_PAYMENT_GATEWAY)()

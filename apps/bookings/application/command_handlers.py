"""
Booking Command Handlers

Use cases of the booking core. Each command or query is a dataclass and
each handler exposes ``handle()``. BookingOrchestrator wires the handlers
to one store, evaluator and ledger.

Commands:
- CreateBookingCommand: reserve a court interval
- CancelBookingCommand: cancel a booking
- RescheduleBookingCommand: move a booking to another slot atomically
- SetOperatingHoursCommand: replace a court's or venue's weekly hours

Queries:
- CheckAvailabilityQuery, GetOperatingHoursQuery, ListCourtBookingsQuery,
  CourtSlotsQuery, VenueSlotsQuery, VenueBookingsQuery
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from itertools import groupby
from typing import List

import structlog
from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.collaborators import CourtSummary, load_bookable_court
from apps.bookings.domain.availability import AvailabilityEvaluator
from apps.bookings.domain.entities import ACTIVE_STATUSES, Booking, BookingStatus
from apps.bookings.domain.results import (
    AvailabilityReport,
    BookingCancellation,
    BookingCreated,
    Conflict,
    ConflictingBooking,
    CourtSlots,
    Rejected,
    RejectionKind,
    Slot,
    VenueBookingsDay,
)
from apps.bookings.domain.slots import generate_slots
from apps.bookings.ledger import BookingLedger, ReservationRequest
from apps.venues.domain.operating_hours import OperatingWindow
from apps.venues.models import Court, Venue
from apps.venues.services import OperatingHoursStore
from shared.domain.errors import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from shared.domain.value_objects import DateRange, Interval, Money, TimeOfDay, civil_date

logger = structlog.get_logger(__name__)

SLOT_TAKEN_MESSAGE = "Time slot conflicts with existing bookings"


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    court_id: int
    date: date
    start: TimeOfDay
    end: TimeOfDay
    user_id: int
    now: datetime
    notes: str = ''
    idempotency_key: str | None = None


@dataclass
class CancelBookingCommand:
    booking_id: int
    user_id: int
    reason: str = ''


@dataclass
class RescheduleBookingCommand:
    booking_id: int
    user_id: int
    date: date
    start: TimeOfDay
    end: TimeOfDay
    now: datetime


@dataclass
class SetOperatingHoursCommand:
    """Replace the weekly hours of a court or a venue (target_type)."""
    target_type: str
    target_id: int
    windows: List[OperatingWindow]
    user_id: int
    effective_from: date | None = None
    effective_to: date | None = None


# ===== Queries =====

@dataclass
class CheckAvailabilityQuery:
    court_id: int
    date: date
    start: TimeOfDay
    end: TimeOfDay
    now: datetime


@dataclass
class GetOperatingHoursQuery:
    target_type: str
    target_id: int


@dataclass
class ListCourtBookingsQuery:
    court_id: int
    date: date


@dataclass
class CourtSlotsQuery:
    court_id: int
    date: date
    now: datetime


@dataclass
class VenueSlotsQuery:
    """Slot grids of a venue's active courts, optionally of one sport."""
    venue_id: int
    date: date
    now: datetime
    sport_type: str | None = None


@dataclass
class VenueBookingsQuery:
    """Owner view of a venue's bookings, grouped by date.

    Either ``date`` or ``start_date``/``end_date`` (inclusive); with
    neither, the next BOOKING_OWNER_DEFAULT_DAYS days from ``today``.
    Without ``statuses`` only pending and confirmed bookings are listed.
    """
    venue_id: int
    user_id: int
    today: date
    date: date | None = None
    start_date: date | None = None
    end_date: date | None = None
    statuses: List[str] = field(default_factory=list)


# ===== Helpers =====

def _load_actor(user_id: int):
    actor = get_user_model().objects.filter(pk=user_id).first()
    if actor is None:
        raise PermissionDeniedError()
    return actor


def _is_elevated(actor) -> bool:
    return actor.has_elevated_role()


def _ensure_may_manage_venue(actor, venue_owner_id: int) -> None:
    if actor.pk == venue_owner_id or _is_elevated(actor):
        return
    raise PermissionDeniedError("Only the venue owner or an admin can manage this venue.")


def _ensure_may_change_booking(actor, booking: Booking, venue_owner_id: int) -> None:
    if actor.pk in (booking.user_id, venue_owner_id) or _is_elevated(actor):
        return
    raise PermissionDeniedError("You can only change your own bookings.")


def _venue_owner_id(venue_id: int) -> int:
    owner_id = Venue.objects.filter(pk=venue_id).values_list("owner_id", flat=True).first()
    if owner_id is None:
        raise NotFoundError("Venue", venue_id)
    return owner_id


def _load_target(target_type: str, target_id: int) -> Court | Venue:
    if target_type == "court":
        target = Court.objects.select_related("venue").filter(pk=target_id).first()
        if target is None:
            raise NotFoundError("Court", target_id)
        return target
    if target_type == "venue":
        target = Venue.objects.filter(pk=target_id).first()
        if target is None:
            raise NotFoundError("Venue", target_id)
        return target
    raise ValidationError(f"Unknown operating hours target {target_type!r}.", field="target_type")


def _price(summary: CourtSummary, interval: Interval) -> Money:
    return Money(summary.price_per_hour) * interval.duration_hours


def _slot_taken(conflict: Conflict) -> Rejected:
    return Rejected(
        RejectionKind.SLOT_TAKEN,
        SLOT_TAKEN_MESSAGE,
        conflicts=tuple(ConflictingBooking.from_booking(b) for b in conflict.overlapping),
    )


# ===== Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Court must exist, be active and belong to an approved, active venue
    2. A repeated idempotency key returns the original booking
    3. Evaluator rules; a rejection is returned as is
    4. Price from the court's hourly rate
    5. Ledger reservation under the court-day lock
    BookingConfirmed is published after commit.
    """

    def __init__(self, evaluator: AvailabilityEvaluator, ledger: BookingLedger):
        self.evaluator = evaluator
        self.ledger = ledger

    def handle(self, command: CreateBookingCommand) -> BookingCreated | Rejected:
        court, summary = load_bookable_court(command.court_id)

        if command.idempotency_key:
            existing = self.ledger.find_by_idempotency_key(command.user_id, command.idempotency_key)
            if existing is not None:
                logger.info("booking.replayed", booking_id=existing.id, user_id=command.user_id)
                return BookingCreated(booking=existing, replayed=True)

        outcome = self.evaluator.check_availability(court, command.date, command.start, command.end, command.now)
        if isinstance(outcome, Rejected):
            logger.info(
                "booking.rejected",
                court_id=court.pk,
                date=command.date.isoformat(),
                kind=outcome.kind.value,
            )
            return outcome

        request = ReservationRequest(
            user_id=command.user_id,
            venue_id=summary.venue_id,
            total_amount=_price(summary, outcome.interval),
            notes=command.notes,
            idempotency_key=command.idempotency_key,
        )
        reserved = self.ledger.try_reserve(court, command.date, outcome.interval, request)
        if isinstance(reserved, Conflict):
            return _slot_taken(reserved)
        return BookingCreated(booking=reserved)


class CheckAvailabilityHandler:
    """Read-only preview; the overlap check here is advisory."""

    def __init__(self, evaluator: AvailabilityEvaluator, ledger: BookingLedger):
        self.evaluator = evaluator
        self.ledger = ledger

    def handle(self, query: CheckAvailabilityQuery) -> AvailabilityReport:
        court, summary = load_bookable_court(query.court_id)
        existing = self.ledger.list_active_bookings(court.pk, query.date)

        outcome = self.evaluator.check_availability(court, query.date, query.start, query.end, query.now)
        if isinstance(outcome, Rejected):
            return AvailabilityReport(outcome=outcome, existing_bookings=existing)

        overlapping = [b for b in existing if b.interval.overlaps(outcome.interval)]
        if overlapping:
            outcome = _slot_taken(Conflict(overlapping=tuple(overlapping)))
            return AvailabilityReport(outcome=outcome, existing_bookings=existing)

        return AvailabilityReport(
            outcome=outcome,
            duration_minutes=outcome.interval.duration_minutes,
            total_amount=_price(summary, outcome.interval),
            existing_bookings=existing,
        )


class CancelBookingHandler:
    """
    Handler for CancelBooking command

    The booking's player, the venue owner and admins may cancel. There is
    no cut-off before the slot starts. Cancelling twice is not an error.
    """

    def __init__(self, ledger: BookingLedger):
        self.ledger = ledger

    def handle(self, command: CancelBookingCommand) -> BookingCancellation:
        booking = self.ledger.get(command.booking_id)
        actor = _load_actor(command.user_id)
        _ensure_may_change_booking(actor, booking, _venue_owner_id(booking.venue_id))

        if booking.status == BookingStatus.CANCELLED:
            return BookingCancellation(booking=booking, already_cancelled=True)

        reason = command.reason or settings.BOOKING_DEFAULT_CANCEL_REASON
        cancelled = self.ledger.release(booking.id, reason)
        logger.info("booking.cancelled", booking_id=booking.id, user_id=command.user_id)
        return BookingCancellation(booking=cancelled)


class RescheduleBookingHandler:
    """
    Handler for RescheduleBooking command

    Cancel-and-create in one ledger transaction: the old booking does not
    block its own new slot, and if the new slot is rejected the old
    booking stays untouched.
    """

    def __init__(self, evaluator: AvailabilityEvaluator, ledger: BookingLedger):
        self.evaluator = evaluator
        self.ledger = ledger

    def handle(self, command: RescheduleBookingCommand) -> BookingCreated | Rejected:
        booking = self.ledger.get(command.booking_id)
        actor = _load_actor(command.user_id)
        _ensure_may_change_booking(actor, booking, _venue_owner_id(booking.venue_id))

        if not booking.can_be_cancelled:
            raise InvalidTransitionError(booking.status.value, "rescheduled")

        court, summary = load_bookable_court(booking.court_id)
        outcome = self.evaluator.check_availability(court, command.date, command.start, command.end, command.now)
        if isinstance(outcome, Rejected):
            return outcome

        request = ReservationRequest(
            user_id=booking.user_id,
            venue_id=summary.venue_id,
            total_amount=_price(summary, outcome.interval),
            notes=booking.notes,
        )
        reserved = self.ledger.try_reserve(court, command.date, outcome.interval, request, replacing=booking.id)
        if isinstance(reserved, Conflict):
            return _slot_taken(reserved)

        logger.info("booking.rescheduled", booking_id=booking.id, new_booking_id=reserved.id)
        return BookingCreated(booking=reserved)


class SetOperatingHoursHandler:

    def __init__(self, store: OperatingHoursStore):
        self.store = store

    def handle(self, command: SetOperatingHoursCommand) -> List[OperatingWindow]:
        target = _load_target(command.target_type, command.target_id)
        owner_id = target.venue.owner_id if isinstance(target, Court) else target.owner_id
        _ensure_may_manage_venue(_load_actor(command.user_id), owner_id)

        return self.store.replace_windows(
            target,
            command.windows,
            effective_from=command.effective_from,
            effective_to=command.effective_to,
        )


class GetOperatingHoursHandler:

    def __init__(self, store: OperatingHoursStore):
        self.store = store

    def handle(self, query: GetOperatingHoursQuery) -> List[OperatingWindow]:
        return self.store.list_windows(_load_target(query.target_type, query.target_id))


class ListCourtBookingsHandler:

    def __init__(self, ledger: BookingLedger):
        self.ledger = ledger

    def handle(self, query: ListCourtBookingsQuery) -> List[Booking]:
        if not Court.objects.filter(pk=query.court_id).exists():
            raise NotFoundError("Court", query.court_id)
        return self.ledger.list_active_bookings(query.court_id, query.date)


class CourtSlotsHandler:
    """Slot grid of BOOKING_SLOT_MINUTES slots within the court's hours."""

    def __init__(self, store: OperatingHoursStore, ledger: BookingLedger, tz=None):
        self.store = store
        self.ledger = ledger
        self.tz = tz

    def handle(self, query: CourtSlotsQuery) -> List[Slot]:
        court = Court.objects.select_related("venue").filter(pk=query.court_id).first()
        if court is None:
            raise NotFoundError("Court", query.court_id)
        return self.slots_for(court, query.date, query.now)

    def slots_for(self, court: Court, on: date, now: datetime) -> List[Slot]:
        windows = self.store.get_windows_for(court, on)
        booked = [b.interval for b in self.ledger.list_active_bookings(court.pk, on)]
        return generate_slots(
            windows,
            on,
            booked,
            now,
            slot_minutes=settings.BOOKING_SLOT_MINUTES,
            tz=self.tz,
        )


class VenueSlotsHandler:
    """Slot grids of every active court of a bookable venue."""

    def __init__(self, court_slots: CourtSlotsHandler):
        self.court_slots = court_slots

    def handle(self, query: VenueSlotsQuery) -> List[CourtSlots]:
        venue = Venue.objects.filter(pk=query.venue_id).first()
        if venue is None or not venue.is_bookable:
            raise NotFoundError("Venue", query.venue_id, message="Venue not found or unavailable")

        courts = venue.courts.filter(is_active=True).order_by("name", "pk")
        if query.sport_type:
            if query.sport_type not in Court.SportType.values:
                raise ValidationError(f"Unknown sport type {query.sport_type!r}.", field="sport_type")
            courts = courts.filter(sport_type=query.sport_type)

        return [
            CourtSlots(
                court_id=court.pk,
                court_name=court.name,
                sport_type=court.sport_type,
                price_per_hour=Money(court.price_per_hour),
                slots=self.court_slots.slots_for(court, query.date, query.now),
            )
            for court in courts
        ]


class VenueBookingsHandler:

    def __init__(self, ledger: BookingLedger):
        self.ledger = ledger

    def handle(self, query: VenueBookingsQuery) -> List[VenueBookingsDay]:
        _ensure_may_manage_venue(_load_actor(query.user_id), _venue_owner_id(query.venue_id))

        if query.date is not None:
            window = DateRange.inclusive(query.date, query.date)
        else:
            first = query.start_date or query.today
            last = query.end_date or first + timedelta(days=settings.BOOKING_OWNER_DEFAULT_DAYS)
            if last < first:
                raise ValidationError("end_date must not be before start_date.", field="end_date")
            window = DateRange.inclusive(first, last)

        bookings = self.ledger.list_venue_bookings(
            query.venue_id,
            window.start_date,
            window.end_date - timedelta(days=1),
        )
        statuses = query.statuses or [active.value for active in ACTIVE_STATUSES]
        bookings = [b for b in bookings if b.status.value in statuses]

        return [
            VenueBookingsDay(day=day, bookings=list(group))
            for day, group in groupby(bookings, key=lambda b: b.date)
        ]


# ===== Facade =====

class BookingOrchestrator:
    """Entry point for the HTTP layer: one method per use case."""

    def __init__(
        self,
        store: OperatingHoursStore | None = None,
        ledger: BookingLedger | None = None,
        tz=None,
    ):
        self.tz = tz if tz is not None else timezone.get_current_timezone()
        self.store = store or OperatingHoursStore()
        self.ledger = ledger or BookingLedger(tz=self.tz)
        self.evaluator = AvailabilityEvaluator(self.store, tz=self.tz)

    def today(self, now: datetime) -> date:
        return civil_date(now, self.tz)

    def create_booking(self, command: CreateBookingCommand) -> BookingCreated | Rejected:
        return CreateBookingHandler(self.evaluator, self.ledger).handle(command)

    def check_availability(self, query: CheckAvailabilityQuery) -> AvailabilityReport:
        return CheckAvailabilityHandler(self.evaluator, self.ledger).handle(query)

    def cancel_booking(self, command: CancelBookingCommand) -> BookingCancellation:
        return CancelBookingHandler(self.ledger).handle(command)

    def reschedule(self, command: RescheduleBookingCommand) -> BookingCreated | Rejected:
        return RescheduleBookingHandler(self.evaluator, self.ledger).handle(command)

    def set_operating_hours(self, command: SetOperatingHoursCommand) -> List[OperatingWindow]:
        return SetOperatingHoursHandler(self.store).handle(command)

    def get_operating_hours(self, query: GetOperatingHoursQuery) -> List[OperatingWindow]:
        return GetOperatingHoursHandler(self.store).handle(query)

    def list_court_bookings(self, query: ListCourtBookingsQuery) -> List[Booking]:
        return ListCourtBookingsHandler(self.ledger).handle(query)

    def court_slots(self, query: CourtSlotsQuery) -> List[Slot]:
        return CourtSlotsHandler(self.store, self.ledger, tz=self.tz).handle(query)

    def venue_slots(self, query: VenueSlotsQuery) -> List[CourtSlots]:
        return VenueSlotsHandler(CourtSlotsHandler(self.store, self.ledger, tz=self.tz)).handle(query)

    def venue_bookings(self, query: VenueBookingsQuery) -> List[VenueBookingsDay]:
        return VenueBookingsHandler(self.ledger).handle(query)

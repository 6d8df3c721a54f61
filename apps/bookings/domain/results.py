"""
Booking outcomes

Expected outcomes of availability checks and reservations are values,
not exceptions: a taken slot or a closed venue is an ordinary answer.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Tuple, Union

from apps.venues.domain.operating_hours import OperatingWindow
from shared.domain.value_objects import Interval, Money, TimeOfDay

from .entities import Booking


class RejectionKind(Enum):
    PAST_DATE = 'PAST_DATE'
    PAST_TIME = 'PAST_TIME'
    INVALID_RANGE = 'INVALID_RANGE'
    VENUE_CLOSED = 'VENUE_CLOSED'
    OUTSIDE_EFFECTIVE_RANGE = 'OUTSIDE_EFFECTIVE_RANGE'
    OUTSIDE_OPERATING_HOURS = 'OUTSIDE_OPERATING_HOURS'
    SLOT_TAKEN = 'SLOT_TAKEN'

    @property
    def category(self) -> str:
        return _CATEGORIES[self]


_CATEGORIES = {
    RejectionKind.PAST_DATE: 'past_time',
    RejectionKind.PAST_TIME: 'past_time',
    RejectionKind.INVALID_RANGE: 'validation',
    RejectionKind.VENUE_CLOSED: 'venue_closed',
    RejectionKind.OUTSIDE_EFFECTIVE_RANGE: 'venue_closed',
    RejectionKind.OUTSIDE_OPERATING_HOURS: 'outside_operating_hours',
    RejectionKind.SLOT_TAKEN: 'conflict',
}


@dataclass(frozen=True)
class ConflictingBooking:
    """The part of an existing booking a rejected caller may see."""
    id: int
    start_time: TimeOfDay
    end_time: TimeOfDay

    @classmethod
    def from_booking(cls, booking: Booking) -> 'ConflictingBooking':
        return cls(id=booking.id, start_time=booking.interval.start, end_time=booking.interval.end)

    def to_dict(self) -> dict:
        return {'id': self.id, 'start_time': str(self.start_time), 'end_time': str(self.end_time)}


@dataclass(frozen=True)
class Accepted:
    window: OperatingWindow
    interval: Interval

    accepted = True


@dataclass(frozen=True)
class Rejected:
    kind: RejectionKind
    message: str
    boundary: TimeOfDay | None = None
    conflicts: Tuple[ConflictingBooking, ...] = ()

    accepted = False

    @property
    def category(self) -> str:
        return self.kind.category

    def to_dict(self) -> dict:
        data = {
            'kind': self.kind.value,
            'category': self.category,
            'message': self.message,
        }
        if self.boundary is not None:
            data['boundary'] = str(self.boundary)
        if self.conflicts:
            data['conflicts'] = [conflict.to_dict() for conflict in self.conflicts]
        return data


Availability = Union[Accepted, Rejected]


@dataclass(frozen=True)
class Conflict:
    """try_reserve found active bookings overlapping the requested interval."""
    overlapping: Tuple[Booking, ...]


@dataclass
class BookingCreated:
    booking: Booking
    replayed: bool = False

    accepted = True


@dataclass
class BookingCancellation:
    booking: Booking
    already_cancelled: bool = False


@dataclass
class AvailabilityReport:
    """Read-only preview of what a booking request would get."""
    outcome: Availability
    duration_minutes: int | None = None
    total_amount: Money | None = None
    existing_bookings: List[Booking] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.outcome.accepted


@dataclass(frozen=True)
class Slot:
    interval: Interval
    status: str

    AVAILABLE = 'available'
    BOOKED = 'booked'
    PAST = 'past'

    @property
    def is_available(self) -> bool:
        return self.status == self.AVAILABLE


@dataclass
class CourtSlots:
    """One court's slot grid inside a venue-wide view."""
    court_id: int
    court_name: str
    sport_type: str
    price_per_hour: Money
    slots: List[Slot]


@dataclass
class VenueBookingsDay:
    day: date
    bookings: List[Booking]

    @property
    def total_amount(self) -> Decimal:
        return sum((b.total_amount.amount for b in self.bookings), Decimal('0.00'))

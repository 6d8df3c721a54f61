"""
Booking Domain Events

Published on the message bus after the transaction that raised them has
committed. Each event carries a full booking snapshot so that handlers
(payment, notifications) never need to read the booking back.
"""

from dataclasses import dataclass, field

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: a booking was reserved and confirmed

    Triggers:
    - Payment request through the configured gateway
    - Confirmation notification to the player
    """
    booking: dict = field(default_factory=dict)


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: a booking was cancelled (directly or by a reschedule)

    Triggers:
    - Cancellation notification to the player
    """
    booking: dict = field(default_factory=dict)
    reason: str = ''


@dataclass(kw_only=True)
class BookingCompleted(DomainEvent):
    """Event: the booked slot has ended"""
    booking: dict = field(default_factory=dict)

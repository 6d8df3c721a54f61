"""
Booking Event Handlers

Subscribe booking side effects to the message bus. Handlers only enqueue
Celery tasks; an enqueue failure is logged by the bus and never reaches
the caller whose booking has already committed.
"""

from shared.application.message_bus import MessageBus, message_bus

from apps.bookings.domain.events import BookingCancelled, BookingConfirmed


def enqueue_payment_request(event: BookingConfirmed):
    from apps.bookings.tasks import request_payment

    request_payment.delay(event.booking)


def enqueue_confirmation_notice(event: BookingConfirmed):
    from apps.bookings.tasks import notify_booking_confirmed

    notify_booking_confirmed.delay(event.booking)


def enqueue_cancellation_notice(event: BookingCancelled):
    from apps.bookings.tasks import notify_booking_cancelled

    notify_booking_cancelled.delay(event.booking, event.reason)


def register_handlers(bus: MessageBus = message_bus):
    bus.register_event_handler(BookingConfirmed, enqueue_payment_request)
    bus.register_event_handler(BookingConfirmed, enqueue_confirmation_notice)
    bus.register_event_handler(BookingCancelled, enqueue_cancellation_notice)

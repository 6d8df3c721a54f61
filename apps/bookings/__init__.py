"""Bookings app package.

This app holds the booking core: the availability evaluator, the booking
ledger that reserves court time without double booking, and the
application layer that creates, cancels and reschedules bookings.
Side effects (payment, notifications) run as Celery tasks after commit.
"""

"""Many players racing for the same court interval."""

from __future__ import annotations

import threading
from datetime import timedelta, timezone as dt_timezone

import pytest
from django.db import connection

from apps.bookings.application.command_handlers import BookingOrchestrator, CreateBookingCommand
from apps.bookings.domain.results import BookingCreated, Rejected, RejectionKind
from apps.bookings.models import Booking as BookingRow
from apps.users.models import User
from conftest import NOW
from shared.domain.value_objects import TimeOfDay

CONTENDERS = 50


@pytest.mark.django_db(transaction=True)
def test_only_one_of_many_overlapping_requests_wins(open_court):
    players = [
        User.objects.create_user(email=f"racer{i}@example.com", password="RacerPass123")
        for i in range(CONTENDERS)
    ]
    on = NOW.date() + timedelta(days=1)
    start_line = threading.Barrier(CONTENDERS)
    results = []
    errors = []
    lock = threading.Lock()

    def attempt(user, start, end):
        try:
            start_line.wait()
            outcome = BookingOrchestrator(tz=dt_timezone.utc).create_booking(
                CreateBookingCommand(
                    court_id=open_court.pk,
                    date=on,
                    start=TimeOfDay.parse(start),
                    end=TimeOfDay.parse(end),
                    user_id=user.pk,
                    now=NOW,
                )
            )
            with lock:
                results.append(outcome)
        except Exception as exc:
            with lock:
                errors.append(exc)
        finally:
            connection.close()

    # Every shape overlaps every other one on 14:30-14:45
    shapes = [("14:00", "15:00"), ("14:30", "15:30"), ("13:45", "14:45"), ("14:15", "14:45")]
    threads = [
        threading.Thread(target=attempt, args=(user, *shapes[i % len(shapes)]))
        for i, user in enumerate(players)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    created = [r for r in results if isinstance(r, BookingCreated)]
    rejected = [r for r in results if isinstance(r, Rejected)]
    assert len(created) == 1
    assert len(rejected) == CONTENDERS - 1
    assert {r.kind for r in rejected} == {RejectionKind.SLOT_TAKEN}
    assert BookingRow.objects.filter(court=open_court, date=on).count() == 1

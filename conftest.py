"""Shared pytest fixtures: users, an approved venue and a priced court."""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from apps.users.models import User
from apps.venues.domain.operating_hours import OperatingWindow
from apps.venues.models import Court, Venue
from apps.venues.services import OperatingHoursStore
from shared.domain.value_objects import TimeOfDay

# Monday 2030-06-03, 10:00 UTC
NOW = datetime(2030, 6, 3, 10, 0, tzinfo=dt_timezone.utc)


def weekly_windows(open_at: str = "08:00", close_at: str = "21:00", days=range(7)) -> list[OperatingWindow]:
    return [
        OperatingWindow(
            day_of_week=day,
            open_time=TimeOfDay.parse(open_at),
            close_time=TimeOfDay.parse(close_at),
        )
        for day in days
    ]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def player(db) -> User:
    return User.objects.create_user(email="player@example.com", password="PlayerPass123")


@pytest.fixture
def other_player(db) -> User:
    return User.objects.create_user(email="other@example.com", password="OtherPass123")


@pytest.fixture
def owner(db) -> User:
    return User.objects.create_user(
        email="owner@example.com",
        password="OwnerPass123",
        role=User.RoleChoices.VENUE_OWNER,
    )


@pytest.fixture
def admin_user(db) -> User:
    return User.objects.create_superuser(email="admin@example.com", password="AdminPass123")


@pytest.fixture
def venue(owner) -> Venue:
    return Venue.objects.create(owner=owner, name="Center Court Club", city="Almaty", is_approved=True)


@pytest.fixture
def court(venue) -> Court:
    return Court.objects.create(venue=venue, name="Court 1", price_per_hour=Decimal("20.00"))


@pytest.fixture
def open_court(court) -> Court:
    """Court open 08:00-21:00 every day."""
    OperatingHoursStore().replace_windows(court, weekly_windows())
    return court

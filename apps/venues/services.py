"""Operating hours store.

Reads and replaces the weekly operating windows of courts and venues and
resolves which windows apply to a court on a given date.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

import structlog
from django.db import transaction  # type: ignore

from shared.domain.errors import FormatError, ValidationError
from shared.domain.value_objects import TimeOfDay, day_of_week

from .domain.operating_hours import (
    OperatingWindow,
    validate_weekly_hours,
    windows_from_legacy_schedule,
)
from .models import Court, OperatingWindow as OperatingWindowRow, Venue

logger = structlog.get_logger(__name__)

# A provider returns None when it has no configuration for the court, and a
# (possibly empty) list of windows when it does.
WindowProvider = Callable[[Court], Optional[List[OperatingWindow]]]


def to_domain(row: OperatingWindowRow) -> OperatingWindow:
    return OperatingWindow(
        day_of_week=row.day_of_week,
        open_time=TimeOfDay.from_time(row.open_time),
        close_time=TimeOfDay.from_time(row.close_time),
        is_open=row.is_open,
        effective_from=row.effective_from,
        effective_to=row.effective_to,
    )


def court_windows(court: Court) -> Optional[List[OperatingWindow]]:
    rows = list(OperatingWindowRow.objects.filter(court=court).order_by("day_of_week"))
    if not rows:
        return None
    return [to_domain(row) for row in rows]


def legacy_schedule_windows(court: Court) -> Optional[List[OperatingWindow]]:
    if court.legacy_schedule is None:
        return None
    try:
        return windows_from_legacy_schedule(court.legacy_schedule)
    except FormatError as exc:
        # A stored blob we cannot read must not open the court
        logger.warning("operating_hours.legacy_schedule_invalid", court_id=court.pk, error=exc.message)
        return []


def venue_windows(court: Court) -> Optional[List[OperatingWindow]]:
    rows = list(OperatingWindowRow.objects.filter(venue_id=court.venue_id).order_by("day_of_week"))
    if not rows:
        return None
    return [to_domain(row) for row in rows]


DEFAULT_PROVIDERS: Sequence[WindowProvider] = (
    court_windows,
    legacy_schedule_windows,
    venue_windows,
)


class OperatingHoursStore:
    """
    Source of truth for when courts can be booked.

    Resolution for a court walks the providers in order and takes the
    first one that has any configuration: court windows, then the court's
    legacy schedule blob, then the venue's weekly hours. A court with no
    configuration anywhere is closed.
    """

    def __init__(self, providers: Sequence[WindowProvider] = DEFAULT_PROVIDERS):
        self.providers = tuple(providers)

    # ------------------------------------------------------------------ writes
    def replace_windows(
        self,
        target: Court | Venue,
        windows: Iterable[OperatingWindow],
        effective_from: date | None = None,
        effective_to: date | None = None,
    ) -> List[OperatingWindow]:
        """Replace every window of ``target`` with ``windows``.

        The old set is deleted and the new set inserted in one transaction.
        ``effective_from`` / ``effective_to`` apply to windows that do not
        carry their own range.
        """
        if effective_from and effective_to and effective_from > effective_to:
            raise ValidationError("effective_from must not be after effective_to.", field="effective_from")

        windows = validate_weekly_hours(
            _with_default_range(window, effective_from, effective_to) for window in windows
        )
        owner = _owner_kwargs(target)

        with transaction.atomic():
            OperatingWindowRow.objects.filter(**owner).delete()
            OperatingWindowRow.objects.bulk_create(
                [
                    OperatingWindowRow(
                        day_of_week=window.day_of_week,
                        open_time=window.open_time.to_time(),
                        close_time=window.close_time.to_time(),
                        is_open=window.is_open,
                        effective_from=window.effective_from,
                        effective_to=window.effective_to,
                        **owner,
                    )
                    for window in windows
                ]
            )

        logger.info(
            "operating_hours.replaced",
            target=type(target).__name__.lower(),
            target_id=target.pk,
            windows=len(windows),
        )
        return windows

    # ------------------------------------------------------------------- reads
    def list_windows(self, target: Court | Venue) -> List[OperatingWindow]:
        rows = OperatingWindowRow.objects.filter(**_owner_kwargs(target)).order_by("day_of_week")
        return [to_domain(row) for row in rows]

    def resolve(self, court: Court) -> List[OperatingWindow]:
        """Weekly windows in force for ``court`` after the fallback chain."""
        for provider in self.providers:
            windows = provider(court)
            if windows is not None:
                return windows
        return []

    def windows_for_weekday(self, court: Court, on: date) -> List[OperatingWindow]:
        """Windows for the weekday of ``on``, regardless of effective range."""
        weekday = day_of_week(on)
        return [window for window in self.resolve(court) if window.day_of_week == weekday]

    def get_windows_for(self, court: Court, on: date) -> List[OperatingWindow]:
        """Windows for the weekday of ``on`` whose effective range contains it."""
        return [window for window in self.windows_for_weekday(court, on) if window.in_effect_on(on)]


def _with_default_range(window: OperatingWindow, effective_from, effective_to) -> OperatingWindow:
    if window.effective_from is not None or window.effective_to is not None:
        return window
    if effective_from is None and effective_to is None:
        return window
    return OperatingWindow(
        day_of_week=window.day_of_week,
        open_time=window.open_time,
        close_time=window.close_time,
        is_open=window.is_open,
        effective_from=effective_from,
        effective_to=effective_to,
    )


def _owner_kwargs(target: Court | Venue) -> dict:
    if isinstance(target, Court):
        return {"court": target}
    if isinstance(target, Venue):
        return {"venue": target}
    raise TypeError(f"Operating hours belong to a Court or a Venue, not {type(target).__name__}")

"""FilterSet definitions for booking lists."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters for the caller's booking list."""

    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    date = django_filters.DateFilter(field_name="date")
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    court = django_filters.NumberFilter(field_name="court_id")
    venue = django_filters.NumberFilter(field_name="venue_id")

    class Meta:
        model = Booking
        fields = ["status", "date", "court", "venue"]

"""API views for venues, courts and operating hours."""

from __future__ import annotations

from datetime import date

from django.utils import timezone  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.application.command_handlers import (
    BookingOrchestrator,
    CourtSlotsQuery,
    GetOperatingHoursQuery,
    ListCourtBookingsQuery,
    SetOperatingHoursCommand,
    VenueBookingsQuery,
    VenueSlotsQuery,
)
from apps.bookings.serializers import BookingEntitySerializer
from apps.users.api.permissions import IsVenueOwnerOrAdmin, IsVenueOwnerOrAdminOrReadOnly
from shared.domain.errors import ValidationError

from .models import Court, Venue
from .serializers import (
    CourtSerializer,
    CourtSlotsSerializer,
    OperatingHoursSerializer,
    OperatingWindowSerializer,
    SlotSerializer,
    VenueSerializer,
)


def _query_date(request, name: str = "date", required: bool = True) -> date | None:
    raw = request.query_params.get(name)
    if not raw:
        if required:
            raise ValidationError(f"Query parameter '{name}' is required (YYYY-MM-DD).", field=name)
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid date {raw!r}, expected YYYY-MM-DD.", field=name) from None


class OperatingHoursMixin:
    """GET lists the target's windows, PUT replaces all of them."""

    target_type: str = ""

    def _operating_hours(self, request, pk):  # type: ignore
        orchestrator = BookingOrchestrator()
        if request.method == "PUT":
            serializer = OperatingHoursSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            windows = orchestrator.set_operating_hours(
                SetOperatingHoursCommand(
                    target_type=self.target_type,
                    target_id=int(pk),
                    windows=serializer.windows_as_domain(),
                    user_id=request.user.pk,
                    effective_from=serializer.validated_data["effective_from"],
                    effective_to=serializer.validated_data["effective_to"],
                )
            )
        else:
            windows = orchestrator.get_operating_hours(
                GetOperatingHoursQuery(target_type=self.target_type, target_id=int(pk))
            )
        return Response({"windows": OperatingWindowSerializer(windows, many=True).data}, status=status.HTTP_200_OK)


class VenueViewSet(OperatingHoursMixin, viewsets.ReadOnlyModelViewSet):
    """Approved, active venues with their courts."""

    queryset = Venue.objects.filter(is_approved=True, is_active=True).prefetch_related("courts")
    serializer_class = VenueSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"
    target_type = "venue"

    @action(
        detail=True,
        methods=["get", "put"],
        url_path="operating-hours",
        permission_classes=[IsVenueOwnerOrAdminOrReadOnly],
    )
    def operating_hours(self, request, pk=None):  # type: ignore
        return self._operating_hours(request, pk)

    @action(detail=True, methods=["get"])
    def slots(self, request, pk=None):  # type: ignore
        """Slot grid of every active court; ?sport_type= narrows to one sport."""
        on = _query_date(request)
        courts = BookingOrchestrator().venue_slots(
            VenueSlotsQuery(
                venue_id=int(pk),
                date=on,
                now=timezone.now(),
                sport_type=request.query_params.get("sport_type") or None,
            )
        )
        return Response(
            {
                "venue_id": int(pk),
                "date": on.isoformat(),
                "courts": CourtSlotsSerializer(courts, many=True).data,
            }
        )

    @action(detail=True, methods=["get"], permission_classes=[IsVenueOwnerOrAdmin])
    def bookings(self, request, pk=None):  # type: ignore
        """Owner view: bookings grouped by date, next 30 days by default."""
        orchestrator = BookingOrchestrator()
        statuses = request.query_params.getlist("status")
        days = orchestrator.venue_bookings(
            VenueBookingsQuery(
                venue_id=int(pk),
                user_id=request.user.pk,
                today=orchestrator.today(timezone.now()),
                date=_query_date(request, required=False),
                start_date=_query_date(request, "start_date", required=False),
                end_date=_query_date(request, "end_date", required=False),
                statuses=statuses,
            )
        )
        return Response(
            {
                "venue_id": int(pk),
                "days": [
                    {
                        "date": day.day.isoformat(),
                        "total_amount": f"{day.total_amount:.2f}",
                        "bookings": BookingEntitySerializer(day.bookings, many=True).data,
                    }
                    for day in days
                ],
            }
        )


class CourtViewSet(OperatingHoursMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Court.objects.select_related("venue").filter(is_active=True)
    serializer_class = CourtSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"
    target_type = "court"

    @action(
        detail=True,
        methods=["get", "put"],
        url_path="operating-hours",
        permission_classes=[IsVenueOwnerOrAdminOrReadOnly],
    )
    def operating_hours(self, request, pk=None):  # type: ignore
        return self._operating_hours(request, pk)

    @action(detail=True, methods=["get"])
    def bookings(self, request, pk=None):  # type: ignore
        bookings = BookingOrchestrator().list_court_bookings(
            ListCourtBookingsQuery(court_id=int(pk), date=_query_date(request))
        )
        return Response(
            [
                {"id": b.id, "start_time": str(b.interval.start), "end_time": str(b.interval.end), "status": b.status.value}
                for b in bookings
            ]
        )

    @action(detail=True, methods=["get"])
    def slots(self, request, pk=None):  # type: ignore
        on = _query_date(request)
        slots = BookingOrchestrator().court_slots(CourtSlotsQuery(court_id=int(pk), date=on, now=timezone.now()))
        return Response(
            {
                "court_id": int(pk),
                "date": on.isoformat(),
                "slots": SlotSerializer(slots, many=True).data,
            }
        )

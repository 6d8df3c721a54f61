"""API views for the booking domain."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.api.permissions import has_elevated_role

from .api_errors import rejection_response
from .application.command_handlers import (
    BookingOrchestrator,
    CancelBookingCommand,
    CheckAvailabilityQuery,
    CreateBookingCommand,
    RescheduleBookingCommand,
)
from .domain.results import Rejected
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingEntitySerializer,
    BookingRequestSerializer,
    BookingSerializer,
    CancelSerializer,
    ConflictSerializer,
    RescheduleSerializer,
)


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Create, preview, cancel and reschedule court bookings."""

    queryset = Booking.objects.select_related("court", "venue", "user").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = BookingFilterSet
    lookup_value_regex = r"\d+"

    def get_orchestrator(self) -> BookingOrchestrator:
        return BookingOrchestrator()

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if has_elevated_role(user):
            return qs
        if hasattr(user, "is_venue_owner") and user.is_venue_owner():
            return qs.filter(Q(user=user) | Q(venue__owner=user))
        return qs.filter(user=user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = self.get_orchestrator().create_booking(
            CreateBookingCommand(
                court_id=data["court_id"],
                date=data["date"],
                start=data["start_time"],
                end=data["end_time"],
                user_id=request.user.pk,
                now=timezone.now(),
                notes=data["notes"],
                idempotency_key=data["idempotency_key"],
            )
        )
        if isinstance(result, Rejected):
            return rejection_response(result)

        code = status.HTTP_200_OK if result.replayed else status.HTTP_201_CREATED
        return Response(BookingEntitySerializer(result.booking).data, status=code)

    @action(detail=False, methods=["post"], url_path="check-availability")
    def check_availability(self, request):  # type: ignore
        serializer = BookingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        report = self.get_orchestrator().check_availability(
            CheckAvailabilityQuery(
                court_id=data["court_id"],
                date=data["date"],
                start=data["start_time"],
                end=data["end_time"],
                now=timezone.now(),
            )
        )
        existing = ConflictSerializer(report.existing_bookings, many=True).data
        if isinstance(report.outcome, Rejected):
            return rejection_response(report.outcome, available=False, existing_bookings=existing)

        return Response(
            {
                "available": True,
                "duration_minutes": report.duration_minutes,
                "total_amount": str(report.total_amount),
                "existing_bookings": existing,
            }
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.get_orchestrator().cancel_booking(
            CancelBookingCommand(
                booking_id=int(pk),
                user_id=request.user.pk,
                reason=serializer.validated_data["reason"],
            )
        )
        body = BookingEntitySerializer(result.booking).data
        body["already_cancelled"] = result.already_cancelled
        return Response(body, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def reschedule(self, request, pk=None):  # type: ignore
        serializer = RescheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = self.get_orchestrator().reschedule(
            RescheduleBookingCommand(
                booking_id=int(pk),
                user_id=request.user.pk,
                date=data["date"],
                start=data["start_time"],
                end=data["end_time"],
                now=timezone.now(),
            )
        )
        if isinstance(result, Rejected):
            return rejection_response(result)
        return Response(BookingEntitySerializer(result.booking).data, status=status.HTTP_201_CREATED)

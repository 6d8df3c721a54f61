"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.errors import FormatError
from shared.domain.value_objects import TimeOfDay

from .models import Booking


class TimeOfDayField(serializers.Field):
    """``HH:MM`` string <-> TimeOfDay."""

    default_error_messages = {
        "invalid": "Time must be in HH:MM format.",
    }

    def to_internal_value(self, data):  # type: ignore
        try:
            return TimeOfDay.parse(data)
        except FormatError:
            self.fail("invalid")

    def to_representation(self, value):  # type: ignore
        if isinstance(value, TimeOfDay):
            return str(value)
        return value.strftime("%H:%M")


class BookingRequestSerializer(serializers.Serializer):
    """Body of create booking and check availability requests."""

    court_id = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    start_time = TimeOfDayField()
    end_time = TimeOfDayField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    idempotency_key = serializers.CharField(required=False, allow_null=True, max_length=64, default=None)


class RescheduleSerializer(serializers.Serializer):
    date = serializers.DateField()
    start_time = TimeOfDayField()
    end_time = TimeOfDayField()


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class BookingEntitySerializer(serializers.Serializer):
    """Read-only view of a Booking aggregate."""

    id = serializers.IntegerField()
    court_id = serializers.IntegerField()
    venue_id = serializers.IntegerField()
    user_id = serializers.IntegerField()
    date = serializers.DateField()
    start_time = TimeOfDayField(source="interval.start")
    end_time = TimeOfDayField(source="interval.end")
    duration_minutes = serializers.IntegerField()
    status = serializers.CharField(source="status.value")
    payment_status = serializers.CharField(source="payment_status.value")
    total_amount = serializers.CharField()
    notes = serializers.CharField()
    rescheduled_from_id = serializers.IntegerField(allow_null=True)
    confirmed_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)
    cancellation_reason = serializers.CharField()


class BookingSerializer(serializers.ModelSerializer):
    """Booking row as listed to its player, venue owner or admin."""

    court_id = serializers.ReadOnlyField(source="court.id")
    court_name = serializers.ReadOnlyField(source="court.name")
    venue_id = serializers.ReadOnlyField(source="venue.id")
    venue_name = serializers.ReadOnlyField(source="venue.name")
    user_id = serializers.ReadOnlyField(source="user.id")
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")

    class Meta:
        model = Booking
        fields = [
            "id",
            "court_id",
            "court_name",
            "venue_id",
            "venue_name",
            "user_id",
            "date",
            "start_time",
            "end_time",
            "status",
            "payment_status",
            "total_amount",
            "notes",
            "rescheduled_from",
            "confirmed_at",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
        ]
        read_only_fields = fields


class ConflictSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    start_time = TimeOfDayField(source="interval.start")
    end_time = TimeOfDayField(source="interval.end")

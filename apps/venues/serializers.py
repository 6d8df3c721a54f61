"""Serializers for venues, courts and operating hours."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.serializers import TimeOfDayField

from .domain.operating_hours import OperatingWindow
from .models import Court, Venue


class CourtSerializer(serializers.ModelSerializer):
    class Meta:
        model = Court
        fields = ["id", "venue", "name", "sport_type", "price_per_hour", "is_active"]
        read_only_fields = fields


class VenueSerializer(serializers.ModelSerializer):
    courts = CourtSerializer(many=True, read_only=True)

    class Meta:
        model = Venue
        fields = ["id", "name", "address", "city", "phone", "owner", "courts"]
        read_only_fields = fields


class OperatingWindowSerializer(serializers.Serializer):
    day_of_week = serializers.IntegerField(min_value=0, max_value=6)
    open_time = TimeOfDayField()
    close_time = TimeOfDayField()
    is_open = serializers.BooleanField(required=False, default=True)
    effective_from = serializers.DateField(required=False, allow_null=True, default=None)
    effective_to = serializers.DateField(required=False, allow_null=True, default=None)


class OperatingHoursSerializer(serializers.Serializer):
    """Full weekly hours; PUT replaces every existing window."""

    windows = OperatingWindowSerializer(many=True)
    effective_from = serializers.DateField(required=False, allow_null=True, default=None)
    effective_to = serializers.DateField(required=False, allow_null=True, default=None)

    def validate_windows(self, value):  # type: ignore
        days = [window["day_of_week"] for window in value]
        if len(days) != len(set(days)):
            raise serializers.ValidationError("Each day of the week may appear only once.")
        return value

    def windows_as_domain(self) -> list[OperatingWindow]:
        return [OperatingWindow(**window) for window in self.validated_data["windows"]]


class SlotSerializer(serializers.Serializer):
    start_time = TimeOfDayField(source="interval.start")
    end_time = TimeOfDayField(source="interval.end")
    status = serializers.CharField()
    is_available = serializers.BooleanField()


class CourtSlotsSerializer(serializers.Serializer):
    court_id = serializers.IntegerField()
    court_name = serializers.CharField()
    sport_type = serializers.CharField()
    price_per_hour = serializers.CharField()
    slots = SlotSerializer(many=True)

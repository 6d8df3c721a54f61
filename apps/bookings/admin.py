"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "court",
        "venue",
        "user",
        "date",
        "start_time",
        "end_time",
        "status",
        "payment_status",
        "total_amount",
        "created_at",
    )
    list_filter = ("status", "payment_status", "date")
    search_fields = ("court__name", "venue__name", "user__email")
    readonly_fields = (
        "created_at",
        "updated_at",
        "confirmed_at",
        "cancelled_at",
        "total_amount",
        "rescheduled_from",
        "idempotency_key",
    )
    date_hierarchy = "date"

    def has_add_permission(self, request):  # type: ignore
        # Court time is reserved through the API so the overlap check runs under lock
        return False

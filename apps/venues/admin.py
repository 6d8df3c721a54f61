"""Admin registrations for venues, courts and operating hours."""

from __future__ import annotations

from django.contrib import admin

from .models import Court, OperatingWindow, Venue


class CourtInline(admin.TabularInline):
    model = Court
    extra = 0
    fields = ("name", "sport_type", "price_per_hour", "is_active")


class VenueWindowInline(admin.TabularInline):
    model = OperatingWindow
    fk_name = "venue"
    extra = 0
    fields = ("day_of_week", "open_time", "close_time", "is_open", "effective_from", "effective_to")


class CourtWindowInline(VenueWindowInline):
    fk_name = "court"


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "owner", "is_approved", "is_active", "created_at")
    list_filter = ("is_approved", "is_active", "city")
    search_fields = ("name", "city", "address")
    readonly_fields = ("created_at", "updated_at")
    inlines = [CourtInline, VenueWindowInline]


@admin.register(Court)
class CourtAdmin(admin.ModelAdmin):
    list_display = ("name", "venue", "sport_type", "price_per_hour", "is_active")
    list_filter = ("sport_type", "is_active")
    search_fields = ("name", "venue__name")
    readonly_fields = ("created_at", "updated_at")
    inlines = [CourtWindowInline]

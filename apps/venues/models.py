"""Venue, court and operating hours models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Venue(models.Model):
    """Sports facility operated by a venue owner."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="venues",
    )
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    is_approved = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Venue")
        verbose_name_plural = _("Venues")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    @property
    def is_bookable(self) -> bool:
        return self.is_approved and self.is_active


class Court(models.Model):
    """Bookable playing surface inside a venue."""

    class SportType(models.TextChoices):
        TENNIS = "tennis", _("Tennis")
        PADEL = "padel", _("Padel")
        BADMINTON = "badminton", _("Badminton")
        SQUASH = "squash", _("Squash")
        FUTSAL = "futsal", _("Futsal")
        BASKETBALL = "basketball", _("Basketball")
        OTHER = "other", _("Other")

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="courts")
    name = models.CharField(max_length=120)
    sport_type = models.CharField(
        max_length=20,
        choices=SportType.choices,
        default=SportType.TENNIS,
    )
    price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    is_active = models.BooleanField(default=True)
    legacy_schedule = models.JSONField(
        null=True,
        blank=True,
        help_text=_(
            "Older availability format: daysOfWeek, startTime, endTime, "
            "startDate, endDate. Used when the court has no operating windows."
        ),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Court")
        verbose_name_plural = _("Courts")
        ordering = ["venue_id", "name"]

    def __str__(self) -> str:
        return f"{self.name} @ {self.venue_id}"

    @property
    def is_bookable(self) -> bool:
        return self.is_active and self.venue.is_bookable


class OperatingWindow(models.Model):
    """Weekly opening window of a court or of a whole venue.

    day_of_week is Sunday-based: 0 = Sunday ... 6 = Saturday.
    """

    court = models.ForeignKey(
        Court,
        on_delete=models.CASCADE,
        related_name="operating_windows",
        null=True,
        blank=True,
    )
    venue = models.ForeignKey(
        Venue,
        on_delete=models.CASCADE,
        related_name="operating_windows",
        null=True,
        blank=True,
    )
    day_of_week = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(6)],
    )
    open_time = models.TimeField()
    close_time = models.TimeField()
    is_open = models.BooleanField(default=True)
    effective_from = models.DateField(null=True, blank=True)
    effective_to = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Operating window")
        verbose_name_plural = _("Operating windows")
        ordering = ["day_of_week"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(court__isnull=False, venue__isnull=True)
                    | models.Q(court__isnull=True, venue__isnull=False)
                ),
                name="operating_window_single_owner",
            ),
            models.CheckConstraint(
                condition=models.Q(day_of_week__gte=0, day_of_week__lte=6),
                name="operating_window_valid_weekday",
            ),
            models.UniqueConstraint(
                fields=["court", "day_of_week"],
                condition=models.Q(court__isnull=False),
                name="operating_window_unique_court_day",
            ),
            models.UniqueConstraint(
                fields=["venue", "day_of_week"],
                condition=models.Q(venue__isnull=False),
                name="operating_window_unique_venue_day",
            ),
        ]

    def __str__(self) -> str:
        owner = f"court {self.court_id}" if self.court_id else f"venue {self.venue_id}"
        return f"{owner} day {self.day_of_week}: {self.open_time:%H:%M}-{self.close_time:%H:%M}"

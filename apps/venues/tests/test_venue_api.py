"""API tests for venues, courts, operating hours and slots."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User
from apps.venues.models import Court, OperatingWindow, Venue


def _week(open_at: str = "08:00", close_at: str = "21:00", days=range(7)) -> list[dict]:
    return [{"day_of_week": day, "open_time": open_at, "close_time": close_at} for day in days]


class VenueAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.VENUE_OWNER,
        )
        self.player = User.objects.create_user(email="player@example.com", password="PlayerPass123")
        self.venue = Venue.objects.create(owner=self.owner, name="Center Court Club", is_approved=True)
        self.court = Court.objects.create(venue=self.venue, name="Court 1", price_per_hour=Decimal("20.00"))
        self.court_hours_url = reverse("court-operating-hours", args=[self.court.id])
        self.venue_hours_url = reverse("venue-operating-hours", args=[self.venue.id])

    def test_only_approved_venues_are_listed(self) -> None:
        Venue.objects.create(owner=self.owner, name="Pending Club")
        self.client.force_authenticate(self.player)

        response = self.client.get(reverse("venue-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([v["name"] for v in response.data], ["Center Court Club"])
        self.assertEqual(response.data[0]["courts"][0]["name"], "Court 1")

    def test_owner_replaces_court_hours(self) -> None:
        self.client.force_authenticate(self.owner)

        self.client.put(self.court_hours_url, {"windows": _week()}, format="json")
        response = self.client.put(self.court_hours_url, {"windows": _week("10:00", "18:00", days=[1])}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(len(response.data["windows"]), 1)
        self.assertEqual(response.data["windows"][0]["open_time"], "10:00")
        self.assertEqual(OperatingWindow.objects.filter(court=self.court).count(), 1)

    def test_player_reads_but_cannot_write_hours(self) -> None:
        self.client.force_authenticate(self.player)

        read = self.client.get(self.court_hours_url)
        write = self.client.put(self.court_hours_url, {"windows": _week()}, format="json")

        self.assertEqual(read.status_code, status.HTTP_200_OK)
        self.assertEqual(read.data["windows"], [])
        self.assertEqual(write.status_code, status.HTTP_403_FORBIDDEN)

    def test_other_owner_cannot_write_hours(self) -> None:
        stranger = User.objects.create_user(
            email="stranger@example.com",
            password="StrangerPass123",
            role=User.RoleChoices.VENUE_OWNER,
        )
        self.client.force_authenticate(stranger)

        response = self.client.put(self.venue_hours_url, {"windows": _week()}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "PERMISSION_DENIED")

    def test_duplicate_days_are_rejected(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.put(self.venue_hours_url, {"windows": _week(days=[1, 1])}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("windows", response.data)

    def test_close_before_open_is_rejected(self) -> None:
        self.client.force_authenticate(self.owner)

        response = self.client.put(self.venue_hours_url, {"windows": _week("21:00", "08:00")}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
        self.assertEqual(response.data["field"], "close_time")

    def test_slots_follow_venue_hours(self) -> None:
        self.client.force_authenticate(self.owner)
        self.client.put(self.venue_hours_url, {"windows": _week("08:00", "12:00")}, format="json")
        day = timezone.localdate() + timedelta(days=3)

        response = self.client.get(reverse("court-slots", args=[self.court.id]), {"date": str(day)})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["date"], str(day))
        self.assertEqual([s["start_time"] for s in response.data["slots"]], ["08:00", "09:00", "10:00", "11:00"])
        self.assertTrue(all(s["is_available"] for s in response.data["slots"]))

    def test_slots_require_date(self) -> None:
        self.client.force_authenticate(self.player)

        response = self.client.get(reverse("court-slots", args=[self.court.id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "date")

    def test_venue_slots_list_each_court(self) -> None:
        padel = Court.objects.create(
            venue=self.venue, name="Padel 1", sport_type=Court.SportType.PADEL, price_per_hour=Decimal("30.00")
        )
        self.client.force_authenticate(self.owner)
        self.client.put(self.venue_hours_url, {"windows": _week("08:00", "10:00")}, format="json")
        day = timezone.localdate() + timedelta(days=3)
        url = reverse("venue-slots", args=[self.venue.id])

        everything = self.client.get(url, {"date": str(day)})
        only_padel = self.client.get(url, {"date": str(day), "sport_type": "padel"})

        self.assertEqual(everything.status_code, status.HTTP_200_OK, everything.data)
        self.assertEqual([c["court_id"] for c in everything.data["courts"]], [self.court.id, padel.id])
        self.assertEqual([s["start_time"] for s in everything.data["courts"][0]["slots"]], ["08:00", "09:00"])
        self.assertEqual(only_padel.status_code, status.HTTP_200_OK, only_padel.data)
        self.assertEqual([c["court_id"] for c in only_padel.data["courts"]], [padel.id])
        self.assertEqual(only_padel.data["courts"][0]["sport_type"], "padel")
        self.assertEqual(only_padel.data["courts"][0]["price_per_hour"], "30.00")

    def test_venue_slots_reject_unknown_sport(self) -> None:
        self.client.force_authenticate(self.player)

        response = self.client.get(
            reverse("venue-slots", args=[self.venue.id]),
            {"date": str(timezone.localdate() + timedelta(days=3)), "sport_type": "curling"},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["field"], "sport_type")

    def test_court_bookings_and_owner_view(self) -> None:
        self.client.force_authenticate(self.owner)
        self.client.put(self.venue_hours_url, {"windows": _week()}, format="json")
        day = timezone.localdate() + timedelta(days=3)
        self.client.force_authenticate(self.player)
        self.client.post(
            reverse("booking-list"),
            {"court_id": self.court.id, "date": str(day), "start_time": "09:00", "end_time": "11:00"},
            format="json",
        )

        listed = self.client.get(reverse("court-bookings", args=[self.court.id]), {"date": str(day)})
        denied = self.client.get(reverse("venue-bookings", args=[self.venue.id]))
        self.client.force_authenticate(self.owner)
        owner_view = self.client.get(reverse("venue-bookings", args=[self.venue.id]))

        self.assertEqual(listed.status_code, status.HTTP_200_OK)
        self.assertEqual(listed.data[0]["start_time"], "09:00")
        self.assertEqual(listed.data[0]["status"], "confirmed")
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(owner_view.status_code, status.HTTP_200_OK)
        self.assertEqual(owner_view.data["days"][0]["date"], str(day))
        self.assertEqual(owner_view.data["days"][0]["total_amount"], "40.00")

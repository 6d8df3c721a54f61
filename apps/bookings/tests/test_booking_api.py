"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.users.models import User
from apps.venues.models import Court, Venue
from apps.venues.services import OperatingHoursStore
from conftest import weekly_windows


class BookingAPITests(APITestCase):
    """Covers creation, conflicts, previews, cancellation and rescheduling."""

    def setUp(self) -> None:
        self.player = User.objects.create_user(email="player@example.com", password="PlayerPass123")
        self.other = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.VENUE_OWNER,
        )
        self.venue = Venue.objects.create(owner=self.owner, name="Center Court Club", is_approved=True)
        self.court = Court.objects.create(venue=self.venue, name="Court 1", price_per_hour=Decimal("20.00"))
        OperatingHoursStore().replace_windows(self.court, weekly_windows())

        self.day = timezone.localdate() + timedelta(days=2)
        self.client.force_authenticate(self.player)
        self.list_url = reverse("booking-list")

    def _payload(self, start: str, end: str, **extra) -> dict:
        return {
            "court_id": self.court.id,
            "date": str(self.day),
            "start_time": start,
            "end_time": end,
            **extra,
        }

    def _create(self, start: str, end: str, **extra):
        return self.client.post(self.list_url, self._payload(start, end, **extra), format="json")

    def test_player_can_create_booking(self) -> None:
        response = self._create("14:00", "15:00")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["total_amount"], "20.00")
        self.assertEqual(response.data["status"], "confirmed")
        self.assertEqual(response.data["start_time"], "14:00")
        self.assertEqual(response.data["duration_minutes"], 60)
        booking = Booking.objects.get()
        self.assertEqual(booking.user, self.player)
        self.assertEqual(booking.venue, self.venue)

    def test_overlap_is_a_conflict(self) -> None:
        self._create("14:00", "15:00")
        self.client.force_authenticate(self.other)

        response = self._create("14:30", "15:30")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["kind"], "SLOT_TAKEN")
        self.assertEqual(response.data["category"], "conflict")
        self.assertEqual(len(response.data["conflicts"]), 1)
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_is_allowed(self) -> None:
        self._create("14:00", "15:00")

        response = self._create("15:00", "16:00")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_outside_hours_is_bad_request(self) -> None:
        response = self._create("20:30", "21:30")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["kind"], "OUTSIDE_OPERATING_HOURS")
        self.assertEqual(response.data["boundary"], "21:00")

    def test_malformed_time_is_rejected(self) -> None:
        response = self._create("2pm", "15:00")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("start_time", response.data)

    def test_unknown_court_is_not_found(self) -> None:
        response = self.client.post(
            self.list_url, {**self._payload("14:00", "15:00"), "court_id": 9999}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "NOT_FOUND")

    def test_repeated_idempotency_key_returns_original(self) -> None:
        first = self._create("14:00", "15:00", idempotency_key="req-1")

        second = self._create("14:00", "15:00", idempotency_key="req-1")

        self.assertEqual(second.status_code, status.HTTP_200_OK, second.data)
        self.assertEqual(second.data["id"], first.data["id"])

    def test_anonymous_request_is_rejected(self) -> None:
        self.client.force_authenticate(None)

        response = self._create("14:00", "15:00")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_check_availability(self) -> None:
        url = reverse("booking-check-availability")

        free = self.client.post(url, self._payload("14:00", "16:00"), format="json")
        self._create("14:00", "15:00")
        taken = self.client.post(url, self._payload("14:00", "16:00"), format="json")

        self.assertEqual(free.status_code, status.HTTP_200_OK, free.data)
        self.assertTrue(free.data["available"])
        self.assertEqual(free.data["duration_minutes"], 120)
        self.assertEqual(free.data["total_amount"], "40.00")
        self.assertEqual(taken.status_code, status.HTTP_409_CONFLICT, taken.data)
        self.assertFalse(taken.data["available"])
        self.assertEqual(taken.data["existing_bookings"][0]["start_time"], "14:00")

    def test_check_availability_past_date(self) -> None:
        payload = {**self._payload("14:00", "15:00"), "date": str(timezone.localdate() - timedelta(days=1))}

        response = self.client.post(reverse("booking-check-availability"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Cannot book for past dates.")

    def test_cancel_twice(self) -> None:
        created = self._create("14:00", "15:00")
        url = reverse("booking-cancel", args=[created.data["id"]])

        first = self.client.post(url, {"reason": "rain"}, format="json")
        second = self.client.post(url, {}, format="json")

        self.assertEqual(first.status_code, status.HTTP_200_OK, first.data)
        self.assertEqual(first.data["status"], "cancelled")
        self.assertFalse(first.data["already_cancelled"])
        self.assertTrue(second.data["already_cancelled"])
        self.assertEqual(second.data["cancellation_reason"], "rain")

    def test_stranger_cannot_cancel(self) -> None:
        created = self._create("14:00", "15:00")
        self.client.force_authenticate(self.other)

        response = self.client.post(reverse("booking-cancel", args=[created.data["id"]]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_cancel_completed_booking_conflicts(self) -> None:
        created = self._create("14:00", "15:00")
        Booking.objects.filter(pk=created.data["id"]).update(status=Booking.Status.COMPLETED)

        response = self.client.post(reverse("booking-cancel", args=[created.data["id"]]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "INVALID_TRANSITION")

    def test_reschedule(self) -> None:
        created = self._create("14:00", "15:00")

        response = self.client.post(
            reverse("booking-reschedule", args=[created.data["id"]]),
            {"date": str(self.day), "start_time": "14:30", "end_time": "15:30"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["rescheduled_from_id"], created.data["id"])
        self.assertEqual(Booking.objects.get(pk=created.data["id"]).status, Booking.Status.CANCELLED)

    def test_list_is_scoped_to_the_caller(self) -> None:
        self._create("14:00", "15:00")
        self.client.force_authenticate(self.other)
        self._create("16:00", "17:00")

        mine = self.client.get(self.list_url)
        self.client.force_authenticate(self.owner)
        owners = self.client.get(self.list_url, {"status": "confirmed"})

        self.assertEqual(len(mine.data), 1)
        self.assertEqual(mine.data[0]["start_time"], "16:00")
        self.assertEqual(len(owners.data), 2)

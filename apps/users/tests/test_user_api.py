"""API tests for the user directory, host onboarding and dashboards."""

from __future__ import annotations

from datetime import date, timedelta

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.reviews.models import Review
from apps.users.models import User


class UserAPITests(APITestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(
            email="guest@example.com", password="GuestPass123", first_name="Asha", last_name="Rao"
        )
        self.host = User.objects.create_user(
            email="host@example.com", password="HostPass123", first_name="Vikram", is_host=True
        )
        self.staff = User.objects.create_user(email="staff@example.com", password="StaffPass123", is_staff=True)
        self.property = Property.objects.create(
            host=self.host,
            title="Sea view flat",
            description="Two rooms by the sea.",
            address="3 Beach Road",
            city="Chennai",
            country="India",
            base_price=12000,
            currency="INR",
            max_guests=3,
        )

    def _booking(self, **overrides) -> Booking:
        data = {
            "property": self.property,
            "guest": self.guest,
            "host": self.host,
            "check_in": date(2024, 6, 1),
            "check_out": date(2024, 6, 4),
            "status": Booking.Status.COMPLETED,
            "payment_status": Booking.PaymentStatus.PAID,
            "nightly_rate": 12000,
            "nights": 3,
            "total_price": 36000,
            "currency": "INR",
        }
        data.update(overrides)
        return Booking.objects.create(**data)

    def test_create_registers_account_without_authentication(self) -> None:
        response = self.client.post(
            reverse("user-list"),
            {"email": "new@example.com", "password": "NewPass1234", "password_confirm": "NewPass1234"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["email"], "new@example.com")
        self.assertNotIn("password", response.data)

    def test_list_requires_authentication_and_filters(self) -> None:
        response = self.client.get(reverse("user-list"))
        self.assertIn(response.status_code, {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN})

        self.client.force_authenticate(self.guest)
        response = self.client.get(reverse("user-list"), {"is_host": "true"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data["results"]], [self.host.id])

        response = self.client.get(reverse("user-list"), {"search": "asha"})
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["email"], "guest@example.com")

    def test_user_updates_only_own_profile(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.patch(reverse("user-detail", args=[self.guest.id]), {"bio": "Traveller"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["bio"], "Traveller")

        response = self.client.patch(reverse("user-detail", args=[self.host.id]), {"bio": "Hacked"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_rating_and_host_flags_are_read_only(self) -> None:
        self.client.force_authenticate(self.guest)

        self.client.patch(
            reverse("user-detail", args=[self.guest.id]),
            {"rating": "5.00", "is_verified": True, "is_host": True},
            format="json",
        )

        self.guest.refresh_from_db()
        self.assertFalse(self.guest.is_verified)
        self.assertFalse(self.guest.is_host)

    def test_delete_deactivates_account(self) -> None:
        self.guest.verify()
        self.client.force_authenticate(self.staff)

        response = self.client.delete(reverse("user-detail", args=[self.guest.id]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.guest.refresh_from_db()
        self.assertFalse(self.guest.is_active)
        self.assertFalse(self.guest.is_verified)

    def test_only_staff_can_verify(self) -> None:
        url = reverse("user-verify", args=[self.guest.id])

        self.client.force_authenticate(self.guest)
        self.assertEqual(self.client.post(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.staff)
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_verified"])

    def test_become_host(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(reverse("user-become-host", args=[self.guest.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_host"])
        self.assertIsNotNone(response.data["host_since"])

    def test_stats_for_host_and_guest(self) -> None:
        booking = self._booking()
        self._booking(
            check_in=date.today() + timedelta(days=5),
            check_out=date.today() + timedelta(days=7),
            status=Booking.Status.CONFIRMED,
            payment_status=Booking.PaymentStatus.PENDING,
        )
        Review.objects.create(
            booking=booking,
            property=self.property,
            reviewer=self.guest,
            type=Review.Type.GUEST_TO_HOST,
            rating=5,
            comment="Wonderful",
        )

        self.client.force_authenticate(self.host)
        response = self.client.get(reverse("user-stats", args=[self.host.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["host_stats"]["total_properties"], 1)
        self.assertEqual(response.data["host_stats"]["total_bookings"], 2)
        self.assertEqual(response.data["host_stats"]["total_revenue"], 36000)
        self.assertEqual(response.data["host_stats"]["total_reviews"], 1)

        self.client.force_authenticate(self.guest)
        response = self.client.get(reverse("user-stats", args=[self.guest.id]))
        self.assertNotIn("host_stats", response.data)
        self.assertEqual(response.data["guest_stats"]["total_bookings"], 2)
        self.assertEqual(response.data["guest_stats"]["total_spent"], 36000)
        self.assertEqual(response.data["guest_stats"]["total_reviews"], 1)
        self.assertEqual(response.data["guest_stats"]["upcoming_bookings"], 1)

    def test_stats_of_other_users_are_private(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("user-stats", args=[self.host.id]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard(self) -> None:
        self._booking()
        self.client.force_authenticate(self.host)

        response = self.client.get(reverse("user-dashboard", args=[self.host.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["host_info"]["id"], self.host.id)
        self.assertEqual(len(response.data["properties"]), 1)
        self.assertEqual(len(response.data["recent_bookings"]), 1)
        self.assertEqual(response.data["analytics"]["total_bookings"], 1)

    def test_dashboard_of_non_host_is_not_found(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("user-dashboard", args=[self.guest.id]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_me(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("user-me"))

        self.assertEqual(response.data["id"], self.guest.id)
        self.assertEqual(response.data["full_name"], "Asha Rao")

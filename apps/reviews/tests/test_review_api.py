"""Integration tests for review API endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.reviews.models import Review
from apps.users.models import User


class ReviewAPITests(APITestCase):
    """Covers review eligibility, ownership and rating recalculation."""

    def setUp(self) -> None:
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.host = User.objects.create_user(email="host@example.com", password="HostPass123", is_host=True)
        self.stranger = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.property = Property.objects.create(
            host=self.host,
            title="Houseboat",
            description="Backwater houseboat.",
            address="Jetty 4",
            city="Alleppey",
            country="India",
            base_price=15000,
            currency="INR",
            max_guests=2,
        )
        self.booking = self._booking(Booking.Status.COMPLETED)
        self.list_url = reverse("review-list")

    def _booking(self, status_value: str, check_in: date = date(2024, 3, 1)) -> Booking:
        return Booking.objects.create(
            property=self.property,
            guest=self.guest,
            host=self.host,
            check_in=check_in,
            check_out=date(check_in.year, check_in.month, check_in.day + 2),
            guests=1,
            status=status_value,
            nightly_rate=15000,
            nights=2,
            total_price=30000,
            currency="INR",
        )

    def _review(self, **overrides) -> Review:
        data = {
            "booking": self.booking,
            "property": self.property,
            "reviewer": self.guest,
            "type": Review.Type.GUEST_TO_HOST,
            "rating": 4,
            "comment": "Lovely stay on the water.",
        }
        data.update(overrides)
        return Review.objects.create(**data)

    def _payload(self, booking: Booking | None = None, rating: int = 5) -> dict[str, object]:
        return {
            "booking": (booking or self.booking).id,
            "rating": rating,
            "comment": "Spotless boat and a very kind host.",
        }

    def test_guest_reviews_completed_booking_and_property_rating_updates(self) -> None:
        self.client.force_authenticate(self.guest)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["type"], Review.Type.GUEST_TO_HOST)
        self.assertEqual(response.data["reviewer"]["id"], self.guest.id)
        self.property.refresh_from_db()
        self.assertEqual(self.property.rating, Decimal("5.00"))
        self.assertEqual(self.property.review_count, 1)

    def test_host_review_updates_guest_rating(self) -> None:
        self.client.force_authenticate(self.host)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.list_url, self._payload(rating=3), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["type"], Review.Type.HOST_TO_GUEST)
        self.guest.refresh_from_db()
        self.assertEqual(self.guest.rating, Decimal("3.00"))
        self.assertEqual(self.guest.review_count, 1)
        self.property.refresh_from_db()
        self.assertEqual(self.property.review_count, 0)

    def test_cannot_review_booking_that_is_not_completed(self) -> None:
        booking = self._booking(Booking.Status.CONFIRMED, check_in=date(2024, 4, 1))
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.list_url, self._payload(booking), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_request")

    def test_only_booking_party_can_review(self) -> None:
        self.client.force_authenticate(self.stranger)

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_duplicate_review_conflicts(self) -> None:
        self._review()
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Review.objects.count(), 1)

    def test_unknown_booking_returns_404(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.list_url, {**self._payload(), "booking": 9999}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_rating_out_of_range_is_rejected(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.list_url, self._payload(rating=6), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("rating", response.data)

    def test_only_reviewer_can_update(self) -> None:
        review = self._review()
        url = reverse("review-detail", args=[review.id])

        self.client.force_authenticate(self.host)
        response = self.client.patch(url, {"rating": 1}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.guest)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(url, {"rating": 2}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["rating"], 2)
        self.property.refresh_from_db()
        self.assertEqual(self.property.rating, Decimal("2.00"))

    def test_reviewer_deletes_review_and_rating_resets(self) -> None:
        review = self._review()
        url = reverse("review-detail", args=[review.id])

        self.client.force_authenticate(self.guest)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(url)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Review.objects.exists())
        self.property.refresh_from_db()
        self.assertEqual(self.property.rating, Decimal("0"))
        self.assertEqual(self.property.review_count, 0)

    def test_helpful_and_report_counters(self) -> None:
        review = self._review()
        self.client.force_authenticate(self.stranger)

        response = self.client.post(reverse("review-helpful", args=[review.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["helpful_votes"], 1)

        response = self.client.post(reverse("review-report", args=[review.id]), {"reason": "spam"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["reported_count"], 1)

    def test_anonymous_can_read_but_not_write(self) -> None:
        self._review()

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

        response = self.client.post(self.list_url, self._payload(), format="json")
        self.assertIn(response.status_code, {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN})

    def test_list_filters(self) -> None:
        self._review(rating=2)
        self._review(reviewer=self.host, type=Review.Type.HOST_TO_GUEST, rating=5)

        response = self.client.get(self.list_url, {"type": Review.Type.HOST_TO_GUEST})
        self.assertEqual(response.data["count"], 1)

        response = self.client.get(self.list_url, {"min_rating": 3})
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["rating"], 5)

    def test_property_and_reviewer_listings(self) -> None:
        self._review()
        self._review(reviewer=self.host, type=Review.Type.HOST_TO_GUEST)

        response = self.client.get(reverse("review-property-reviews", args=[self.property.id]))
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["type"], Review.Type.GUEST_TO_HOST)

        response = self.client.get(reverse("review-reviewer-reviews", args=[self.host.id]))
        self.assertEqual(response.data["count"], 1)

    def test_analytics_overview(self) -> None:
        self._review(rating=4)
        other = self._booking(Booking.Status.COMPLETED, check_in=date(2024, 5, 1))
        self._review(booking=other, rating=2)

        response = self.client.get(reverse("review-analytics-overview"), {"property": self.property.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_reviews"], 2)
        self.assertEqual(response.data["average_rating"], 3)
        self.assertEqual(response.data["rating_distribution"]["4"], 1)
        self.assertEqual(response.data["rating_distribution"]["2"], 1)
        self.assertEqual(response.data["rating_distribution"]["5"], 0)

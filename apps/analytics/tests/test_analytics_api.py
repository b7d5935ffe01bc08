"""API tests for analytics reports."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.properties.models import Amenity, Property
from apps.reviews.models import Review
from apps.users.models import User


class AnalyticsAPITests(APITestCase):
    def setUp(self) -> None:
        self.staff = User.objects.create_user(email="staff@example.com", password="StaffPass123", is_staff=True)
        self.host = User.objects.create_user(email="host@example.com", password="HostPass123", is_host=True)
        self.other_host = User.objects.create_user(email="other@example.com", password="OtherPass123", is_host=True)
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")

        self.wifi = Amenity.objects.create(name="Wi-Fi")
        self.villa = self._property(self.host, "Villa", "Goa", 25000, rating=Decimal("4.80"), review_count=1)
        self.villa.amenities.add(self.wifi)
        self.room = self._property(
            self.other_host,
            "Room",
            "Delhi",
            4000,
            property_type=Property.PropertyType.PRIVATE_ROOM,
        )

        self.completed = self._booking(self.villa, Booking.Status.COMPLETED, Booking.PaymentStatus.PAID, 50000)
        self._booking(
            self.villa,
            Booking.Status.CANCELLED,
            Booking.PaymentStatus.REFUNDED,
            30000,
            refund_amount=15000,
            check_in=date(2024, 8, 1),
        )
        self._booking(self.room, Booking.Status.CONFIRMED, Booking.PaymentStatus.PAID, 8000)

        Review.objects.create(
            booking=self.completed,
            property=self.villa,
            reviewer=self.guest,
            type=Review.Type.GUEST_TO_HOST,
            rating=5,
            comment="Perfect",
        )
        Review.objects.create(
            booking=self.completed,
            property=self.villa,
            reviewer=self.host,
            type=Review.Type.HOST_TO_GUEST,
            rating=2,
            comment="Noisy",
        )

    def _property(self, host, title, city, price, **extra) -> Property:
        return Property.objects.create(
            host=host,
            title=title,
            description=f"{title} description",
            address="1 Road",
            city=city,
            country="India",
            base_price=price,
            currency="INR",
            max_guests=4,
            **extra,
        )

    def _booking(self, property_obj, status_value, payment_status, total, check_in=date(2024, 7, 1), **extra):
        return Booking.objects.create(
            property=property_obj,
            guest=self.guest,
            host=property_obj.host,
            check_in=check_in,
            check_out=check_in + timedelta(days=2),
            status=status_value,
            payment_status=payment_status,
            nights=2,
            total_price=total,
            currency="INR",
            **extra,
        )

    def test_platform_report_is_staff_only(self) -> None:
        self.client.force_authenticate(self.host)
        self.assertEqual(self.client.get(reverse("analytics-platform")).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.staff)
        response = self.client.get(reverse("analytics-platform"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        overview = response.data["overview"]
        self.assertEqual(overview["total_users"], 4)
        self.assertEqual(overview["total_hosts"], 2)
        self.assertEqual(overview["total_properties"], 2)
        self.assertEqual(overview["total_bookings"], 3)
        self.assertEqual(overview["total_revenue"], 58000)
        # Only the two paid bookings count towards the average.
        self.assertEqual(overview["average_booking_value"], 29000)
        top_rated = response.data["insights"]["top_rated_properties"]
        self.assertEqual([row["id"] for row in top_rated], [self.villa.id])
        self.assertEqual(len(response.data["growth"]["booking_trends"]), 1)

    def test_platform_report_date_range(self) -> None:
        self.client.force_authenticate(self.staff)
        tomorrow = date.today() + timedelta(days=1)

        response = self.client.get(reverse("analytics-platform"), {"start_date": str(tomorrow)})

        self.assertEqual(response.data["overview"]["total_bookings"], 0)
        self.assertEqual(response.data["overview"]["total_users"], 4)

        response = self.client.get(
            reverse("analytics-platform"), {"start_date": str(tomorrow), "end_date": str(date.today())}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_booking_report_for_host_is_scoped(self) -> None:
        self.client.force_authenticate(self.host)

        response = self.client.get(reverse("analytics-bookings"), {"host": self.other_host.id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_bookings"], 2)
        self.assertEqual(response.data["cancellation_rate"], 50.0)
        self.assertEqual(response.data["status_breakdown"]["completed"]["revenue"], 50000)
        self.assertEqual(response.data["top_properties"][0]["property_id"], self.villa.id)
        self.assertEqual(response.data["average_stay"], 2.0)

    def test_staff_can_narrow_reports_by_host(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("analytics-bookings"), {"host": self.other_host.id})
        self.assertEqual(response.data["total_bookings"], 1)

        response = self.client.get(reverse("analytics-bookings"))
        self.assertEqual(response.data["total_bookings"], 3)

    def test_guests_cannot_see_reports(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.get(reverse("analytics-financial"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_property_report(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("analytics-properties"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_properties"], 2)
        self.assertEqual(response.data["price_distribution"], {"20000-30000": 1, "0-5000": 1})
        self.assertEqual(response.data["rating_distribution"], {"4.5-5": 1, "unrated": 1})
        self.assertEqual(response.data["amenity_popularity"][0]["name"], "Wi-Fi")
        types = {row["property_type"]: row["count"] for row in response.data["property_type_distribution"]}
        self.assertEqual(types, {"entire-home": 1, "private-room": 1})

    def test_review_report_counts_guest_reviews(self) -> None:
        self.client.force_authenticate(self.host)

        response = self.client.get(reverse("analytics-reviews"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_reviews"], 1)
        self.assertEqual(response.data["sentiment"], {"positive": 1, "neutral": 0, "negative": 0})
        self.assertEqual(response.data["top_reviewed_properties"][0]["property_id"], self.villa.id)
        self.assertEqual(response.data["average_rating_by_property_type"][0]["property_type"], "entire-home")

    def test_financial_report(self) -> None:
        self.client.force_authenticate(self.staff)

        response = self.client.get(reverse("analytics-financial"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_revenue"], 58000)
        self.assertEqual(response.data["refunds"]["total_refunds"], 1)
        self.assertEqual(response.data["refunds"]["refund_amount"], 15000)
        self.assertEqual(response.data["refunds"]["refund_rate"], 33.33)
        earners = [row["property_id"] for row in response.data["top_earning_properties"]]
        self.assertEqual(earners, [self.villa.id, self.room.id])

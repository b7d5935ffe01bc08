"""API views for analytics.

Platform staff see every report for the whole marketplace and may
narrow booking, property, review and financial reports with ``?host=``.
Hosts get the same reports scoped to their own listings. The platform
report is staff-only.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.permissions import IsAdminUser, IsAuthenticated  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.models import Booking
from apps.properties.models import Property
from apps.reviews.models import Review

from . import reports


class ReportQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    host = serializers.IntegerField(required=False, min_value=1)
    property = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):  # type: ignore
        start_date = attrs.get("start_date")
        end_date = attrs.get("end_date")
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({"end_date": "End date must not be before start date."})
        return attrs


class ReportView(APIView):
    """Base view: parses the report query and resolves the host scope."""

    permission_classes = [IsAuthenticated]

    def get_query(self, request) -> dict:
        query = ReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return dict(query.validated_data)

    def get_host_id(self, request, query: dict):
        """Host whose data the report covers; ``None`` means everyone."""
        user = request.user
        if user.is_staff:
            return query.get("host")
        if user.is_host:
            return user.pk
        raise PermissionDenied("Analytics are available to hosts and staff only.")


class PlatformAnalyticsView(ReportView):
    permission_classes = [IsAdminUser]

    def get(self, request, format=None):  # type: ignore
        query = self.get_query(request)
        return Response(reports.platform_report(query.get("start_date"), query.get("end_date")))


class BookingAnalyticsView(ReportView):
    def get(self, request, format=None):  # type: ignore
        query = self.get_query(request)
        host_id = self.get_host_id(request, query)
        bookings = reports.filter_created(Booking.objects.all(), query.get("start_date"), query.get("end_date"))
        if host_id:
            bookings = bookings.filter(host_id=host_id)
        return Response(reports.booking_report(bookings))


class PropertyAnalyticsView(ReportView):
    def get(self, request, format=None):  # type: ignore
        query = self.get_query(request)
        host_id = self.get_host_id(request, query)
        properties = Property.objects.filter(is_active=True)
        if host_id:
            properties = properties.filter(host_id=host_id)
        return Response(reports.property_report(properties))


class ReviewAnalyticsView(ReportView):
    def get(self, request, format=None):  # type: ignore
        query = self.get_query(request)
        host_id = self.get_host_id(request, query)
        reviews = reports.filter_created(Review.objects.all(), query.get("start_date"), query.get("end_date"))
        if host_id:
            reviews = reviews.filter(property__host_id=host_id)
        if query.get("property"):
            reviews = reviews.filter(property_id=query["property"])
        return Response(reports.review_report(reviews))


class FinancialAnalyticsView(ReportView):
    def get(self, request, format=None):  # type: ignore
        query = self.get_query(request)
        host_id = self.get_host_id(request, query)
        bookings = reports.filter_created(Booking.objects.all(), query.get("start_date"), query.get("end_date"))
        if host_id:
            bookings = bookings.filter(host_id=host_id)
        return Response(reports.financial_report(bookings))

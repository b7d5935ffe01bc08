"""Serializers for the booking domain."""

from __future__ import annotations

from datetime import date

from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Booking


class FutureCheckInMixin:
    def validate_check_in(self, value: date) -> date:
        if value < timezone.localdate():
            raise serializers.ValidationError("Check-in date cannot be in the past.")
        return value


class BookingCreateSerializer(FutureCheckInMixin, serializers.Serializer):
    """Stay request sent by a guest.

    ``property`` is a plain id: an unknown or inactive property is
    reported by the booking service as 404, not as a validation error.
    """

    property = serializers.IntegerField(min_value=1)
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, default=1)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)

    def validate(self, attrs):  # type: ignore
        check_in: date = attrs["check_in"]
        check_out: date = attrs["check_out"]
        if check_in >= check_out:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs


class BookingUpdateSerializer(FutureCheckInMixin, serializers.Serializer):
    """Partial update: either a status change or new dates / party size."""

    status = serializers.ChoiceField(choices=Booking.Status.choices, required=False)
    cancellation_reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)
    check_in = serializers.DateField(required=False)
    check_out = serializers.DateField(required=False)
    guests = serializers.IntegerField(min_value=1, required=False)

    def validate(self, attrs):  # type: ignore
        reschedule_fields = {"check_in", "check_out", "guests"} & attrs.keys()
        if "status" in attrs and reschedule_fields:
            raise serializers.ValidationError("Change the status and the stay in separate requests.")
        if "status" not in attrs and not reschedule_fields:
            raise serializers.ValidationError("Nothing to update.")

        booking: Booking = self.instance
        check_in = attrs.get("check_in", booking.check_in)
        check_out = attrs.get("check_out", booking.check_out)
        if check_in >= check_out:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class BookingSerializer(serializers.ModelSerializer):
    """Full booking representation."""

    guest = UserShortSerializer(read_only=True)
    host = UserShortSerializer(read_only=True)
    property_id = serializers.ReadOnlyField(source="property.id")
    property_title = serializers.ReadOnlyField(source="property.title")
    property_city = serializers.ReadOnlyField(source="property.city")

    class Meta:
        model = Booking
        fields = [
            "id",
            "property_id",
            "property_title",
            "property_city",
            "guest",
            "host",
            "check_in",
            "check_out",
            "guests",
            "status",
            "payment_status",
            "nightly_rate",
            "nights",
            "cleaning_fee",
            "service_fee",
            "total_price",
            "currency",
            "refund_amount",
            "special_requests",
            "cancellation_reason",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

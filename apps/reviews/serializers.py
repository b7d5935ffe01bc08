"""Serializers for reviews.

Write serializers only validate input; who may review what is decided
by ``apps.reviews.services``. The reviewer is taken from the request.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Review


class ReviewCreateSerializer(serializers.Serializer):
    """New review of a completed booking; the type follows from who writes it."""

    booking = serializers.IntegerField(min_value=1)
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(min_length=10, max_length=2000)


class ReviewUpdateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False)
    comment = serializers.CharField(min_length=10, max_length=2000, required=False)

    def validate(self, attrs):  # type: ignore
        if not attrs:
            raise serializers.ValidationError("Nothing to update.")
        return attrs


class ReviewReportSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews including the stay they refer to."""

    reviewer = UserShortSerializer(read_only=True)
    booking_id = serializers.ReadOnlyField(source="booking.id")
    check_in = serializers.ReadOnlyField(source="booking.check_in")
    check_out = serializers.ReadOnlyField(source="booking.check_out")
    property_id = serializers.ReadOnlyField(source="property.id")
    property_title = serializers.ReadOnlyField(source="property.title")

    class Meta:
        model = Review
        fields = [
            "id",
            "booking_id",
            "check_in",
            "check_out",
            "property_id",
            "property_title",
            "reviewer",
            "type",
            "rating",
            "comment",
            "helpful_votes",
            "reported_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

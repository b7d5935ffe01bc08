"""Query-string serializers for the search endpoints."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.properties.serializers import PropertySerializer


class StayDatesQuerySerializer(serializers.Serializer):
    """Optional stay; when given, booked properties are left out."""

    check_in = serializers.DateField(required=False)
    check_out = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        check_in = attrs.get("check_in")
        check_out = attrs.get("check_out")
        if (check_in is None) != (check_out is None):
            raise serializers.ValidationError("Provide both check_in and check_out.")
        if check_in and check_in >= check_out:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs


class CoordinatesQuerySerializer(serializers.Serializer):
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)
    radius = serializers.FloatField(min_value=0.1, max_value=500, required=False)

    def validate(self, attrs):  # type: ignore
        attrs.setdefault("radius", float(settings.SEARCH_DEFAULT_RADIUS_KM))
        return attrs


class SuggestionQuerySerializer(serializers.Serializer):
    query = serializers.CharField(min_length=2, max_length=100, trim_whitespace=True)


class PropertyDistanceSerializer(PropertySerializer):
    """Property with its distance from the searched point."""

    distance = serializers.SerializerMethodField()

    class Meta(PropertySerializer.Meta):
        fields = PropertySerializer.Meta.fields + ["distance"]
        read_only_fields = fields

    def get_distance(self, obj) -> float:  # type: ignore
        return round(obj.distance, 2)


class AdvancedSearchQuerySerializer(serializers.Serializer):
    SORT_CHOICES = ("relevance", "price", "rating", "newest")

    sort_by = serializers.ChoiceField(choices=SORT_CHOICES, required=False, default="newest")
    sort_order = serializers.ChoiceField(choices=("asc", "desc"), required=False, default="asc")


class PropertyRelevanceSerializer(PropertySerializer):
    """Property with the relevance score it was ranked by."""

    relevance_score = serializers.SerializerMethodField()

    class Meta(PropertySerializer.Meta):
        fields = PropertySerializer.Meta.fields + ["relevance_score"]
        read_only_fields = fields

    def get_relevance_score(self, obj) -> float:  # type: ignore
        return round(obj.relevance_score, 4)

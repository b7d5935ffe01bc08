"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Amenity, Property


class AmenitySerializer(serializers.ModelSerializer):
    class Meta:
        model = Amenity
        fields = ["id", "name", "category", "icon"]


class PropertySerializer(serializers.ModelSerializer):
    """Read serializer with nested host and amenities."""

    host = UserShortSerializer(read_only=True)
    amenities = AmenitySerializer(many=True, read_only=True)

    class Meta:
        model = Property
        fields = [
            "id",
            "host",
            "title",
            "description",
            "property_type",
            "address",
            "city",
            "state",
            "country",
            "latitude",
            "longitude",
            "max_guests",
            "bedrooms",
            "beds",
            "bathrooms",
            "base_price",
            "cleaning_fee",
            "service_fee",
            "currency",
            "min_stay",
            "max_stay",
            "instant_book",
            "amenities",
            "images",
            "house_rules",
            "rating",
            "review_count",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PropertyWriteSerializer(serializers.ModelSerializer):
    """Serializer for create/update operations."""

    amenities = serializers.PrimaryKeyRelatedField(
        many=True,
        queryset=Amenity.objects.all(),
        required=False,
    )
    images = serializers.ListField(child=serializers.URLField(), required=False)
    house_rules = serializers.ListField(child=serializers.CharField(max_length=255), required=False)

    class Meta:
        model = Property
        fields = [
            "title",
            "description",
            "property_type",
            "address",
            "city",
            "state",
            "country",
            "latitude",
            "longitude",
            "max_guests",
            "bedrooms",
            "beds",
            "bathrooms",
            "base_price",
            "cleaning_fee",
            "service_fee",
            "currency",
            "min_stay",
            "max_stay",
            "instant_book",
            "amenities",
            "images",
            "house_rules",
        ]

    def validate(self, attrs):  # type: ignore
        min_stay = attrs.get("min_stay", getattr(self.instance, "min_stay", 1))
        max_stay = attrs.get("max_stay", getattr(self.instance, "max_stay", 365))
        if min_stay > max_stay:
            raise serializers.ValidationError({"max_stay": "Maximum stay cannot be shorter than minimum stay."})
        return attrs

    def create(self, validated_data):  # type: ignore
        amenities = validated_data.pop("amenities", [])
        property_instance = Property.objects.create(
            host=self.context["request"].user,
            **validated_data,
        )
        if amenities:
            property_instance.amenities.set(amenities)
        return property_instance

    def update(self, instance: Property, validated_data):  # type: ignore
        amenities = validated_data.pop("amenities", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if amenities is not None:
            instance.amenities.set(amenities)
        return instance

    def to_representation(self, instance):  # type: ignore
        return PropertySerializer(instance, context=self.context).data


class AvailabilityQuerySerializer(serializers.Serializer):
    check_in = serializers.DateField()
    check_out = serializers.DateField()
    guests = serializers.IntegerField(min_value=1, required=False)

    def validate(self, attrs):  # type: ignore
        if attrs["check_in"] >= attrs["check_out"]:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})
        return attrs

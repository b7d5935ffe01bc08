"""Search API views.

Searches only ever return active listings. Date filtering uses the same
half-open overlap rule as booking creation, so a property listed as
available for [check_in, check_out) can actually be booked for it.
"""

from __future__ import annotations

import logging

from django.db.models import Case, ExpressionWrapper, F, FloatField, Q, Value, When  # type: ignore
from django.db.models.functions import Cast  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.analytics.reports import popular_locations
from apps.bookings.models import Booking
from apps.properties.filters import PropertyFilterSet
from apps.properties.models import Property
from apps.properties.serializers import PropertySerializer

from .geo import bounding_box, haversine_km, longitude_ranges
from .serializers import (
    AdvancedSearchQuerySerializer,
    CoordinatesQuerySerializer,
    PropertyDistanceSerializer,
    PropertyRelevanceSerializer,
    StayDatesQuerySerializer,
    SuggestionQuerySerializer,
)

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 10
POPULAR_DESTINATIONS = 10

# Weights of the advanced search ranking.
RATING_WEIGHT = 0.3
REVIEW_COUNT_WEIGHT = 0.0001
INSTANT_BOOK_BONUS = 0.1


def relevance_score():
    """Rating and review volume, with a small bonus for instant booking."""
    return ExpressionWrapper(
        Cast("rating", FloatField()) * Value(RATING_WEIGHT)
        + Cast("review_count", FloatField()) * Value(REVIEW_COUNT_WEIGHT)
        + Case(
            When(instant_book=True, then=Value(INSTANT_BOOK_BONUS)),
            default=Value(0.0),
            output_field=FloatField(),
        ),
        output_field=FloatField(),
    )


class SearchViewSet(viewsets.GenericViewSet):
    queryset = Property.objects.filter(is_active=True).select_related("host").prefetch_related("amenities")
    serializer_class = PropertySerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = ["base_price", "rating", "review_count", "created_at"]
    ordering = ["-created_at"]

    @action(detail=False, methods=["get"])
    def properties(self, request):  # type: ignore
        """Filtered listings, excluding those booked during ``check_in``..``check_out``."""
        dates = StayDatesQuerySerializer(data=request.query_params)
        dates.is_valid(raise_exception=True)
        queryset = self.filter_queryset(self.get_queryset())

        check_in = dates.validated_data.get("check_in")
        check_out = dates.validated_data.get("check_out")
        if check_in and check_out:
            booked = Booking.objects.active().overlapping(check_in, check_out).values("property_id")
            queryset = queryset.exclude(pk__in=booked)

        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @action(detail=False, methods=["get"], url_path="properties/advanced")
    def advanced(self, request):  # type: ignore
        """Filtered listings ranked by relevance, price, rating or recency."""
        query = AdvancedSearchQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        sort_by = query.validated_data["sort_by"]
        descending = query.validated_data["sort_order"] == "desc"

        queryset = self.filter_queryset(self.get_queryset()).annotate(relevance_score=relevance_score())
        if sort_by == "relevance":
            queryset = queryset.order_by("-relevance_score", "-created_at", "-pk")
        elif sort_by == "price":
            price = F("base_price").desc() if descending else F("base_price").asc()
            queryset = queryset.order_by(price, "pk")
        elif sort_by == "rating":
            queryset = queryset.order_by("-rating", "-review_count", "pk")
        else:
            queryset = queryset.order_by("-created_at", "-pk")

        page = self.paginate_queryset(queryset)
        serializer = PropertyRelevanceSerializer(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)

    @action(detail=False, methods=["get"], url_path="properties/coordinates")
    def coordinates(self, request):  # type: ignore
        """Listings within ``radius`` km of a point, nearest first."""
        query = CoordinatesQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        lat = query.validated_data["latitude"]
        lng = query.validated_data["longitude"]
        radius = query.validated_data["radius"]

        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius)
        in_longitude = Q()
        for low, high in longitude_ranges(min_lng, max_lng):
            in_longitude |= Q(longitude__gte=low, longitude__lte=high)
        candidates = self.filter_queryset(self.get_queryset()).filter(
            in_longitude,
            latitude__gte=min_lat,
            latitude__lte=max_lat,
        )

        nearby = []
        for property_obj in candidates:
            property_obj.distance = haversine_km(
                lat, lng, float(property_obj.latitude), float(property_obj.longitude)
            )
            if property_obj.distance <= radius:
                nearby.append(property_obj)
        nearby.sort(key=lambda p: p.distance)
        logger.debug(f"Coordinate search ({lat}, {lng}, {radius} km): {len(nearby)} result(s)")

        page = self.paginate_queryset(nearby)
        serializer = PropertyDistanceSerializer(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)

    @action(detail=False, methods=["get"])
    def suggestions(self, request):  # type: ignore
        """Cities, states and countries of active listings matching ``query``."""
        query = SuggestionQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        text = query.validated_data["query"]

        active = Property.objects.filter(is_active=True)
        matches = active.filter(Q(city__icontains=text) | Q(state__icontains=text) | Q(country__icontains=text))

        def distinct_values(field: str, limit: int) -> list[str]:
            values = (
                matches.filter(**{f"{field}__icontains": text})
                .order_by(field)
                .values_list(field, flat=True)
                .distinct()
            )
            return list(values[:limit])

        suggestions = distinct_values("city", 5) + distinct_values("state", 3) + distinct_values("country", 2)
        return Response({"query": text, "suggestions": suggestions[:MAX_SUGGESTIONS]})

    @action(detail=False, methods=["get"], url_path="destinations/popular")
    def popular_destinations(self, request):  # type: ignore
        """Locations with the most active listings."""
        return Response(popular_locations(Property.objects.filter(is_active=True), limit=POPULAR_DESTINATIONS))

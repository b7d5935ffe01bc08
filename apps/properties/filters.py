"""FilterSet definitions for properties search and listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Count, Q  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    """FilterSet for Property with common filters used in list and search."""

    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    country = django_filters.CharFilter(field_name="country", lookup_expr="icontains")
    # Free text matched against city, state and country
    location = django_filters.CharFilter(method="filter_location")
    property_type = django_filters.MultipleChoiceFilter(choices=Property.PropertyType.choices)
    host = django_filters.NumberFilter(field_name="host_id")

    price_min = django_filters.NumberFilter(field_name="base_price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="base_price", lookup_expr="lte")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")
    bedrooms = django_filters.NumberFilter(field_name="bedrooms", lookup_expr="gte")
    instant_book = django_filters.BooleanFilter(field_name="instant_book")
    min_rating = django_filters.NumberFilter(field_name="rating", lookup_expr="gte")

    # CSV of amenity ids, requires all selected amenities
    amenities = django_filters.CharFilter(method="filter_amenities")

    class Meta:
        model = Property
        fields = [
            "city",
            "country",
            "property_type",
            "host",
            "instant_book",
        ]

    def filter_location(self, queryset, name, value):  # type: ignore
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(city__icontains=value) | Q(state__icontains=value) | Q(country__icontains=value)
        )

    def filter_amenities(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        try:
            ids = {int(x) for x in str(value).replace(" ", "").split(",") if x}
        except ValueError:
            return queryset
        if not ids:
            return queryset
        # Require all of the amenities: annotate count of matched amenities
        qs = queryset.filter(amenities__id__in=ids).annotate(
            matched_amenities=Count("amenities", filter=Q(amenities__id__in=ids), distinct=True)
        ).filter(matched_amenities=len(ids))
        return qs.distinct()

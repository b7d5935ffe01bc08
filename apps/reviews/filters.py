"""FilterSet definitions for review listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Review


class ReviewFilterSet(django_filters.FilterSet):
    property = django_filters.NumberFilter(field_name="property_id")
    reviewer = django_filters.NumberFilter(field_name="reviewer_id")
    type = django_filters.ChoiceFilter(choices=Review.Type.choices)
    min_rating = django_filters.NumberFilter(field_name="rating", lookup_expr="gte")

    class Meta:
        model = Review
        fields = ["property", "reviewer", "type"]

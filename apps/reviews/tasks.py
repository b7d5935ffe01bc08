"""Celery tasks for the review domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore

from apps.properties.models import Property

from .handlers import recalculate_guest_rating, recalculate_property_rating
from .models import Review

logger = logging.getLogger(__name__)


@shared_task(name="reviews.recalculate_ratings")
def recalculate_ratings() -> dict[str, int]:
    """
    Recompute every derived rating from the stored reviews.

    Event handlers keep ratings current; this nightly run repairs any
    drift, e.g. after reviews were edited through the admin.

    Returns:
        dict: numbers of properties and guests recalculated
    """
    property_ids = set(Review.objects.about_properties().values_list("property_id", flat=True))
    property_ids |= set(Property.objects.filter(review_count__gt=0).values_list("pk", flat=True))
    guest_ids = set(Review.objects.about_guests().values_list("booking__guest_id", flat=True))
    guest_ids |= set(get_user_model().objects.filter(review_count__gt=0).values_list("pk", flat=True))
    for property_id in property_ids:
        recalculate_property_rating(property_id)
    for guest_id in guest_ids:
        recalculate_guest_rating(guest_id)
    logger.info(f"Ratings recalculated for {len(property_ids)} properties and {len(guest_ids)} guests")
    return {"properties": len(property_ids), "guests": len(guest_ids)}

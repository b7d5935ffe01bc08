"""
Review event handlers

Keep the derived ``rating``/``review_count`` of properties and guests in
sync with their reviews. Registered on the message bus in
``ReviewsConfig.ready()``; they run after the review transaction commits.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Avg, Count  # type: ignore

from apps.properties.models import Property
from shared.application.message_bus import message_bus

from .domain.events import ReviewCreated, ReviewDeleted, ReviewUpdated
from .models import Review

logger = logging.getLogger(__name__)


def _rounded(value) -> Decimal:
    return Decimal(str(round(value or 0, 2)))


def recalculate_property_rating(property_id) -> None:
    """Average of the guest-to-host reviews of one property."""
    stats = Review.objects.about_properties().filter(property_id=property_id).aggregate(
        average=Avg("rating"), count=Count("id")
    )
    Property.objects.filter(pk=property_id).update(
        rating=_rounded(stats["average"]),
        review_count=stats["count"],
    )
    logger.debug(f"Property {property_id} rating recalculated: {stats}")


def recalculate_guest_rating(user_id) -> None:
    """Average of the host-to-guest reviews about stays of one guest."""
    stats = Review.objects.about_guests().filter(booking__guest_id=user_id).aggregate(
        average=Avg("rating"), count=Count("id")
    )
    get_user_model().objects.filter(pk=user_id).update(
        rating=_rounded(stats["average"]),
        review_count=stats["count"],
    )
    logger.debug(f"User {user_id} rating recalculated: {stats}")


def handle_review_changed(event) -> None:
    if event.type == Review.Type.GUEST_TO_HOST:
        recalculate_property_rating(event.property_id)
    else:
        recalculate_guest_rating(event.guest_id)


def register_handlers() -> None:
    for event_type in (ReviewCreated, ReviewUpdated, ReviewDeleted):
        message_bus.register_event_handler(event_type, handle_review_changed)

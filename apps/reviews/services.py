"""Domain services for reviews.

A review can only be written for a completed booking, by its guest
(``guest-to-host``) or by its host (``host-to-guest``), and only once
per party. Rating recalculation is not done here: the services emit
events and ``apps.reviews.handlers`` reacts after commit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import IntegrityError  # type: ignore
from django.db.models import F  # type: ignore

from apps.bookings.models import Booking
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import Conflict, Forbidden, InvalidRequest, NotFound

from .domain.events import ReviewCreated, ReviewDeleted, ReviewUpdated
from .models import Review

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.users.models import User

logger = logging.getLogger(__name__)

REVIEW_EXISTS = "review already exists for this booking"


def _get_review(review_id) -> Review:
    review = Review.objects.select_related("booking").filter(pk=review_id).first()
    if review is None:
        raise NotFound("Review", review_id)
    return review


def _validate_rating(rating: int) -> None:
    if not 1 <= rating <= 5:
        raise InvalidRequest("rating must be between 1 and 5", rating=rating)


def review_type_for(booking: Booking, reviewer: "User") -> str:
    """Which side of the stay ``reviewer`` is on, as a review type."""

    if booking.guest_id == reviewer.pk:
        return Review.Type.GUEST_TO_HOST
    if booking.host_id == reviewer.pk:
        return Review.Type.HOST_TO_GUEST
    raise Forbidden("only the guest or host can review this booking", booking_id=booking.pk)


def create_review(booking_id, rating: int, comment: str, *, reviewer: "User") -> Review:
    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        raise NotFound("Booking", booking_id)
    if booking.status != Booking.Status.COMPLETED:
        raise InvalidRequest("can only review completed bookings", booking_id=booking.pk)
    review_type = review_type_for(booking, reviewer)
    _validate_rating(rating)

    if Review.objects.filter(booking=booking, reviewer=reviewer, type=review_type).exists():
        raise Conflict(REVIEW_EXISTS, booking_id=booking.pk)

    try:
        with DjangoUnitOfWork() as uow:
            review = Review.objects.create(
                booking=booking,
                property_id=booking.property_id,
                reviewer=reviewer,
                type=review_type,
                rating=rating,
                comment=comment,
            )
            uow.add_event(
                ReviewCreated(
                    review_id=review.pk,
                    property_id=booking.property_id,
                    guest_id=booking.guest_id,
                    reviewer_id=reviewer.pk,
                    type=review_type,
                    rating=rating,
                )
            )
    except IntegrityError:
        # Same party submitted twice concurrently.
        raise Conflict(REVIEW_EXISTS, booking_id=booking.pk)

    logger.info(f"Review {review.pk} ({review_type}) created for booking {booking.pk} by user {reviewer.pk}")
    return review


def update_review(review_id, *, actor: "User", rating: int | None = None, comment: str | None = None) -> Review:
    """Change rating and/or comment. Only the author may edit a review."""

    review = _get_review(review_id)
    if review.reviewer_id != actor.pk:
        raise Forbidden("only the reviewer can update this review", review_id=review.pk)

    update_fields = ["updated_at"]
    if rating is not None:
        _validate_rating(rating)
        review.rating = rating
        update_fields.append("rating")
    if comment:
        review.comment = comment
        update_fields.append("comment")

    with DjangoUnitOfWork() as uow:
        review.save(update_fields=update_fields)
        uow.add_event(
            ReviewUpdated(
                review_id=review.pk,
                property_id=review.property_id,
                guest_id=review.booking.guest_id,
                type=review.type,
                rating=review.rating,
            )
        )
    return review


def delete_review(review_id, *, actor: "User") -> None:
    review = _get_review(review_id)
    if review.reviewer_id != actor.pk:
        raise Forbidden("only the reviewer can delete this review", review_id=review.pk)

    event = ReviewDeleted(
        review_id=review.pk,
        property_id=review.property_id,
        guest_id=review.booking.guest_id,
        type=review.type,
    )
    with DjangoUnitOfWork() as uow:
        review.delete()
        uow.add_event(event)
    logger.info(f"Review {event.review_id} deleted by user {actor.pk}")


def mark_helpful(review_id) -> int:
    """Add one helpful vote and return the new total."""

    updated = Review.objects.filter(pk=review_id).update(helpful_votes=F("helpful_votes") + 1)
    if not updated:
        raise NotFound("Review", review_id)
    return Review.objects.values_list("helpful_votes", flat=True).get(pk=review_id)


def report_review(review_id, reason: str = "", *, reporter: "User") -> int:
    updated = Review.objects.filter(pk=review_id).update(reported_count=F("reported_count") + 1)
    if not updated:
        raise NotFound("Review", review_id)
    reported_count = Review.objects.values_list("reported_count", flat=True).get(pk=review_id)
    logger.warning(f"Review {review_id} reported by user {reporter.pk} ({reported_count} total): {reason}")
    return reported_count

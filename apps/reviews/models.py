"""Review models for StayHub."""

from __future__ import annotations

import builtins

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Avg, Count  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ReviewQuerySet(models.QuerySet):
    def about_properties(self):
        """Reviews written by guests, which rate the stay and the host."""
        return self.filter(type=Review.Type.GUEST_TO_HOST)

    def about_guests(self):
        return self.filter(type=Review.Type.HOST_TO_GUEST)

    def statistics(self) -> dict:
        """Count, average and 1..5 distribution of guest-to-host ratings."""
        reviews = self.about_properties()
        totals = reviews.aggregate(total_reviews=Count("id"), average_rating=Avg("rating"))
        distribution = {str(stars): 0 for stars in range(1, 6)}
        for row in reviews.order_by().values("rating").annotate(count=Count("id")):
            distribution[str(row["rating"])] = row["count"]
        return {
            "total_reviews": totals["total_reviews"],
            "average_rating": round(totals["average_rating"] or 0, 2),
            "rating_distribution": distribution,
        }


class Review(models.Model):
    """Review left after a completed stay.

    A guest reviews the property and its host (``guest-to-host``); the
    host reviews the guest (``host-to-guest``). Each party may review a
    booking once.
    """

    class Type(models.TextChoices):
        GUEST_TO_HOST = "guest-to-host", _("Guest reviews the stay")
        HOST_TO_GUEST = "host-to-guest", _("Host reviews the guest")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_written",
    )
    type = models.CharField(max_length=20, choices=Type.choices)
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    comment = models.TextField(max_length=2000)
    helpful_votes = models.PositiveIntegerField(default=0)
    reported_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReviewQuerySet.as_manager()

    class Meta:
        verbose_name = _("Review")
        verbose_name_plural = _("Reviews")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking", "reviewer", "type"],
                name="unique_review_per_booking_party",
            ),
            models.CheckConstraint(
                condition=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                name="review_rating_range",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "type"]),
            models.Index(fields=["reviewer"]),
        ]

    def __str__(self) -> str:
        return f"{self.get_type_display()} review #{self.pk} ({self.rating}/5)"

    @builtins.property
    def is_about_property(self) -> bool:
        return self.type == self.Type.GUEST_TO_HOST

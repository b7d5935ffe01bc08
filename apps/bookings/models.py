"""Booking domain models for StayHub."""

from __future__ import annotations

import builtins

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import Avg, Count, Q, Sum  # type: ignore
from django.db.models.functions import TruncMonth  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange, Money


class BookingQuerySet(models.QuerySet):
    def active(self):
        """Bookings that hold their dates (pending or confirmed)."""
        return self.filter(status__in=Booking.ACTIVE_STATUSES)

    def overlapping(self, check_in, check_out):
        """Half-open overlap: [a, b) and [c, d) intersect iff a < d and c < b."""
        return self.filter(Q(check_in__lt=check_out) & Q(check_out__gt=check_in))

    def for_party(self, user):
        """Bookings where ``user`` is the guest or the host."""
        return self.filter(Q(guest=user) | Q(host=user))

    def statistics(self) -> dict:
        """Status breakdown, revenue and monthly trend for the queryset."""
        totals = self.aggregate(
            total_bookings=Count("id"),
            total_revenue=Sum("total_price", filter=~Q(status=Booking.Status.CANCELLED)),
            average_booking_value=Avg("total_price", filter=~Q(status=Booking.Status.CANCELLED)),
            average_nights=Avg("nights"),
        )
        status_breakdown = {
            row["status"]: {"count": row["count"], "revenue": row["revenue"] or 0}
            for row in self.order_by().values("status").annotate(
                count=Count("id"), revenue=Sum("total_price")
            )
        }
        monthly_trends = [
            {
                "month": row["month"].strftime("%Y-%m"),
                "bookings": row["bookings"],
                "revenue": row["revenue"] or 0,
            }
            for row in self.exclude(status=Booking.Status.CANCELLED)
            .annotate(month=TruncMonth("created_at"))
            .order_by("month")
            .values("month")
            .annotate(bookings=Count("id"), revenue=Sum("total_price"))
        ]
        return {
            "total_bookings": totals["total_bookings"],
            "total_revenue": totals["total_revenue"] or 0,
            "average_booking_value": round(totals["average_booking_value"] or 0),
            "average_nights": round(totals["average_nights"] or 0, 1),
            "status_breakdown": status_breakdown,
            "monthly_trends": monthly_trends,
        }


class Booking(models.Model):
    """Reservation of a property for the half-open stay [check_in, check_out)."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending host approval")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Awaiting payment")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")

    # Statuses that hold the dates of a stay.
    ACTIVE_STATUSES = (Status.PENDING, Status.CONFIRMED)

    # Allowed lifecycle moves; cancelled and completed are terminal.
    TRANSITIONS = {
        Status.PENDING: (Status.CONFIRMED, Status.CANCELLED),
        Status.CONFIRMED: (Status.COMPLETED, Status.CANCELLED),
        Status.CANCELLED: (),
        Status.COMPLETED: (),
    }

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    guest = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="host_bookings",
    )
    check_in = models.DateField()
    check_out = models.DateField()
    guests = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )

    # Price breakdown frozen at booking time, minor units
    nightly_rate = models.PositiveIntegerField(default=0)
    nights = models.PositiveSmallIntegerField(default=1)
    cleaning_fee = models.PositiveIntegerField(default=0)
    service_fee = models.PositiveIntegerField(default=0)
    total_price = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3)
    refund_amount = models.PositiveIntegerField(default=0)

    special_requests = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=500, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "check_in", "check_out"]),
            models.Index(fields=["guest", "status"]),
            models.Index(fields=["host", "status"]),
            models.Index(fields=["status"]),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} for property {self.property_id} ({self.check_in} - {self.check_out})"

    @builtins.property
    def dates(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)

    @builtins.property
    def total(self) -> Money:
        return Money(self.total_price, self.currency)

    @builtins.property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in self.TRANSITIONS.get(self.status, ())


class BookingNight(models.Model):
    """One night of a property held by an active booking.

    The unique (property, night) pair is what makes double booking
    impossible at the database level: a second booking that touches an
    already held night fails with an IntegrityError regardless of what
    the availability pre-check saw.
    """

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="held_nights")
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="held_nights",
    )
    night = models.DateField()

    class Meta:
        verbose_name = _("Booked night")
        verbose_name_plural = _("Booked nights")
        ordering = ["property", "night"]
        constraints = [
            models.UniqueConstraint(fields=["property", "night"], name="unique_property_night"),
        ]

    def __str__(self) -> str:
        return f"{self.property_id} @ {self.night}"

"""Property domain models for StayHub.

A property is a listing owned by a host. Prices are stored in integer
minor units of ``currency`` (paise, cents) so that booking totals are
computed without floating point. Stay rules (minimum and maximum number
of nights, instant booking) and capacity are read by the booking engine
in ``apps.bookings.services``.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def default_currency() -> str:
    return settings.DEFAULT_CURRENCY


CURRENCY_VALIDATOR = RegexValidator(
    regex=r"^[A-Z]{3}$",
    message=_("Currency must be a three-letter ISO 4217 code, e.g. USD."),
)


class Amenity(models.Model):
    """Amenity that can be attached to a listing."""

    class Category(models.TextChoices):
        BASIC = "basic", _("Basic")
        FEATURES = "features", _("Features")
        SAFETY = "safety", _("Safety")
        WORK = "work", _("Work friendly")

    name = models.CharField(max_length=100, unique=True)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.BASIC,
    )
    icon = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Icon identifier used by the frontend."),
    )

    class Meta:
        verbose_name = _("Amenity")
        verbose_name_plural = _("Amenities")
        ordering = ["category", "name"]

    def __str__(self) -> str:
        return self.name


class Property(models.Model):
    """Listing offered for short-term rent."""

    class PropertyType(models.TextChoices):
        ENTIRE_HOME = "entire-home", _("Entire home")
        PRIVATE_ROOM = "private-room", _("Private room")
        SHARED_ROOM = "shared-room", _("Shared room")

    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="properties",
    )
    title = models.CharField(max_length=255)
    description = models.TextField()
    property_type = models.CharField(
        max_length=20,
        choices=PropertyType.choices,
        default=PropertyType.ENTIRE_HOME,
    )

    # Location
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100)
    latitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(-90), MaxValueValidator(90)],
    )
    longitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(-180), MaxValueValidator(180)],
    )

    # Capacity
    max_guests = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    bedrooms = models.PositiveSmallIntegerField(default=1)
    beds = models.PositiveSmallIntegerField(default=1)
    bathrooms = models.PositiveSmallIntegerField(default=1)

    # Pricing, minor units
    base_price = models.PositiveIntegerField(help_text=_("Nightly rate in minor units."))
    cleaning_fee = models.PositiveIntegerField(default=0)
    service_fee = models.PositiveIntegerField(default=0)
    currency = models.CharField(max_length=3, default=default_currency, validators=[CURRENCY_VALIDATOR])

    # Stay rules
    min_stay = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    max_stay = models.PositiveSmallIntegerField(default=365, validators=[MinValueValidator(1)])
    instant_book = models.BooleanField(default=False)

    amenities = models.ManyToManyField(Amenity, blank=True, related_name="properties")
    images = models.JSONField(default=list, blank=True, help_text=_("List of image URLs."))
    house_rules = models.JSONField(default=list, blank=True)

    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    review_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["city", "is_active"]),
            models.Index(fields=["host", "is_active"]),
            models.Index(fields=["base_price"]),
            models.Index(fields=["rating"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(min_stay__lte=F("max_stay")),
                name="property_min_stay_lte_max_stay",
            ),
        ]

    def __str__(self) -> str:
        return self.title

    def deactivate(self) -> None:
        """Unlist the property. Existing bookings are kept."""
        if self.is_active:
            self.is_active = False
            self.save(update_fields=["is_active", "updated_at"])

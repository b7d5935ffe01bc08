"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Amenity, Property


@admin.register(Amenity)
class AmenityAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "icon")
    list_filter = ("category",)
    search_fields = ("name", "category")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "city",
        "country",
        "property_type",
        "base_price",
        "max_guests",
        "instant_book",
        "rating",
        "is_active",
        "host",
    )
    list_filter = ("is_active", "property_type", "instant_book", "country", "city")
    search_fields = ("title", "city", "country", "host__email")
    filter_horizontal = ("amenities",)
    readonly_fields = ("rating", "review_count", "created_at", "updated_at")

"""Admin registration for reviews."""

from __future__ import annotations

from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "property", "reviewer", "type", "rating", "helpful_votes", "reported_count", "created_at")
    list_filter = ("type", "rating", "created_at")
    search_fields = ("property__title", "reviewer__email", "comment")
    raw_id_fields = ("booking", "property", "reviewer")
    readonly_fields = ("helpful_votes", "reported_count", "created_at", "updated_at")

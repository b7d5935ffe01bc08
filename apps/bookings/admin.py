"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingNight


class BookingNightInline(admin.TabularInline):
    model = BookingNight
    extra = 0
    fields = ("night",)
    readonly_fields = ("night",)
    can_delete = False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "guest",
        "host",
        "status",
        "payment_status",
        "check_in",
        "check_out",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "payment_status", "check_in", "check_out")
    search_fields = ("property__title", "guest__email", "host__email")
    inlines = (BookingNightInline,)
    readonly_fields = (
        "created_at",
        "updated_at",
        "total_price",
        "nights",
        "nightly_rate",
        "cleaning_fee",
        "service_fee",
        "refund_amount",
        "cancelled_at",
    )

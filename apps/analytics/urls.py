"""URL routing for analytics endpoints."""

from django.urls import path  # type: ignore

from .views import (
    BookingAnalyticsView,
    FinancialAnalyticsView,
    PlatformAnalyticsView,
    PropertyAnalyticsView,
    ReviewAnalyticsView,
)


urlpatterns = [
    # Do not prefix with 'analytics/' here; the prefix is defined in config.urls
    path('platform/', PlatformAnalyticsView.as_view(), name='analytics-platform'),
    path('bookings/', BookingAnalyticsView.as_view(), name='analytics-bookings'),
    path('properties/', PropertyAnalyticsView.as_view(), name='analytics-properties'),
    path('reviews/', ReviewAnalyticsView.as_view(), name='analytics-reviews'),
    path('financial/', FinancialAnalyticsView.as_view(), name='analytics-financial'),
]

"""Property API views."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings import services as booking_services
from apps.bookings.models import Booking
from apps.reviews.models import Review
from shared.domain.exceptions import InvalidRequest

from .filters import PropertyFilterSet
from .models import Amenity, Property
from .serializers import (
    AmenitySerializer,
    AvailabilityQuerySerializer,
    PropertySerializer,
    PropertyWriteSerializer,
)


class IsHostOrReadOnly(permissions.BasePermission):
    """Anyone can read listings; hosts manage their own."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(view, "action", None) == "create":
            return user.is_host or user.is_staff
        return True

    def has_object_permission(self, request, view, obj: Property):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        return user.is_staff or obj.host_id == user.pk


class PropertyViewSet(viewsets.ModelViewSet):
    """Listings CRUD, availability quotes and per-property analytics.

    Deleting a property only deactivates it so that its bookings and
    reviews stay intact.
    """

    queryset = Property.objects.select_related("host").prefetch_related("amenities")
    permission_classes = [IsHostOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = [
        "base_price",
        "rating",
        "review_count",
        "created_at",
    ]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if self.action in {"list", "host_properties"} or not user.is_authenticated:
            return qs.filter(is_active=True)
        if user.is_staff:
            return qs
        # Hosts still see (and can reactivate) their own unlisted properties.
        return qs.filter(Q(is_active=True) | Q(host=user))

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def perform_destroy(self, instance: Property):  # type: ignore
        instance.deactivate()

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def availability(self, request, pk=None):  # type: ignore
        """Whether the property can be booked for the given stay, with a price quote."""
        property_obj: Property = self.get_object()  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        check_in = query.validated_data["check_in"]
        check_out = query.validated_data["check_out"]
        guests = query.validated_data.get("guests", 1)

        reason = None
        try:
            booking_services.validate_stay(property_obj, check_in, check_out, guests)
        except InvalidRequest as exc:
            reason = exc.message
        else:
            if not booking_services.is_property_available(property_obj.pk, check_in, check_out):
                reason = booking_services.DATES_UNAVAILABLE

        quote = booking_services.quote_booking(property_obj, check_in, check_out)
        return Response(
            {
                "property_id": property_obj.pk,
                "check_in": check_in,
                "check_out": check_out,
                "guests": guests,
                "available": reason is None,
                "reason": reason,
                "instant_book": property_obj.instant_book,
                "quote": quote.to_dict(),
            }
        )

    @action(detail=True, methods=["get"], permission_classes=[permissions.IsAuthenticated])
    def analytics(self, request, pk=None):  # type: ignore
        """Booking and review statistics of one property, for its host."""
        property_obj: Property = self.get_object()  # type: ignore
        if not request.user.is_staff and property_obj.host_id != request.user.pk:
            raise PermissionDenied("Only the host can see property analytics.")

        bookings = Booking.objects.filter(property=property_obj).statistics()
        reviews = Review.objects.filter(property=property_obj).statistics()
        return Response(
            {
                "property": {
                    "id": property_obj.pk,
                    "title": property_obj.title,
                    "rating": property_obj.rating,
                    "review_count": property_obj.review_count,
                    "total_bookings": bookings["total_bookings"],
                    "total_revenue": bookings["total_revenue"],
                },
                "bookings": bookings,
                "reviews": reviews,
            }
        )

    @action(detail=False, methods=["get"], url_path=r"host/(?P<host_id>\d+)")
    def host_properties(self, request, host_id=None):  # type: ignore
        """Active listings of one host."""
        queryset = self.filter_queryset(self.get_queryset().filter(host_id=host_id))
        page = self.paginate_queryset(queryset)
        serializer = PropertySerializer(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)

    @action(detail=False, methods=["get"])
    def amenities(self, request):  # type: ignore
        """All amenities that can be attached to a listing."""
        return Response(AmenitySerializer(Amenity.objects.all(), many=True).data, status=status.HTTP_200_OK)

"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore

from . import services
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
)


class IsBookingParty(permissions.BasePermission):
    """Guest, host and platform staff can see a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if getattr(user, "is_staff", False):
            return True
        return user.pk in (obj.guest_id, obj.host_id)


class BookingViewSet(viewsets.ModelViewSet):
    """Booking creation, lifecycle actions and per-party listings.

    State changes are delegated to ``apps.bookings.services``; domain
    errors raised there are rendered by the project exception handler.
    """

    queryset = Booking.objects.select_related("property", "guest", "host").all()
    permission_classes = [permissions.IsAuthenticated, IsBookingParty]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = BookingFilterSet
    ordering_fields = ["created_at", "check_in", "total_price"]
    http_method_names = ["get", "post", "patch", "head", "options"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "partial_update":
            return BookingUpdateSerializer
        if self.action == "cancel":
            return BookingCancelSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if getattr(user, "is_staff", False):
            return qs
        return qs.for_party(user)

    def _respond(self, booking: Booking, status_code=status.HTTP_200_OK) -> Response:
        booking = self.get_queryset().get(pk=booking.pk)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = services.create_booking(
            data["property"],
            data["check_in"],
            data["check_out"],
            data["guests"],
            guest=request.user,
            special_requests=data["special_requests"],
        )
        return self._respond(booking, status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(booking, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if "status" in data:
            booking = services.transition_booking(
                booking.pk, data["status"], actor=request.user, reason=data.get("cancellation_reason", "")
            )
        else:
            booking = services.reschedule_booking(
                booking.pk,
                data.get("check_in", booking.check_in),
                data.get("check_out", booking.check_out),
                data.get("guests", booking.guests),
                actor=request.user,
            )
        return self._respond(booking)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.cancel_booking(booking.pk, serializer.validated_data["reason"], actor=request.user)
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        booking = services.confirm_payment(booking.pk, actor=request.user)
        return self._respond(booking)

    def _list_for(self, request, queryset):  # type: ignore
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        serializer = BookingSerializer(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)

    def _ensure_self_or_staff(self, request, user_id) -> None:
        if not request.user.is_staff and str(request.user.pk) != str(user_id):
            raise PermissionDenied("You can only list your own bookings.")

    @action(detail=False, methods=["get"], url_path=r"guest/(?P<guest_id>\d+)")
    def guest(self, request, guest_id=None):  # type: ignore
        """Bookings made by a guest."""
        self._ensure_self_or_staff(request, guest_id)
        return self._list_for(request, super().get_queryset().filter(guest_id=guest_id))

    @action(detail=False, methods=["get"], url_path=r"host/(?P<host_id>\d+)")
    def host(self, request, host_id=None):  # type: ignore
        """Bookings received by a host across their properties."""
        self._ensure_self_or_staff(request, host_id)
        return self._list_for(request, super().get_queryset().filter(host_id=host_id))

    @action(detail=False, methods=["get"], url_path="analytics/overview")
    def analytics_overview(self, request):  # type: ignore
        """Status breakdown, revenue and monthly trend of the visible bookings."""
        queryset = self.filter_queryset(self.get_queryset())
        return Response(queryset.statistics())

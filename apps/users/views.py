"""User API views."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Sum  # type: ignore
from django.utils import timezone  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.serializers import BookingSerializer
from apps.properties.models import Property
from apps.properties.serializers import PropertySerializer
from apps.reviews.models import Review
from apps.reviews.serializers import ReviewSerializer
from shared.domain.exceptions import NotFound

from .filters import UserFilterSet
from .serializers import RegisterSerializer, UserSerializer

User = get_user_model()


class IsSelfOrStaff(permissions.BasePermission):
    """Users manage their own account; staff manage every account."""

    def has_object_permission(self, request, view, obj):  # type: ignore
        if request.method in permissions.SAFE_METHODS and view.action == "retrieve":
            return True
        return request.user.is_staff or obj.pk == request.user.pk


class UserViewSet(viewsets.ModelViewSet):
    """User accounts, host onboarding and per-user statistics.

    - `create` is open: it registers a new guest (or host) account
    - `destroy` never removes the row, the account is unverified and deactivated
    - `verify` is reserved for platform staff
    """

    queryset = User.objects.all().order_by("-created_at")
    filter_backends = [DjangoFilterBackend]
    filterset_class = UserFilterSet
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [permissions.AllowAny()]
        if self.action == "verify":
            return [permissions.IsAdminUser()]
        return [permissions.IsAuthenticated(), IsSelfOrStaff()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return RegisterSerializer
        return UserSerializer

    def perform_destroy(self, instance):  # type: ignore
        instance.deactivate()

    @action(detail=True, methods=["get"])
    def stats(self, request, pk=None):  # type: ignore
        """Guest statistics of a user, plus host statistics for hosts."""
        user = self.get_object()
        data: dict[str, object] = {
            "user": {
                "id": user.pk,
                "name": user.full_name,
                "joined": user.date_joined,
                "is_host": user.is_host,
                "is_verified": user.is_verified,
                "rating": user.rating,
                "review_count": user.review_count,
            },
        }

        if user.is_host:
            host_bookings = Booking.objects.filter(host=user)
            data["host_stats"] = {
                "total_properties": Property.objects.filter(host=user, is_active=True).count(),
                "total_bookings": host_bookings.count(),
                "total_revenue": host_bookings.filter(status=Booking.Status.COMPLETED).aggregate(
                    total=Sum("total_price")
                )["total"] or 0,
                "total_reviews": Review.objects.about_properties().filter(property__host=user).count(),
            }

        guest_bookings = Booking.objects.filter(guest=user)
        data["guest_stats"] = {
            "total_bookings": guest_bookings.count(),
            "total_spent": guest_bookings.filter(payment_status=Booking.PaymentStatus.PAID).aggregate(
                total=Sum("total_price")
            )["total"] or 0,
            "total_reviews": Review.objects.about_properties().filter(reviewer=user).count(),
            "upcoming_bookings": guest_bookings.filter(
                status=Booking.Status.CONFIRMED, check_in__gt=timezone.localdate()
            ).count(),
        }
        return Response(data)

    @action(detail=True, methods=["post"])
    def verify(self, request, pk=None):  # type: ignore
        user = self.get_object()
        user.verify()
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=["post"], url_path="become-host")
    def become_host(self, request, pk=None):  # type: ignore
        user = self.get_object()
        user.become_host()
        return Response(UserSerializer(user).data)

    @action(detail=True, methods=["get"])
    def dashboard(self, request, pk=None):  # type: ignore
        """Listings, latest bookings and reviews, and booking analytics of a host."""
        user = self.get_object()
        if not user.is_host:
            raise NotFound("Host", pk)

        context = self.get_serializer_context()
        host_bookings = Booking.objects.filter(host=user).select_related("property", "guest", "host")
        properties = Property.objects.filter(host=user, is_active=True).select_related("host")[:5]
        recent_reviews = (
            Review.objects.about_properties()
            .filter(property__host=user)
            .select_related("reviewer", "property", "booking")[:5]
        )
        return Response(
            {
                "host_info": {
                    "id": user.pk,
                    "name": user.full_name,
                    "rating": user.rating,
                    "review_count": user.review_count,
                    "is_verified": user.is_verified,
                },
                "properties": PropertySerializer(properties, many=True, context=context).data,
                "recent_bookings": BookingSerializer(host_bookings[:10], many=True, context=context).data,
                "recent_reviews": ReviewSerializer(recent_reviews, many=True, context=context).data,
                "analytics": host_bookings.statistics(),
            }
        )

    @action(detail=False, methods=["get"])
    def me(self, request):  # type: ignore
        """Profile of the current user."""
        return Response(UserSerializer(request.user).data)

"""API views for reviews."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .filters import ReviewFilterSet
from .models import Review
from .serializers import (
    ReviewCreateSerializer,
    ReviewReportSerializer,
    ReviewSerializer,
    ReviewUpdateSerializer,
)


class ReviewViewSet(viewsets.ModelViewSet):
    """Public review listings; authors create, edit and delete their own.

    Authorization beyond authentication (completed booking, booking
    party, review author) is enforced by ``apps.reviews.services``.
    """

    queryset = Review.objects.select_related("reviewer", "property", "booking").all()
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ReviewFilterSet
    ordering_fields = ["created_at", "rating", "helpful_votes"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReviewCreateSerializer
        if self.action == "partial_update":
            return ReviewUpdateSerializer
        if self.action == "report":
            return ReviewReportSerializer
        return ReviewSerializer

    def _respond(self, review: Review, status_code=status.HTTP_200_OK) -> Response:
        review = self.get_queryset().get(pk=review.pk)
        return Response(ReviewSerializer(review, context=self.get_serializer_context()).data, status=status_code)

    def _list(self, queryset):  # type: ignore
        queryset = self.filter_queryset(queryset)
        page = self.paginate_queryset(queryset)
        serializer = ReviewSerializer(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        review = services.create_review(data["booking"], data["rating"], data["comment"], reviewer=request.user)
        return self._respond(review, status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        review: Review = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        review = services.update_review(
            review.pk,
            actor=request.user,
            rating=data.get("rating"),
            comment=data.get("comment"),
        )
        return self._respond(review)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        review: Review = self.get_object()  # type: ignore
        services.delete_review(review.pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated])
    def helpful(self, request, pk=None):  # type: ignore
        review: Review = self.get_object()  # type: ignore
        return Response({"id": review.pk, "helpful_votes": services.mark_helpful(review.pk)})

    @action(detail=True, methods=["post"], permission_classes=[permissions.IsAuthenticated])
    def report(self, request, pk=None):  # type: ignore
        """Flag a review for moderation."""
        review: Review = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reported_count = services.report_review(
            review.pk, serializer.validated_data["reason"], reporter=request.user
        )
        return Response({"id": review.pk, "reported_count": reported_count})

    @action(detail=False, methods=["get"], url_path=r"property/(?P<property_id>\d+)")
    def property_reviews(self, request, property_id=None):  # type: ignore
        """Guest reviews of one property."""
        return self._list(self.get_queryset().about_properties().filter(property_id=property_id))

    @action(detail=False, methods=["get"], url_path=r"reviewer/(?P<reviewer_id>\d+)")
    def reviewer_reviews(self, request, reviewer_id=None):  # type: ignore
        return self._list(self.get_queryset().filter(reviewer_id=reviewer_id))

    @action(detail=False, methods=["get"], url_path="analytics/overview")
    def analytics_overview(self, request):  # type: ignore
        """Rating statistics, optionally narrowed with ``?property=`` or ``?host=``."""
        queryset = self.get_queryset()
        property_id = request.query_params.get("property")
        host_id = request.query_params.get("host")
        if property_id and property_id.isdigit():
            queryset = queryset.filter(property_id=property_id)
        if host_id and host_id.isdigit():
            queryset = queryset.filter(property__host_id=host_id)
        return Response(queryset.statistics())

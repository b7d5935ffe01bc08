"""Pagination used by every list endpoint."""

from __future__ import annotations

from rest_framework.pagination import PageNumberPagination  # type: ignore


class StandardResultsSetPagination(PageNumberPagination):
    """``?page=2&limit=50``; at most 100 items per page."""

    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100

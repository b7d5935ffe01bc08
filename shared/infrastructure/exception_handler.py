"""DRF exception handler translating domain errors into HTTP responses."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import (
    Conflict,
    DomainError,
    Forbidden,
    IllegalStateTransition,
    InvalidRequest,
    NotFound,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidRequest: status.HTTP_400_BAD_REQUEST,
    IllegalStateTransition: status.HTTP_400_BAD_REQUEST,
    Conflict: status.HTTP_409_CONFLICT,
    Forbidden: status.HTTP_403_FORBIDDEN,
}


def domain_exception_handler(exc, context):  # type: ignore
    """Map ``DomainError`` subclasses to status codes, defer the rest to DRF."""

    if isinstance(exc, DomainError):
        status_code = next(
            (code for error_type, code in STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
            status.HTTP_400_BAD_REQUEST,
        )
        view = context.get("view")
        logger.info(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        return Response({"detail": exc.message, "code": exc.code}, status=status_code)

    return drf_exception_handler(exc, context)

"""Mapping of domain outcomes and errors to HTTP responses."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.errors import DomainError, ErrorCode

from .domain.results import Rejected, RejectionKind

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FORMAT_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INTERVAL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.CONCURRENCY_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def rejection_response(rejected: Rejected, **extra) -> Response:
    """400 for rule rejections, 409 when the slot is taken."""
    code = status.HTTP_409_CONFLICT if rejected.kind == RejectionKind.SLOT_TAKEN else status.HTTP_400_BAD_REQUEST
    return Response({**extra, **rejected.to_dict()}, status=code)


def domain_error_response(exc: DomainError) -> Response:
    body = {"code": exc.code.value, "message": exc.message}
    field = getattr(exc, "field", None)
    if field:
        body["field"] = field
    code = ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
    if code >= 500:
        logger.warning("Request failed with %s: %s", exc.code.value, exc.message)
    return Response(body, status=code)


def domain_exception_handler(exc, context):
    """DRF exception handler that also understands DomainError."""
    if isinstance(exc, DomainError):
        return domain_error_response(exc)
    return exception_handler(exc, context)

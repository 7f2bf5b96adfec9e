"""Mapping of domain errors to HTTP responses.

Registered as the DRF ``EXCEPTION_HANDLER``. Responses carry a user-safe
message and an error code, never internal details.
"""

import typing as t

import structlog
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from ticketing.domain.errors import (
    ConflictError,
    DomainError,
    ErrorCode,
    NotFoundError,
    PaymentDeclinedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PaymentDeclinedError, status.HTTP_402_PAYMENT_REQUIRED),
)


def status_for(error: DomainError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def ticketing_exception_handler(exc: Exception, context: dict[str, t.Any]) -> Response | None:
    if isinstance(exc, DomainError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("request_failed", code=exc.code.value, error=str(exc), exc_info=exc)
        else:
            logger.info("request_rejected", code=exc.code.value, status=status_code)
        set_rollback()
        return Response({"error": exc.message, "code": exc.code.value, **exc.details()}, status=status_code)

    if isinstance(exc, exceptions.ValidationError):
        return Response(
            {"error": "Invalid request", "code": ErrorCode.INVALID_REQUEST.value, "fields": exc.detail},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is None:
        logger.exception("internal_server_error")
        set_rollback()
        return Response({"error": "Internal Server Error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if isinstance(response.data, dict) and "detail" in response.data:
        response.data = {"error": str(response.data["detail"])}
    return response

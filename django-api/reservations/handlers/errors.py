"""Mapping of domain errors to HTTP responses.

Installed as the REST framework ``EXCEPTION_HANDLER``. Clients receive the
error code and its user-safe message; nothing else from the exception.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from reservations.domain.errors import DomainError, ErrorCode, UnexpectedError

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_PUBLISHED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INSUFFICIENT_INVENTORY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RESERVATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.ALREADY_CANCELLED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DOCUMENT_NOT_AVAILABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TRANSACTION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(error: DomainError, status_code: int | None = None) -> Response:
    return Response(
        {"code": error.code.value, "message": error.message},
        status=status_code or STATUS_BY_CODE[error.code],
    )


def domain_exception_handler(exc: Exception, context: dict) -> Response | None:
    if isinstance(exc, DomainError):
        return error_response(exc)
    response = exception_handler(exc, context)
    if response is not None:
        return response
    view = context.get("view")
    logger.exception(
        "Unhandled error in %s", type(view).__name__ if view else "view", exc_info=exc
    )
    return error_response(UnexpectedError())

from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import set_rollback
import structlog

from ..domain.enums import ErrorCode
from ..errors import FlashcardsError

logger = structlog.get_logger()


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, list):
        for value in detail:
            return _first_message(value)
    return str(detail)


def _error(code, message, status_code, headers=None, **extra):
    return Response({"error": code, "message": message, **extra}, status=status_code, headers=headers)


def api_exception_handler(exc, context):
    """Render every API error as ``{"error": code, "message": ..., ...}``."""
    set_rollback()

    if isinstance(exc, FlashcardsError):
        if exc.status_code >= 500:
            logger.error("api_error", error=exc.code, message=exc.message)
        return _error(exc.code, exc.message, exc.status_code, headers=exc.headers, **exc.extra)

    if isinstance(exc, (exceptions.ParseError, exceptions.UnsupportedMediaType)):
        return _error(ErrorCode.INVALID_JSON, "Request body must be valid JSON", status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, exceptions.ValidationError):
        detail = exc.detail
        fields = list(detail.keys()) if isinstance(detail, dict) else []
        return _error(
            ErrorCode.VALIDATION_ERROR,
            _first_message(detail),
            status.HTTP_400_BAD_REQUEST,
            fields=fields,
        )

    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        headers = {}
        auth_header = getattr(exc, "auth_header", None)
        if auth_header:
            headers["WWW-Authenticate"] = auth_header
        return _error(ErrorCode.UNAUTHORIZED, "Authentication required", exc.status_code, headers=headers)

    if isinstance(exc, (Http404, exceptions.NotFound)):
        return _error(ErrorCode.NOT_FOUND, "Resource not found", status.HTTP_404_NOT_FOUND)

    if isinstance(exc, exceptions.APIException):
        return _error(exc.default_code, _first_message(exc.detail), exc.status_code)

    view = context.get("view")
    logger.exception("unhandled_api_error", view=type(view).__name__ if view else None)
    return _error(
        ErrorCode.INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

"""
API error rendering.

Every error leaving the API has the shape ``{"error": <message>}``. Validation
errors also carry the field ``details``.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404, JsonResponse

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import set_rollback

logger = logging.getLogger(__name__)


class RefundError(exceptions.APIException):
    """A refund request that breaks a refund rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid refund request"
    default_code = "refund_error"


def _first_message(detail):
    if isinstance(detail, list):
        return _first_message(detail[0]) if detail else "Invalid request"
    if isinstance(detail, dict):
        for key, value in detail.items():
            message = _first_message(value)
            if key == "non_field_errors":
                return message
            return f"{key}: {message}"
        return "Invalid request"
    return str(detail)


def api_exception_handler(exc, context):
    """
    DRF exception handler producing ``{"error": ...}`` bodies.

    Unexpected exceptions are logged with their traceback and reported as a
    generic 500 so internals never reach the client.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(str(exc) or "Not found")
    elif isinstance(exc, PermissionDenied):
        exc = exceptions.PermissionDenied()

    if isinstance(exc, exceptions.APIException):
        headers = {}
        if getattr(exc, "auth_header", None):
            headers["WWW-Authenticate"] = exc.auth_header
        if getattr(exc, "wait", None):
            headers["Retry-After"] = "%d" % exc.wait

        if isinstance(exc, exceptions.NotAuthenticated):
            data = {"error": "Unauthorized: No token provided"}
        elif isinstance(exc, exceptions.ValidationError):
            data = {"error": _first_message(exc.detail), "details": exc.detail}
        else:
            data = {"error": _first_message(exc.detail)}

        set_rollback()
        return Response(data, status=exc.status_code, headers=headers)

    view = context.get("view")
    logger.exception(
        f"Unhandled error in {view.__class__.__name__ if view else 'API view'}: {exc}"
    )
    set_rollback()
    return Response(
        {"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def route_not_found(request, exception=None):
    """handler404 for anything outside the URLconf."""
    return JsonResponse({"error": "Route not found"}, status=404)

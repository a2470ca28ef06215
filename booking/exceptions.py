"""
exceptions.py
-------------
Domain errors shared by the booking, staff and attendance apps, and the DRF
exception handler that renders every error as:

    {"kind": "<machine readable>", "detail": "<human message>"}

Kinds: not_found, conflict, forbidden, validation_error, unavailable.
Storage errors never leak their details across the API boundary.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class SchedulingError(exceptions.APIException):
    """Base class; `default_code` doubles as the error kind."""


class NotFound(SchedulingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class Conflict(SchedulingError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state."
    default_code = "conflict"


class Forbidden(SchedulingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."
    default_code = "forbidden"


class ValidationFailed(SchedulingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "validation_error"


class Unavailable(SchedulingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The service is temporarily unavailable. Please retry."
    default_code = "unavailable"


# DRF's own exceptions mapped onto our kinds.
_DRF_KINDS = {
    exceptions.ValidationError: "validation_error",
    exceptions.ParseError: "validation_error",
    exceptions.NotFound: "not_found",
    exceptions.PermissionDenied: "forbidden",
    exceptions.NotAuthenticated: "forbidden",
    exceptions.AuthenticationFailed: "forbidden",
}


def _kind_for(exc) -> str:
    if isinstance(exc, SchedulingError):
        return exc.default_code
    for cls, kind in _DRF_KINDS.items():
        if isinstance(exc, cls):
            return kind
    return getattr(exc, "default_code", "error")


def api_exception_handler(exc, context):
    """
    REST_FRAMEWORK["EXCEPTION_HANDLER"].

    - Django ValidationError -> validation_error (400)
    - Http404 -> not_found (DRF default handling)
    - DatabaseError (incl. OperationalError / timeouts) -> unavailable (503)
    """
    if isinstance(exc, DjangoValidationError):
        exc = ValidationFailed(detail=exc.messages)
    elif isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Database error in %s", view.__class__.__name__ if view else "view")
        exc = Unavailable()

    response = exception_handler(exc, context)
    if response is None:
        return None

    kind = "not_found" if isinstance(exc, Http404) else _kind_for(exc)
    detail = response.data.get("detail", response.data) if isinstance(response.data, dict) else response.data
    response.data = {"kind": kind, "detail": detail}
    return response

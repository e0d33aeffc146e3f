import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, Throttled, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _extract_field_errors(data: Any) -> Optional[Dict[str, list]]:
    """
    Turn DRF's error structure into {field: [messages]} or None.
    Accepts dicts or lists and normalises them.
    """
    if isinstance(data, dict):
        normalised = {}
        for key, value in data.items():
            if key == "detail":
                continue
            if isinstance(value, (list, tuple)):
                normalised[key] = [str(v) for v in value]
            else:
                normalised[key] = [str(value)]
        return normalised or None
    if isinstance(data, (list, tuple)) and data:
        return {"non_field_errors": [str(v) for v in data]}
    return None


def _first_message(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        if "detail" in data:
            return _first_message(data["detail"])
        if "non_field_errors" in data:
            return _first_message(data["non_field_errors"])
        # Only one field failed: surface its first message
        if len(data) == 1:
            return _first_message(next(iter(data.values())))
        return None
    if isinstance(data, (list, tuple)):
        return str(data[0]) if data else None
    if data is None:
        return None
    return str(data)


def custom_exception_handler(exc, context):
    """
    Wrap DRF's default exception_handler so every error leaves the API as
    {"success": false, "message", "code", "errors", "status"}.
    Anything DRF does not know about is logged and answered with a 500.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s",
            view.__class__.__name__ if view else "unknown view",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return Response(
            {
                "success": False,
                "message": "Server error. Please try again later.",
                "code": "server_error",
                "errors": None,
                "status": status.HTTP_500_INTERNAL_SERVER_ERROR,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    status_code = response.status_code
    data = response.data
    detail_text = _first_message(data)
    field_errors = _extract_field_errors(data)

    if isinstance(exc, APIError):
        code = exc.get_codes() if isinstance(exc.get_codes(), str) else exc.default_code
        message = detail_text or "Request could not be processed."
    elif isinstance(exc, ValidationError):
        code = "validation_error"
        message = detail_text if detail_text and len(field_errors or {}) <= 1 else "Invalid input."
    elif isinstance(exc, Throttled):
        code = "rate_limited"
        message = "Too many requests. Please wait before retrying."
        field_errors = {"retry_after": [str(getattr(exc, "wait", None))]}
    elif status_code == status.HTTP_401_UNAUTHORIZED:
        code = "unauthorised"
        message = detail_text or "Authentication credentials were not provided or are invalid."
    elif status_code == status.HTTP_403_FORBIDDEN:
        code = "forbidden"
        message = detail_text or "You do not have permission to perform this action."
    elif status_code == status.HTTP_404_NOT_FOUND or isinstance(exc, Http404):
        code = "not_found"
        message = detail_text or "The requested resource was not found."
    else:
        code = "error"
        message = detail_text or "An error occurred."

    if status_code >= 500:
        logger.error("Server error %s: %s", status_code, message)
    elif status_code not in (status.HTTP_401_UNAUTHORIZED, status.HTTP_404_NOT_FOUND):
        logger.warning("Request rejected (%s %s): %s", status_code, code, message)

    body = {
        "success": False,
        "message": message,
        "code": code,
        "errors": field_errors,
        "status": status_code,
    }
    return Response(body, status=status_code, headers=_passthrough_headers(response))


def _passthrough_headers(response) -> dict:
    headers = {}
    for name in ("Retry-After", "WWW-Authenticate"):
        if response.has_header(name):
            headers[name] = response[name]
    return headers


class APIError(APIException):
    """
    Typed domain error that renders through the envelope above.

    Example:
        raise APIError("Room is not available", code="room_unavailable")
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request."
    default_code = "error"

    def __init__(self, detail=None, code=None, status_code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)
        if status_code is not None:
            self.status_code = status_code


class InvalidTransition(APIError):
    """A booking action that the current booking status does not allow."""
    default_detail = "This action is not allowed for the booking's current status."
    default_code = "invalid_transition"


class PayoutError(APIError):
    default_detail = "Payout could not be processed."
    default_code = "payout_error"

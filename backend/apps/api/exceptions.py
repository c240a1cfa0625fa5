from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

from django.core.exceptions import (
    ObjectDoesNotExist,
    PermissionDenied as DjangoPermissionDenied,
    ValidationError as DjangoValidationError,
)
from django.http import Http404
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    MethodNotAllowed,
    NotAuthenticated,
    NotFound,
    ParseError,
    PermissionDenied,
    Throttled,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.api.utils import error_response
from apps.common import get_logger

logger = get_logger(__name__).bind(component="api", layer="exception")

SERVER_ERROR_MESSAGE = _("Something went wrong")

STATUS_CODE_DEFAULTS: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("VALIDATION_ERROR", _("Validation failed")),
    status.HTTP_401_UNAUTHORIZED: ("UNAUTHORIZED", _("Authentication required")),
    status.HTTP_403_FORBIDDEN: (
        "FORBIDDEN",
        _("You do not have permission to perform this action"),
    ),
    status.HTTP_404_NOT_FOUND: ("NOT_FOUND", _("Resource not found")),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("METHOD_NOT_ALLOWED", _("Method not allowed")),
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: (
        "UNSUPPORTED_MEDIA_TYPE",
        _("Unsupported media type"),
    ),
    status.HTTP_429_TOO_MANY_REQUESTS: ("TOO_MANY_REQUESTS", _("Request was throttled")),
    status.HTTP_500_INTERNAL_SERVER_ERROR: ("SERVER_ERROR", SERVER_ERROR_MESSAGE),
}

# Exception class -> (code, fallback message, keep payload as details)
_EXCEPTION_CODES: Tuple[Tuple[Union[Type[Exception], Tuple[Type[Exception], ...]], str, Any, bool], ...] = (
    (ValidationError, "VALIDATION_ERROR", _("Validation failed"), True),
    (ParseError, "VALIDATION_ERROR", _("Malformed request"), False),
    (NotAuthenticated, "UNAUTHORIZED", _("Authentication required"), False),
    (AuthenticationFailed, "UNAUTHORIZED", _("Authentication failed"), False),
    (
        (PermissionDenied, DjangoPermissionDenied),
        "FORBIDDEN",
        _("You do not have permission to perform this action"),
        False,
    ),
    ((NotFound, Http404), "NOT_FOUND", _("Resource not found"), False),
    (MethodNotAllowed, "METHOD_NOT_ALLOWED", _("Method not allowed"), False),
    (Throttled, "TOO_MANY_REQUESTS", _("Request was throttled"), False),
)


class ApplicationError(Exception):
    """
    Domain-level error for code paths that cannot return a ``(result, error)`` pair.

    Args:
        code: Machine readable error code.
        message: Human readable explanation of the error.
        status_code: Optional explicit HTTP status. If omitted, code mapping is used.
        details: Optional structured details for clients.
        hint: Optional hint for remediation.
        extra: Optional additional machine readable fields.
        headers: Optional mapping of headers to include in the response.
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
        hint: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.hint = hint
        self.extra = extra
        self.headers = headers

    def to_response(self) -> Response:
        return error_response(
            self.code,
            self.message,
            self.details,
            http_status=self.status_code,
            hint=self.hint,
            extra=self.extra,
            headers=self.headers,
        )


def global_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    DRF ``EXCEPTION_HANDLER``: renders every raised error in the response envelope.
    """

    bound_logger = _bind_logger(context)

    if isinstance(exc, ApplicationError):
        bound_logger.info(
            "Handled application error",
            code=exc.code,
            status=exc.status_code,
        )
        return exc.to_response()

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(_normalize_django_validation_error(exc))
    elif isinstance(exc, ObjectDoesNotExist):
        exc = NotFound()

    response = drf_exception_handler(exc, context)
    if response is not None:
        return _from_drf_exception(exc, response, bound_logger)

    bound_logger.exception("Unhandled exception bubbled to global handler")
    return error_response(
        "SERVER_ERROR",
        str(SERVER_ERROR_MESSAGE),
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _bind_logger(context: Dict[str, Any]):
    log = logger
    view = context.get("view")
    if view is not None:
        log = log.bind(view=type(view).__name__)
    return log.bind_request(context.get("request"))


def _from_drf_exception(exc: Exception, response: Response, bound_logger) -> Response:
    status_code = response.status_code
    code, message, details = _normalize_payload(exc, response.data, status_code)
    headers = dict(response.headers) if getattr(response, "headers", None) else None
    hint = None
    if isinstance(exc, Throttled) and getattr(exc, "wait", None) is not None:
        details = {"retryAfter": exc.wait}
        hint = "Wait before retrying this request."

    if status_code >= 500:
        bound_logger.error("Converted server error", code=code, status=status_code)
    else:
        bound_logger.info("Converted API exception", code=code, status=status_code)

    return error_response(
        code,
        message,
        details,
        http_status=status_code,
        hint=hint,
        headers=headers,
    )


def _normalize_django_validation_error(exc: DjangoValidationError) -> Union[Dict[str, Any], list]:
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    if hasattr(exc, "messages"):
        return list(exc.messages)
    return {"detail": getattr(exc, "message", "Validation failed")}


def _normalize_payload(exc: Exception, payload: Any, status_code: int) -> Tuple[str, str, Optional[Any]]:
    for exc_types, code, fallback, keep_details in _EXCEPTION_CODES:
        if isinstance(exc, exc_types):
            message = (
                str(fallback)
                if keep_details
                else _extract_message(payload, str(fallback), status_code)
            )
            return code, message, payload if keep_details else None

    code, default_message = STATUS_CODE_DEFAULTS.get(
        status_code,
        ("SERVER_ERROR", SERVER_ERROR_MESSAGE)
        if status_code >= 500
        else ("UNKNOWN_ERROR", _("Request failed")),
    )
    details = payload if status_code < 500 and isinstance(payload, (dict, list)) and payload else None
    return code, _extract_message(payload, str(default_message), status_code), details


def _extract_message(payload: Any, fallback: str, status_code: int) -> str:
    if status_code >= 500:
        return str(SERVER_ERROR_MESSAGE)
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, str):
            return detail
    if isinstance(payload, list) and payload and isinstance(payload[0], str):
        return payload[0]
    return fallback


__all__ = ["ApplicationError", "global_exception_handler"]

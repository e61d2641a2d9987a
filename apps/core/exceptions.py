"""
API exceptions and the DRF exception handler.

Every error leaves the API in one envelope:

    {"success": false, "error": {"code": 400, "message": "...", "details": {...}}}
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError, RestrictedError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, PermissionDenied
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("security.audit")


class StaleObjectError(Exception):
    """Raised when an optimistic concurrency token no longer matches the stored row."""


class APIException(Exception):
    """Base exception for API errors"""

    def __init__(self, message, code=None, status_code=status.HTTP_400_BAD_REQUEST):
        self.message = message
        self.code = code or 'error'
        self.status_code = status_code
        super().__init__(message)


class BusinessRuleException(APIException):
    """A legal request whose precondition is not met"""

    def __init__(self, message):
        super().__init__(message, code='blocked', status_code=status.HTTP_400_BAD_REQUEST)


class ConflictException(APIException):
    """Concurrent modification detected through the version token"""

    def __init__(self, message):
        super().__init__(message, code='conflict', status_code=status.HTTP_409_CONFLICT)


def _envelope(code, message, details):
    return {
        'success': False,
        'error': {
            'code': code,
            'message': message,
            'details': details,
        }
    }


def custom_exception_handler(exc, context):
    """
    DRF errors are re-wrapped; service and model errors are translated:

    - ``APIException`` subclasses keep their own status
    - ``StaleObjectError`` becomes 409
    - Django ``ValidationError`` and protected deletes become 400
    """
    response = exception_handler(exc, context)

    if response is not None:
        _log_security_event(exc, context, response.status_code)
        response.data = _envelope(
            response.status_code,
            get_error_message(response.data),
            response.data if isinstance(response.data, dict) else {'detail': response.data},
        )
        return response

    if isinstance(exc, APIException):
        logger.info("API error code=%s message=%s", exc.code, exc.message)
        return Response(
            _envelope(exc.status_code, exc.message, {'code': exc.code}),
            status=exc.status_code,
        )

    if isinstance(exc, StaleObjectError):
        logger.info("Stale write rejected: %s", exc)
        return Response(
            _envelope(409, 'This record was modified by another user. Please refresh and try again.',
                      {'code': 'conflict'}),
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, DjangoValidationError):
        logger.warning("Validation error: %s", exc)
        if hasattr(exc, 'message_dict'):
            details = exc.message_dict
        else:
            details = {'validation_errors': exc.messages}
        return Response(
            _envelope(400, exc.messages[0] if exc.messages else 'Validation Error', details),
            status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, (ProtectedError, RestrictedError)):
        blocking = sorted({str(obj) for obj in exc.args[1]})[:10] if len(exc.args) > 1 else []
        return Response(
            _envelope(400, 'This record is still referenced and cannot be deleted.', {'referenced_by': blocking}),
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, Http404):
        return Response(
            _envelope(404, 'Not Found', {'detail': str(exc)}),
            status=status.HTTP_404_NOT_FOUND
        )

    logger.exception("Unexpected error: %s", exc)
    return Response(
        _envelope(500, 'Internal Server Error', {'detail': 'An unexpected error occurred.'}),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _log_security_event(exc, context, status_code):
    if status_code not in (401, 403):
        return

    request = context.get("request")
    if request is None:
        return

    user = getattr(request, "user", None)
    user_id = getattr(user, "id", None) if user and getattr(user, "is_authenticated", False) else None
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        event_type = "auth_failed"
    elif isinstance(exc, PermissionDenied):
        event_type = "permission_denied"
    else:
        event_type = "security_event"

    security_logger.warning(
        "api_security_event type=%s status=%s method=%s path=%s user_id=%s",
        event_type,
        status_code,
        request.method,
        request.path,
        user_id,
    )


def get_error_message(data):
    """First human-readable message in a DRF error payload"""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        if 'non_field_errors' in data:
            return str(data['non_field_errors'][0])
        for key, value in data.items():
            if isinstance(value, list) and value:
                return f"{key}: {value[0]}"
            elif isinstance(value, str):
                return f"{key}: {value}"
    elif isinstance(data, list) and data:
        return str(data[0])
    return str(data)

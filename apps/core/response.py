"""
Standardized JSON response helpers.

    Success:  {"success": true,  "data": ..., "message": "..."}
    Error:    {"success": false, "error": {"code": 400, "message": "...", "details": {...}}}
"""

from rest_framework.response import Response
from rest_framework import status

from .exceptions import BusinessRuleException, ConflictException


def success_response(data=None, message='OK', http_status=status.HTTP_200_OK, **extra):
    """Return a successful JSON envelope."""
    payload = {'success': True, 'data': data, 'message': message}
    payload.update(extra)
    return Response(payload, status=http_status)


def created_response(data=None, message='Created successfully.'):
    return success_response(data=data, message=message, http_status=status.HTTP_201_CREATED)


def outcome_response(outcome, data=None, message='OK'):
    """
    Translate a service ``Outcome`` into an HTTP response.

    blocked -> 400, conflict -> 409 (via the exception handler),
    success -> 200 with ``data``.
    """
    if outcome.is_conflict:
        raise ConflictException(outcome.reason)
    if outcome.is_blocked:
        raise BusinessRuleException(outcome.reason)
    return success_response(data=data, message=message)

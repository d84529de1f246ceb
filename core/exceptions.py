"""
Error handling for the Funrun API.

Every failure leaves the API in the same envelope:

    {"success": false, "error": {"code": "ERROR_CODE", "message": "..."}}

Domain errors (``FunrunAPIException`` subclasses) carry their own code,
message and status. Framework errors are mapped from the HTTP status, with
validation errors reporting the first offending field. Database errors
become a generic 500 failure, with the detail kept in the error log.
Authentication, permission and throttling failures are written to the
security log.
"""

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from core.utils import get_client_ip

security_logger = logging.getLogger('funrun.security')
error_logger = logging.getLogger('funrun.errors')

# HTTP status -> (error code, message safe to show any client)
STATUS_ERRORS = {
    400: ('BAD_REQUEST', 'Invalid request. Please check your input.'),
    401: ('UNAUTHORIZED', 'Authentication required.'),
    403: ('FORBIDDEN', 'You do not have permission to perform this action.'),
    404: ('NOT_FOUND', 'The requested resource was not found.'),
    405: ('METHOD_NOT_ALLOWED', 'This method is not allowed.'),
    409: ('CONFLICT', 'Request conflicts with current state.'),
    413: ('PAYLOAD_TOO_LARGE', 'Uploaded file is too large.'),
    415: ('UNSUPPORTED_MEDIA_TYPE', 'Unsupported media type.'),
    429: ('RATE_LIMIT_EXCEEDED', 'Too many requests. Please try again later.'),
    500: ('INTERNAL_ERROR', 'An internal error occurred. Please try again later.'),
    502: ('BAD_GATEWAY', 'Service temporarily unavailable.'),
    503: ('SERVICE_UNAVAILABLE', 'Service temporarily unavailable.'),
}

LOGGED_STATUSES = (401, 403, 429)


def error_body(code, message):
    return {'success': False, 'error': {'code': code, 'message': message}}


def custom_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER``: wrap every error in the failure envelope."""
    if isinstance(exc, DatabaseError):
        view = context.get('view')
        error_logger.error(
            f"Database error in {view.__class__.__name__ if view else 'unknown'}: {exc}",
            exc_info=exc,
        )
        exc = DatabaseUnavailable()

    if isinstance(exc, FunrunAPIException):
        set_rollback()
        return Response(error_body(exc.code, exc.message), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    code, message = STATUS_ERRORS.get(response.status_code, ('UNKNOWN_ERROR', 'An error occurred.'))
    if response.status_code == status.HTTP_400_BAD_REQUEST:
        message = _validation_message(getattr(exc, 'detail', None)) or message

    if response.status_code in LOGGED_STATUSES:
        _log_security_event(exc, context.get('request'), context.get('view'), response.status_code)

    response.data = error_body(code, message)
    return response


def _validation_message(detail):
    """First validation problem, prefixed with its field name."""
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        return str(detail[0]) if detail else None
    if not isinstance(detail, dict):
        return None

    for field_name, errors in detail.items():
        if isinstance(errors, list) and errors:
            first = errors[0]
        elif isinstance(errors, str):
            first = errors
        else:
            continue
        if field_name == 'non_field_errors':
            return str(first)
        return f"Validation error: {field_name} - {first}"
    return None


def _log_security_event(exc, request, view, status_code):
    session = getattr(request, 'auth', None) if request is not None else None
    subject = getattr(session, 'subject', None)
    who = f"{subject}:{session.role}" if subject else 'anonymous'

    security_logger.warning(
        f"Security event: status={status_code}, session={who}, "
        f"ip={get_client_ip(request)}, "
        f"view={view.__class__.__name__ if view else 'unknown'}, "
        f"exception={exc.__class__.__name__}"
    )


# =============================================================================
# DOMAIN EXCEPTIONS
# =============================================================================

class FunrunAPIException(Exception):
    """Base class for errors that map straight to an API failure."""

    default_code = 'ERROR'
    default_message = 'An error occurred.'
    default_status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, code=None, status_code=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status_code
        super().__init__(self.message)


class RegistrationValidationError(FunrunAPIException):
    """Raised when a submission or transition request is invalid."""
    default_code = 'VALIDATION_ERROR'
    default_message = 'Invalid registration data.'
    default_status_code = status.HTTP_400_BAD_REQUEST


class RosterParseError(FunrunAPIException):
    """Raised when an uploaded roster workbook cannot be used."""
    default_code = 'ROSTER_PARSE_ERROR'
    default_message = 'Failed to read Excel file'
    default_status_code = status.HTTP_400_BAD_REQUEST


class RegistrationNotFound(FunrunAPIException):
    """Raised when a registration id does not resolve."""
    default_code = 'NOT_FOUND'
    default_message = 'Registration not found.'
    default_status_code = status.HTTP_404_NOT_FOUND


class InvalidTransition(FunrunAPIException):
    """Raised when a status change is requested on a non-pending record."""
    default_code = 'INVALID_TRANSITION'
    default_message = 'Registration has already been processed.'
    default_status_code = status.HTTP_409_CONFLICT


class CascadeError(FunrunAPIException):
    """Raised when participant OR numbers could not follow the group."""
    default_code = 'CASCADE_FAILED'
    default_message = 'Failed to update group participants.'
    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StorageError(FunrunAPIException):
    """Raised when an uploaded file could not be stored or removed."""
    default_code = 'STORAGE_ERROR'
    default_message = 'Failed to store uploaded file.'
    default_status_code = status.HTTP_502_BAD_GATEWAY


class DatabaseUnavailable(FunrunAPIException):
    """A read or write against the database failed."""
    default_code = 'DATABASE_ERROR'
    default_message = 'Failed to save changes. Please try again later.'
    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

"""Application error types.

Every error a client can observe is an ``AppError`` subclass carrying the HTTP
status it maps to and a short ``kind`` string. The ``message`` is the fixed,
client-facing text; internal details are only ever logged.
"""

from enum import Enum


class AppError(Exception):
    status_code = 500
    kind = 'InternalError'
    default_message = 'Internal server error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    kind = 'ValidationError'
    default_message = 'Invalid request data'


class AuthErrorKind(str, Enum):
    MISSING = 'Missing'
    INVALID = 'Invalid'
    EXPIRED = 'Expired'


class AuthError(AppError):
    status_code = 401
    kind = 'AuthError'

    _messages = {
        AuthErrorKind.MISSING: 'Not authenticated',
        AuthErrorKind.INVALID: 'Invalid token',
        AuthErrorKind.EXPIRED: 'Token has expired',
    }

    def __init__(self, reason: AuthErrorKind, message: str | None = None):
        self.reason = reason
        super().__init__(message or self._messages[reason])


class ForbiddenError(AppError):
    status_code = 403
    kind = 'ForbiddenError'
    default_message = 'Insufficient permissions'


class NotFoundError(AppError):
    status_code = 404
    kind = 'NotFoundError'
    default_message = 'Resource not found'


class InternalError(AppError):
    pass

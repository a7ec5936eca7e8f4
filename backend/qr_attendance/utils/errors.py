"""Error taxonomy for attendance operations.

Every rejection carries a single machine-readable ``code`` so clients can
choose between re-scanning, re-entering an ID or contacting the teacher.
"""
from typing import Dict, Optional


class AttendanceError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    code = 'INTERNAL_ERROR'
    default_message = 'Internal server error'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> Dict:
        """Convert to the standard error envelope."""
        return {
            'error': True,
            'message': self.message,
            'status_code': self.status_code,
            'code': self.code
        }


class ValidationError(AttendanceError):
    """Malformed or missing input."""

    status_code = 400
    code = 'VALIDATION_ERROR'
    default_message = 'Invalid input'

    def __init__(self, message: Optional[str] = None, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields

    def to_dict(self) -> Dict:
        result = super().to_dict()
        if self.fields:
            result['fields'] = self.fields
        return result


class InvalidTokenFormat(ValidationError):
    code = 'INVALID_TOKEN_FORMAT'
    default_message = 'Invalid token format'


class AuthenticationError(AttendanceError):
    status_code = 401
    code = 'AUTHENTICATION_ERROR'
    default_message = 'Not authenticated'


class AuthorizationError(AttendanceError):
    status_code = 403
    code = 'AUTHORIZATION_ERROR'
    default_message = 'Not authorized'


class NotFoundError(AttendanceError):
    status_code = 404
    code = 'NOT_FOUND'
    default_message = 'Resource not found'


class SessionNotFound(NotFoundError):
    code = 'SESSION_NOT_FOUND'
    default_message = 'Session not found'


class InvalidOrExpiredToken(AttendanceError):
    """Expected under normal operation; the client should re-scan."""

    status_code = 401
    code = 'INVALID_OR_EXPIRED_TOKEN'
    default_message = 'Invalid or expired token'


class SessionMismatch(AttendanceError):
    status_code = 400
    code = 'SESSION_MISMATCH'
    default_message = 'Session ID mismatch'


class SessionInactiveOrExpired(AttendanceError):
    status_code = 403
    code = 'SESSION_INACTIVE'
    default_message = 'Session is not active'


class SessionStopped(SessionInactiveOrExpired):
    code = 'SESSION_INACTIVE'
    default_message = 'Session is not active'


class SessionExpired(SessionInactiveOrExpired):
    code = 'SESSION_EXPIRED'
    default_message = 'Session has expired'


class DuplicateSubmission(AttendanceError):
    """The (session, student) pair already has a submission."""

    status_code = 409
    code = 'ALREADY_SUBMITTED'
    default_message = 'Student has already submitted attendance for this session'

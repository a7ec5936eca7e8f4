"""Validation utilities for request bodies."""
import re
from typing import Any, Dict, List, Optional

from qr_attendance.records import SubmissionInput
from qr_attendance.utils.errors import ValidationError

STUDENT_ID_MAX_LENGTH = 100
SESSION_ID_MIN_LENGTH = 10


def _encodable(value: str, field_name: str) -> str:
    """Lone surrogates survive JSON decoding but cannot be stored."""
    try:
        value.encode('utf-8')
    except UnicodeEncodeError:
        raise ValidationError(f"{field_name} contains invalid characters")
    return value


class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))

    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        """Validate password strength."""
        errors = []

        if not password:
            errors.append("Password is required")
        elif len(password) < 6:
            errors.append("Password must be at least 6 characters long")
        elif len(password) > 128:
            errors.append("Password is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_required(data: Dict, fields: List[str]) -> None:
        """Raise if any field is missing, None or empty."""
        missing = [f for f in fields if data.get(f) in (None, '')]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                fields={f: 'Required' for f in missing}
            )

    @staticmethod
    def validate_string(value: Any, field_name: str, max_length: Optional[int] = None) -> str:
        """Return the trimmed string or raise."""
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        if not value.strip():
            raise ValidationError(f"{field_name} cannot be empty")

        if max_length and len(value) > max_length:
            raise ValidationError(f"{field_name} must be at most {max_length} characters")

        return _encodable(value.strip(), field_name)

    @staticmethod
    def validate_student_id(student_id: Any) -> str:
        return Validator.validate_string(student_id, "Student ID", STUDENT_ID_MAX_LENGTH)

    @staticmethod
    def validate_session_id(session_id: Any) -> str:
        if not isinstance(session_id, str) or len(session_id) < SESSION_ID_MIN_LENGTH:
            raise ValidationError("Invalid session ID format")
        return _encodable(session_id, "Session ID")

    @staticmethod
    def validate_optional_string(value: Any, field_name: str) -> Optional[str]:
        """Empty values become None; anything else must be a string."""
        if value in (None, ''):
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")
        return _encodable(value, field_name)


def parse_submission_input(
    data: Any,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> SubmissionInput:
    """Build a SubmissionInput from a decoded JSON body."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be JSON")

    Validator.validate_required(data, ['studentId', 'sessionId', 'token'])

    token = data['token']
    if not isinstance(token, str):
        raise ValidationError("token must be a string")

    return SubmissionInput(
        session_id=Validator.validate_session_id(data['sessionId']),
        student_id=Validator.validate_student_id(data['studentId']),
        token=token,
        selfie_image=Validator.validate_optional_string(data.get('selfieImage'), 'selfieImage'),
        liveness_action=Validator.validate_optional_string(data.get('livenessAction'), 'livenessAction'),
        ip_address=ip_address,
        user_agent=user_agent
    )

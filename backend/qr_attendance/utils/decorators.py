# backend/qr_attendance/utils/decorators.py
"""Custom decorators for authorization."""
from functools import wraps
from flask_jwt_extended import get_jwt_identity
from qr_attendance.services.auth_service import AuthService
from qr_attendance.utils.helpers import error_response


def teacher_required(f):
    """Decorator to require an active teacher account behind the JWT."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = AuthService.get_user_by_id(get_jwt_identity())

        if not user:
            return error_response("User not found", 404, 'NOT_FOUND')

        if not user.is_active:
            return error_response("Account is deactivated", 403, 'AUTHORIZATION_ERROR')

        return f(*args, **kwargs)
    return decorated_function

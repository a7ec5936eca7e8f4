"""Authentication service for teacher accounts."""
from datetime import timedelta
from typing import Optional, Tuple

from flask import current_app
from flask_jwt_extended import create_access_token, create_refresh_token
from qr_attendance import db
from qr_attendance.models.user import User
from qr_attendance.utils.clock import utcnow
from qr_attendance.utils.validators import Validator


class AuthService:
    @staticmethod
    def login(email: str, password: str) -> Tuple[Optional[dict], Optional[str]]:
        """Authenticate user and return tokens."""
        if not email or not password:
            return None, "Email and password are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user:
            return None, "Invalid email or password"

        now = utcnow()
        if user.locked_until and user.locked_until > now:
            return None, "Account is temporarily locked"

        if not user.check_password(password):
            user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
            if user.failed_login_attempts >= current_app.config.get('LOGIN_MAX_ATTEMPTS', 5):
                user.locked_until = now + timedelta(
                    minutes=current_app.config.get('LOGIN_LOCKOUT_MINUTES', 15)
                )
                user.failed_login_attempts = 0
            user.save()
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.failed_login_attempts = 0
        user.locked_until = None
        user.last_login = now
        user.save()

        return {
            "access_token": create_access_token(identity=user.owner_id),
            "refresh_token": create_refresh_token(identity=user.owner_id),
            "user": user.to_dict()
        }, None

    @staticmethod
    def register(email: str, password: str, name: str) -> Tuple[Optional[dict], Optional[str]]:
        """Register new teacher account."""
        if not all([email, password, name]):
            return None, "Email, password and name are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        password_check = Validator.validate_password(password)
        if not password_check["is_valid"]:
            return None, password_check["errors"][0]

        if len(name.strip()) < 2:
            return None, "Name must be at least 2 characters long"

        email = email.lower().strip()
        if User.query.filter_by(email=email).first():
            return None, "Email already exists"

        user = User(
            email=email,
            name=name.strip()
        )
        user.set_password(password)
        user.save()

        return user.to_dict(), None

    @staticmethod
    def get_user_by_id(user_id) -> Optional[User]:
        """Get user by ID."""
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

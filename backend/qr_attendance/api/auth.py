# File: backend/qr_attendance/api/auth.py
"""Authentication API for teacher accounts."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity, create_access_token
from qr_attendance import limiter
from qr_attendance.services.auth_service import AuthService
from qr_attendance.utils.errors import AuthenticationError
from qr_attendance.utils.helpers import success_response, error_response

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/health", methods=["GET"])
@limiter.exempt
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    """Register a teacher account."""
    data = request.get_json(silent=True)

    if not data:
        return error_response("Request body must be JSON", 400, "VALIDATION_ERROR")

    result, error = AuthService.register(
        data.get("email", ""),
        data.get("password", ""),
        data.get("name", "")
    )

    if error:
        status = 409 if error == "Email already exists" else 400
        code = "CONFLICT" if status == 409 else "VALIDATION_ERROR"
        return error_response(error, status, code)

    return success_response(
        data=result,
        message="Registration successful",
        status_code=201
    )


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Teacher login."""
    data = request.get_json(silent=True)

    if not data:
        return error_response("Request body must be JSON", 400, "VALIDATION_ERROR")

    email = (data.get("email") or "").strip()
    password = data.get("password") or ""

    if not email or not password:
        return error_response("Email and password are required", 400, "VALIDATION_ERROR")

    result, error = AuthService.login(email, password)

    if error:
        raise AuthenticationError(error)

    return success_response(
        data=result,
        message="Login successful"
    )


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def get_current_user():
    """Get current user profile."""
    user = AuthService.get_user_by_id(get_jwt_identity())

    if not user:
        return error_response("User not found", 404, "NOT_FOUND")

    return success_response(data=user.to_dict())


@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh_token():
    """Refresh access token."""
    new_access_token = create_access_token(identity=get_jwt_identity())

    return success_response(
        data={"access_token": new_access_token},
        message="Token refreshed successfully"
    )

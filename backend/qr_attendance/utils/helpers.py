"""Helper functions for the application."""
from flask import jsonify
from typing import Any, Optional


def handle_error(error, status_code: int, code: Optional[str] = None):
    """Handle application errors with consistent format."""
    response = {
        'error': True,
        'message': str(error),
        'status_code': status_code
    }

    if code:
        response['code'] = code

    return jsonify(response), status_code


def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code


def error_response(message: str, status_code: int = 400, code: Optional[str] = None):
    """Return consistent error response."""
    return handle_error(message, status_code, code)


def client_ip(request) -> str:
    """Best-effort client address for the audit trail."""
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.headers.get('X-Real-IP') or request.remote_addr or 'unknown'

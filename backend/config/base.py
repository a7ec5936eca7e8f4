"""Base configuration shared by every environment."""
import os
from datetime import timedelta


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # Login lockout
    LOGIN_MAX_ATTEMPTS = 5
    LOGIN_LOCKOUT_MINUTES = 15

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"
    # Dashboards poll listings about once a second
    POLL_RATE_LIMIT = "120 per minute"
    QR_RATE_LIMIT = "30 per minute"
    # Per client address, and per student behind that address
    SUBMIT_RATE_LIMIT = "600 per minute"
    SUBMIT_STUDENT_RATE_LIMIT = "10 per minute"

    # QR tokens; rotating the signing key invalidates every outstanding token
    QR_SIGNING_KEY = os.environ.get('HMAC_SECRET')
    QR_TOKEN_TTL_SECONDS = 10
    QR_REFRESH_INTERVAL_SECONDS = 6

    # Sessions
    SESSION_DEFAULT_TTL_SECONDS = 600
    SESSION_MIN_TTL_SECONDS = 60
    SESSION_MAX_TTL_SECONDS = 3600

    # Storage backend: 'sql' or 'memory'
    ATTENDANCE_STORE = os.environ.get('ATTENDANCE_STORE', 'sql')

    # Selfies arrive as data URIs
    MAX_CONTENT_LENGTH = 4 * 1024 * 1024

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = 'logs/app.log'

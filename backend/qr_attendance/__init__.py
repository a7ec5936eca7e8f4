# File: backend/qr_attendance/__init__.py
"""QR Attendance Service - Application Factory."""
import logging
import os
from flask import Flask, current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)

EXTENSION_KEY = 'qr_attendance'


def create_app(config_name: str = None, store=None, clock=None) -> Flask:
    """Application factory pattern.

    ``store`` and ``clock`` override the configured storage backend and
    the wall clock; tests use them to inject fakes.
    """
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    if not app.config.get('QR_SIGNING_KEY'):
        raise RuntimeError('QR_SIGNING_KEY must be configured')

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    setup_logging(app)
    setup_database(app)
    setup_attendance(app, store=store, clock=clock)
    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    @app.route('/health')
    @limiter.exempt
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'QR Attendance Service',
            'version': '1.0.0'
        })

    return app


def get_attendance():
    """Services bound to the current application."""
    return current_app.extensions[EXTENSION_KEY]


def setup_attendance(app: Flask, store=None, clock=None) -> None:
    """Build the token codec, registry, ledger and coordinator."""
    from qr_attendance.services import AttendanceServices

    app.extensions[EXTENSION_KEY] = AttendanceServices.from_config(app.config, store=store, clock=clock)


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from qr_attendance.api.auth import auth_bp
    from qr_attendance.api.sessions import sessions_bp
    from qr_attendance.api.attendance import attendance_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from qr_attendance.utils.errors import AttendanceError, AuthenticationError
    from qr_attendance.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    def _unauthenticated(message):
        error = AuthenticationError(message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        code = 'RATE_LIMIT_EXCEEDED' if e.code == 429 else None
        return handle_error(e.description, e.code, code)

    @app.errorhandler(Exception)
    def internal_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return handle_error('Internal server error', 500, 'INTERNAL_ERROR')

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return _unauthenticated('Token has expired')

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return _unauthenticated('Invalid token')

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return _unauthenticated('Authorization token required')


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('QR Attendance Service startup')


def setup_database(app: Flask) -> None:
    """Register models with the metadata."""
    with app.app_context():
        from qr_attendance import models  # noqa: F401


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('create-teacher')
    @click.option('--email', prompt='Teacher email')
    @click.option('--name', prompt='Teacher name')
    @click.password_option()
    def create_teacher(email, name, password):
        """Create a teacher account."""
        from qr_attendance.services.auth_service import AuthService

        user, error = AuthService.register(email, password, name)
        if error:
            raise click.ClickException(error)
        click.echo(f"Teacher created: {user['email']} (id {user['id']})")

    @app.cli.command('cleanup-sessions')
    def cleanup_sessions():
        """Mark expired sessions inactive."""
        count = get_attendance().registry.cleanup_expired()
        click.echo(f'Deactivated {count} expired sessions.')

    @app.cli.command('import-roster')
    @click.argument('class_name')
    @click.argument('csv_path', type=click.Path(exists=True, dir_okay=False))
    @click.option('--owner', 'owner_id', required=True, help='Owner (teacher) id')
    def import_roster(class_name, csv_path, owner_id):
        """Load a roster CSV with student_id,name[,email] columns."""
        import pandas as pd
        from qr_attendance.records import RosterEntry

        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
        if 'student_id' not in df.columns:
            raise click.ClickException('Missing column: student_id')

        entries = []
        for row in df.to_dict('records'):
            student_id = row['student_id'].strip()
            if not student_id:
                continue
            entries.append(RosterEntry(
                student_id=student_id,
                name=row.get('name', '').strip(),
                email=row.get('email', '').strip() or None
            ))

        store = get_attendance().store
        class_id = store.add_class(class_name, owner_id)
        count = store.add_roster_entries(class_id, entries)
        click.echo(f'Class {class_name} created with id {class_id} and {count} students.')

# backend/qr_attendance/api/sessions.py
"""Teacher-side session endpoints: start, stop, QR payloads, listings, export."""
from flask import Blueprint, Response, current_app, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from qr_attendance import get_attendance, limiter
from qr_attendance.services.qr_service import QRService
from qr_attendance.utils.decorators import teacher_required
from qr_attendance.utils.errors import ValidationError
from qr_attendance.utils.helpers import success_response
from qr_attendance.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)


def _parse_expiry(value):
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        raise ValidationError("expiryTime must be a number of seconds")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("expiryTime must be a number of seconds")


def _parse_class_id(value):
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        raise ValidationError("classId must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("classId must be an integer")


@sessions_bp.route('', methods=['POST'])
@jwt_required()
@teacher_required
def start_session():
    """Open a new attendance session."""
    data = request.get_json(silent=True) or {}
    owner_id = get_jwt_identity()

    session = get_attendance().registry.create_session(
        owner_id,
        class_id=_parse_class_id(data.get('classId')),
        ttl_seconds=_parse_expiry(data.get('expiryTime'))
    )

    current_app.logger.info(
        'Session started: %s by %s, expires %s',
        session.id, owner_id, session.expires_at.isoformat()
    )

    return success_response(
        data={
            'sessionId': session.id,
            'createdAt': session.created_at.isoformat(),
            'expiresAt': session.expires_at.isoformat(),
            'session': session.to_dict()
        },
        message="Session started",
        status_code=201
    )


@sessions_bp.route('', methods=['GET'])
@jwt_required()
@teacher_required
@limiter.limit(lambda: current_app.config['POLL_RATE_LIMIT'])
def list_sessions():
    """List the caller's sessions, newest first."""
    services = get_attendance()
    sessions = services.registry.list_sessions(get_jwt_identity())

    return success_response(data={
        'sessions': [
            dict(s.to_dict(), usable=services.registry.is_usable(s))
            for s in sessions
        ],
        'count': len(sessions)
    })


@sessions_bp.route('/<session_id>/stop', methods=['POST'])
@jwt_required()
@teacher_required
def stop_session(session_id):
    """Teacher kill switch."""
    session_id = Validator.validate_session_id(session_id)
    session = get_attendance().registry.stop_session(session_id, get_jwt_identity())

    return success_response(data=session.to_dict(), message="Session stopped")


@sessions_bp.route('/<session_id>', methods=['DELETE'])
@jwt_required()
@teacher_required
def delete_session(session_id):
    """Delete a session and every submission recorded for it."""
    session_id = Validator.validate_session_id(session_id)
    removed = get_attendance().registry.delete_session(session_id, get_jwt_identity())

    return success_response(
        data={'sessionId': session_id, 'deletedSubmissions': removed},
        message="Session deleted"
    )


@sessions_bp.route('/<session_id>/qr', methods=['POST'])
@jwt_required()
@teacher_required
@limiter.limit(lambda: current_app.config['QR_RATE_LIMIT'])
def qr_payload(session_id):
    """Issue the next rotating QR payload for a session."""
    session_id = Validator.validate_session_id(session_id)
    services = get_attendance()

    token = services.coordinator.issue_token(session_id, get_jwt_identity())
    encoded = services.codec.encode(token)

    data = {
        'payload': token.to_dict(),
        'token': encoded,
        'expires_in': services.codec.expires_in(token),
        'refresh_interval': services.refresh_interval
    }

    if request.args.get('image', '1') != '0':
        data['qr_image'] = QRService.render_data_uri(encoded)

    return success_response(data=data, message="QR payload generated")


@sessions_bp.route('/<session_id>/submissions', methods=['GET'])
@jwt_required()
@teacher_required
@limiter.limit(lambda: current_app.config['POLL_RATE_LIMIT'])
def list_submissions(session_id):
    """Submissions for one of the caller's sessions."""
    session_id = Validator.validate_session_id(session_id)
    services = get_attendance()
    session = services.registry.get_owned_session(session_id, get_jwt_identity())

    views = services.ledger.list(session.id, class_id=session.class_id)

    current_app.logger.debug('Fetched %d submissions for %s', len(views), session.id)

    return success_response(data={
        'sessionId': session.id,
        'submissions': [v.to_dict() for v in views],
        'count': len(views)
    })


@sessions_bp.route('/<session_id>/export', methods=['GET'])
@jwt_required()
@teacher_required
def export_csv(session_id):
    """Download submissions as CSV."""
    session_id = Validator.validate_session_id(session_id)
    services = get_attendance()
    session = services.registry.get_owned_session(session_id, get_jwt_identity())

    filename = services.ledger.csv_filename(session.id)

    return Response(
        services.ledger.to_csv(session.id),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'}
    )

# File: backend/qr_attendance/api/attendance.py
"""Student-side attendance submission."""
from flask import Blueprint, current_app, request
from flask_limiter.util import get_remote_address
from qr_attendance import get_attendance, limiter
from qr_attendance.utils.errors import AttendanceError
from qr_attendance.utils.helpers import client_ip, success_response
from qr_attendance.utils.validators import parse_submission_input

attendance_bp = Blueprint('attendance', __name__)


def student_rate_key() -> str:
    """Per-student bucket so a classroom behind one NAT is not throttled as one client."""
    data = request.get_json(silent=True)
    student_id = data.get('studentId') if isinstance(data, dict) else None
    return f"{get_remote_address()}:{student_id!r}"


@attendance_bp.route('/health', methods=['GET'])
@limiter.exempt
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')


@attendance_bp.route('/submit', methods=['POST'])
@limiter.limit(lambda: current_app.config['SUBMIT_RATE_LIMIT'])
@limiter.limit(lambda: current_app.config['SUBMIT_STUDENT_RATE_LIMIT'], key_func=student_rate_key)
def submit():
    """Record a student's attendance from a scanned QR payload."""
    data = parse_submission_input(
        request.get_json(silent=True),
        ip_address=client_ip(request),
        user_agent=request.headers.get('User-Agent', 'unknown')
    )

    try:
        submission = get_attendance().coordinator.submit(data)
    except AttendanceError as e:
        current_app.logger.info(
            'Submission rejected for student %s in session %s: %s',
            data.student_id, data.session_id, e.code
        )
        raise

    return success_response(
        data={
            'submission': {
                'id': submission.id,
                'studentId': submission.student_id,
                'timestamp': submission.timestamp.isoformat()
            }
        },
        message="Attendance marked successfully",
        status_code=201
    )

"""Attendance submission rows."""
from qr_attendance import db
from qr_attendance.models.base import BaseModel
from qr_attendance.records import Submission


class AttendanceSubmission(BaseModel):
    """Admitted attendance for one student in one session."""

    __tablename__ = 'attendance_submissions'
    # The storage engine closes the check-then-insert race.
    __table_args__ = (
        db.UniqueConstraint('session_id', 'student_id', name='uq_submission_session_student'),
    )

    session_id = db.Column(
        db.String(64),
        db.ForeignKey('attendance_sessions.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    student_id = db.Column(db.String(100), nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, index=True)
    verified = db.Column(db.Boolean, default=False, nullable=False)

    selfie_image = db.Column(db.Text, nullable=True)
    liveness_action = db.Column(db.String(100), nullable=True)
    qr_token_hash = db.Column(db.String(64), nullable=True)

    # Audit trail
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    @classmethod
    def from_record(cls, submission: Submission) -> 'AttendanceSubmission':
        return cls(
            session_id=submission.session_id,
            student_id=submission.student_id,
            timestamp=submission.timestamp,
            verified=submission.verified,
            selfie_image=submission.selfie_image,
            liveness_action=submission.liveness_action,
            qr_token_hash=submission.qr_token_hash,
            ip_address=submission.ip_address,
            user_agent=submission.user_agent
        )

    def to_record(self) -> Submission:
        return Submission(
            id=self.id,
            session_id=self.session_id,
            student_id=self.student_id,
            timestamp=self.timestamp,
            verified=bool(self.verified),
            selfie_image=self.selfie_image,
            liveness_action=self.liveness_action,
            qr_token_hash=self.qr_token_hash,
            ip_address=self.ip_address,
            user_agent=self.user_agent
        )

    def __repr__(self):
        return f'<AttendanceSubmission {self.session_id}-{self.student_id}>'

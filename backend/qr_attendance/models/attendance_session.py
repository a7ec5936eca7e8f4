"""Attendance session rows."""
from qr_attendance import db
from qr_attendance.models.base import BaseModel
from qr_attendance.records import Session


class AttendanceSession(BaseModel):
    """Session a teacher opens for students to check in to."""

    __tablename__ = 'attendance_sessions'

    id = db.Column(db.String(64), primary_key=True)
    owner_id = db.Column(db.String(64), nullable=False, index=True)
    class_id = db.Column(db.Integer, db.ForeignKey('classes.id', ondelete='SET NULL'), nullable=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    submissions = db.relationship(
        'AttendanceSubmission',
        backref='session',
        lazy='dynamic',
        cascade='all, delete-orphan',
        passive_deletes=True
    )

    @classmethod
    def from_record(cls, session: Session) -> 'AttendanceSession':
        return cls(
            id=session.id,
            owner_id=session.owner_id,
            class_id=session.class_id,
            created_at=session.created_at,
            expires_at=session.expires_at,
            is_active=session.is_active
        )

    def to_record(self) -> Session:
        return Session(
            id=self.id,
            owner_id=self.owner_id,
            class_id=self.class_id,
            created_at=self.created_at,
            expires_at=self.expires_at,
            is_active=bool(self.is_active)
        )

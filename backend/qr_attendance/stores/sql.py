"""SQLAlchemy-backed store."""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from qr_attendance import db
from qr_attendance.models import AttendanceSession, AttendanceSubmission, ClassRoom, RosterStudent
from qr_attendance.records import RosterEntry, Session, Submission
from qr_attendance.stores.base import AttendanceStore
from qr_attendance.utils.errors import DuplicateSubmission


class SqlAttendanceStore(AttendanceStore):
    """Store on top of the Flask-SQLAlchemy session.

    Must be used inside an application context. Uniqueness of submissions
    is enforced by the ``uq_submission_session_student`` constraint.
    """

    def _commit(self) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

    def add_session(self, session: Session) -> Session:
        row = AttendanceSession.from_record(session)
        db.session.add(row)
        self._commit()
        return row.to_record()

    def get_session(self, session_id: str) -> Optional[Session]:
        row = db.session.get(AttendanceSession, session_id)
        return row.to_record() if row else None

    def session_exists(self, session_id: str) -> bool:
        return db.session.get(AttendanceSession, session_id) is not None

    def set_session_active(self, session_id: str, is_active: bool) -> None:
        AttendanceSession.query.filter_by(id=session_id).update({'is_active': is_active})
        self._commit()

    def delete_session(self, session_id: str) -> int:
        removed = AttendanceSubmission.query.filter_by(session_id=session_id).delete()
        AttendanceSession.query.filter_by(id=session_id).delete()
        self._commit()
        return removed

    def list_sessions(self, owner_id: str) -> List[Session]:
        rows = AttendanceSession.query.filter_by(owner_id=owner_id).order_by(
            AttendanceSession.created_at.desc()
        ).all()
        return [row.to_record() for row in rows]

    def deactivate_expired(self, now: datetime) -> int:
        count = AttendanceSession.query.filter(
            AttendanceSession.is_active.is_(True),
            AttendanceSession.expires_at <= now
        ).update({'is_active': False}, synchronize_session=False)
        self._commit()
        return count

    def insert_submission(self, submission: Submission) -> Submission:
        row = AttendanceSubmission.from_record(submission)
        db.session.add(row)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            if self._has_submission(submission.session_id, submission.student_id):
                raise DuplicateSubmission()
            raise
        except SQLAlchemyError:
            db.session.rollback()
            raise
        return row.to_record()

    def _has_submission(self, session_id: str, student_id: str) -> bool:
        return AttendanceSubmission.query.filter_by(
            session_id=session_id,
            student_id=student_id
        ).first() is not None

    def list_submissions(self, session_id: str) -> List[Submission]:
        rows = AttendanceSubmission.query.filter_by(session_id=session_id).order_by(
            AttendanceSubmission.timestamp.desc(),
            AttendanceSubmission.id.desc()
        ).all()
        return [row.to_record() for row in rows]

    def count_submissions(self, session_id: str) -> int:
        return AttendanceSubmission.query.filter_by(session_id=session_id).count()

    def add_class(self, name: str, owner_id: str) -> int:
        row = ClassRoom(name=name, owner_id=owner_id)
        db.session.add(row)
        self._commit()
        return row.id

    def add_roster_entries(self, class_id: int, entries: Iterable[RosterEntry]) -> int:
        count = 0
        for entry in entries:
            existing = RosterStudent.query.filter_by(class_id=class_id, student_id=entry.student_id).first()
            if existing:
                existing.name = entry.name
                existing.email = entry.email
            else:
                db.session.add(RosterStudent(
                    class_id=class_id,
                    student_id=entry.student_id,
                    name=entry.name,
                    email=entry.email
                ))
            count += 1
        self._commit()
        return count

    def roster_lookup(self, class_id: int, student_ids: Iterable[str]) -> Dict[str, RosterEntry]:
        student_ids = list(student_ids)
        if not student_ids:
            return {}
        rows = RosterStudent.query.filter(
            RosterStudent.class_id == class_id,
            RosterStudent.student_id.in_(student_ids)
        ).all()
        return {row.student_id: row.to_record() for row in rows}

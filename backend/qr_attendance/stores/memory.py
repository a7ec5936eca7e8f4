"""In-process store for tests and single-worker deployments."""
import itertools
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from qr_attendance.records import RosterEntry, Session, Submission
from qr_attendance.stores.base import AttendanceStore
from qr_attendance.utils.errors import DuplicateSubmission


class MemoryAttendanceStore(AttendanceStore):
    """Dict-backed store.

    A single lock guards every mutation, so the duplicate check and the
    insert in ``insert_submission`` happen as one step. Records are copied
    on the way in and out so callers never share mutable state with the
    store.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}
        self._submissions: Dict[str, List[Submission]] = {}
        self._submitted: Dict[Tuple[str, str], int] = {}
        self._submission_ids = itertools.count(1)
        self._classes: Dict[int, Tuple[str, str]] = {}
        self._class_ids = itertools.count(1)
        self._rosters: Dict[int, Dict[str, RosterEntry]] = {}

    def add_session(self, session: Session) -> Session:
        with self._lock:
            if session.id in self._sessions:
                raise ValueError(f"Session {session.id} already exists")
            self._sessions[session.id] = session.copy()
            self._submissions[session.id] = []
        return session.copy()

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.copy() if session else None

    def session_exists(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def set_session_active(self, session_id: str, is_active: bool) -> None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session:
                session.is_active = is_active

    def delete_session(self, session_id: str) -> int:
        with self._lock:
            self._sessions.pop(session_id, None)
            removed = self._submissions.pop(session_id, [])
            for submission in removed:
                self._submitted.pop((session_id, submission.student_id), None)
            return len(removed)

    def list_sessions(self, owner_id: str) -> List[Session]:
        with self._lock:
            owned = [s.copy() for s in self._sessions.values() if s.owner_id == owner_id]
        return sorted(owned, key=lambda s: s.created_at, reverse=True)

    def deactivate_expired(self, now: datetime) -> int:
        count = 0
        with self._lock:
            for session in self._sessions.values():
                if session.is_active and session.expires_at <= now:
                    session.is_active = False
                    count += 1
        return count

    def insert_submission(self, submission: Submission) -> Submission:
        key = (submission.session_id, submission.student_id)
        with self._lock:
            if key in self._submitted:
                raise DuplicateSubmission()
            stored = submission.copy(id=next(self._submission_ids))
            self._submissions.setdefault(submission.session_id, []).append(stored)
            self._submitted[key] = stored.id
        return stored.copy()

    def list_submissions(self, session_id: str) -> List[Submission]:
        with self._lock:
            rows = [s.copy() for s in self._submissions.get(session_id, [])]
        # Stable sort keeps later inserts first on equal timestamps
        rows.reverse()
        return sorted(rows, key=lambda s: s.timestamp, reverse=True)

    def count_submissions(self, session_id: str) -> int:
        with self._lock:
            return len(self._submissions.get(session_id, []))

    def add_class(self, name: str, owner_id: str) -> int:
        with self._lock:
            class_id = next(self._class_ids)
            self._classes[class_id] = (name, owner_id)
            self._rosters[class_id] = {}
        return class_id

    def add_roster_entries(self, class_id: int, entries: Iterable[RosterEntry]) -> int:
        count = 0
        with self._lock:
            roster = self._rosters.setdefault(class_id, {})
            for entry in entries:
                roster[entry.student_id] = RosterEntry(entry.student_id, entry.name, entry.email)
                count += 1
        return count

    def roster_lookup(self, class_id: int, student_ids: Iterable[str]) -> Dict[str, RosterEntry]:
        with self._lock:
            roster = self._rosters.get(class_id, {})
            return {sid: roster[sid] for sid in student_ids if sid in roster}

"""Storage interface used by the session registry and submission ledger."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from qr_attendance.records import RosterEntry, Session, Submission


class AttendanceStore(ABC):
    """Persistence for sessions, submissions and class rosters.

    ``insert_submission`` must be atomic: when two callers race on the same
    (session_id, student_id) pair exactly one insert succeeds and the other
    raises DuplicateSubmission.
    """

    # Sessions

    @abstractmethod
    def add_session(self, session: Session) -> Session:
        """Insert a new session; returns the stored copy."""

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[Session]:
        """Return the session or None."""

    @abstractmethod
    def session_exists(self, session_id: str) -> bool:
        pass

    @abstractmethod
    def set_session_active(self, session_id: str, is_active: bool) -> None:
        pass

    @abstractmethod
    def delete_session(self, session_id: str) -> int:
        """Delete a session and its submissions; returns submissions removed."""

    @abstractmethod
    def list_sessions(self, owner_id: str) -> List[Session]:
        """Sessions owned by ``owner_id``, newest first."""

    @abstractmethod
    def deactivate_expired(self, now: datetime) -> int:
        """Mark active sessions with ``expires_at <= now`` inactive."""

    # Submissions

    @abstractmethod
    def insert_submission(self, submission: Submission) -> Submission:
        """Atomically insert; raises DuplicateSubmission on conflict."""

    @abstractmethod
    def list_submissions(self, session_id: str) -> List[Submission]:
        """Submissions for a session, most recent first."""

    @abstractmethod
    def count_submissions(self, session_id: str) -> int:
        pass

    # Roster

    @abstractmethod
    def add_class(self, name: str, owner_id: str) -> int:
        """Create a class and return its id."""

    @abstractmethod
    def add_roster_entries(self, class_id: int, entries: Iterable[RosterEntry]) -> int:
        pass

    @abstractmethod
    def roster_lookup(self, class_id: int, student_ids: Iterable[str]) -> Dict[str, RosterEntry]:
        """Map student_id to roster entry for the given class."""

"""Session lifecycle: created, active, then stopped or expired."""
import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional

from qr_attendance.records import Session
from qr_attendance.stores.base import AttendanceStore
from qr_attendance.utils.clock import SystemClock
from qr_attendance.utils.errors import (
    AuthorizationError,
    SessionExpired,
    SessionInactiveOrExpired,
    SessionNotFound,
    SessionStopped,
)

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = 600
MIN_SESSION_TTL = 60
MAX_SESSION_TTL = 3600


def generate_session_id(now: datetime) -> str:
    """SESSION_<yyyymmddHHMM>_<random hex>; the prefix helps when reading logs."""
    return f"SESSION_{now.strftime('%Y%m%d%H%M')}_{secrets.token_hex(4)}"


class SessionRegistry:
    """Owns sessions, their expiry and the teacher's kill switch."""

    def __init__(
        self,
        store: AttendanceStore,
        clock: Optional[SystemClock] = None,
        default_ttl: int = DEFAULT_SESSION_TTL,
        min_ttl: int = MIN_SESSION_TTL,
        max_ttl: int = MAX_SESSION_TTL
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.default_ttl = default_ttl
        self.min_ttl = min_ttl
        self.max_ttl = max_ttl

    def clamp_ttl(self, ttl_seconds: Optional[int]) -> int:
        """Out-of-range values are clamped, not rejected."""
        if not ttl_seconds:
            return self.default_ttl
        return max(self.min_ttl, min(self.max_ttl, int(ttl_seconds)))

    def create_session(
        self,
        owner_id: str,
        class_id: Optional[int] = None,
        ttl_seconds: Optional[int] = None
    ) -> Session:
        ttl = self.clamp_ttl(ttl_seconds)
        now = self.clock.now()

        session_id = generate_session_id(now)
        while self.store.session_exists(session_id):
            session_id = generate_session_id(now)

        session = self.store.add_session(Session(
            id=session_id,
            owner_id=owner_id,
            class_id=class_id,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
            is_active=True
        ))

        logger.info("Session %s created by %s (ttl=%ss)", session.id, owner_id, ttl)
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self.store.get_session(session_id)

    def get_owned_session(self, session_id: str, owner_id: str) -> Session:
        """Fetch a session the caller owns.

        Raises SessionNotFound when absent and AuthorizationError when it
        belongs to someone else. HTTP callers may present both as 404.
        """
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFound()
        if session.owner_id != owner_id:
            raise AuthorizationError("Session belongs to another teacher")
        return session

    def usability_error(self, session: Session) -> Optional[SessionInactiveOrExpired]:
        """Why the session cannot admit submissions, or None if it can."""
        if not session.is_active:
            return SessionStopped()
        if self.clock.now() >= session.expires_at:
            return SessionExpired()
        return None

    def is_usable(self, session: Session) -> bool:
        return self.usability_error(session) is None

    def stop_session(self, session_id: str, owner_id: str) -> Session:
        session = self.get_owned_session(session_id, owner_id)
        self.store.set_session_active(session_id, False)
        logger.info("Session %s stopped by %s", session_id, owner_id)
        return session.copy(is_active=False)

    def delete_session(self, session_id: str, owner_id: str) -> int:
        """Delete a session together with its submissions."""
        self.get_owned_session(session_id, owner_id)
        removed = self.store.delete_session(session_id)
        logger.info("Session %s deleted by %s with %d submissions", session_id, owner_id, removed)
        return removed

    def list_sessions(self, owner_id: str) -> List[Session]:
        return self.store.list_sessions(owner_id)

    def cleanup_expired(self) -> int:
        """Flag expired sessions inactive. Admission never depends on this."""
        count = self.store.deactivate_expired(self.clock.now())
        if count:
            logger.info("Deactivated %d expired sessions", count)
        return count

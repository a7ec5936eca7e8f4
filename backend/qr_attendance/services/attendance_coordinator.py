"""Submission admission pipeline."""
import logging

from qr_attendance.records import Submission, SubmissionInput
from qr_attendance.services.session_registry import SessionRegistry
from qr_attendance.services.submission_ledger import SubmissionLedger
from qr_attendance.services.token_codec import QRToken, TokenCodec, hash_token
from qr_attendance.utils.errors import (
    InvalidOrExpiredToken,
    SessionMismatch,
    SessionNotFound,
)

logger = logging.getLogger(__name__)


class AttendanceCoordinator:
    """Validates a scanned token and records the student's attendance.

    The stateless checks (parse, signature, session binding) run before
    any storage access so that junk requests never touch shared state.
    """

    def __init__(self, codec: TokenCodec, registry: SessionRegistry, ledger: SubmissionLedger):
        self.codec = codec
        self.registry = registry
        self.ledger = ledger

    def submit(self, data: SubmissionInput) -> Submission:
        token = self.codec.parse(data.token)

        if not self.codec.verify(token):
            raise InvalidOrExpiredToken()

        if token.sid != data.session_id:
            raise SessionMismatch()

        session = self.registry.get_session(data.session_id)
        if session is None:
            raise SessionNotFound()

        error = self.registry.usability_error(session)
        if error is not None:
            raise error

        submission = self.ledger.admit(data.session_id, data.student_id, Submission(
            session_id=data.session_id,
            student_id=data.student_id,
            timestamp=None,
            verified=True,
            selfie_image=data.selfie_image,
            liveness_action=data.liveness_action,
            qr_token_hash=hash_token(data.token),
            ip_address=data.ip_address,
            user_agent=data.user_agent
        ))

        logger.info(
            "Submission %s admitted for student %s in session %s",
            submission.id, submission.student_id, submission.session_id
        )
        return submission

    def issue_token(self, session_id: str, owner_id: str) -> QRToken:
        """Sign a fresh payload for a usable session owned by the caller."""
        session = self.registry.get_owned_session(session_id, owner_id)

        error = self.registry.usability_error(session)
        if error is not None:
            raise error

        return self.codec.generate(session.id)

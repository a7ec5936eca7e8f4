"""Plain records passed between the stores and the services.

The stores hand these out instead of ORM instances so that the services
behave the same whichever backend is configured.
"""
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class Session:
    """An attendance session opened by a teacher."""

    id: str
    owner_id: str
    created_at: datetime
    expires_at: datetime
    is_active: bool = True
    class_id: Optional[int] = None

    def copy(self, **changes) -> 'Session':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'class_id': self.class_id,
            'created_at': self.created_at.isoformat(),
            'expires_at': self.expires_at.isoformat(),
            'is_active': self.is_active
        }


@dataclass
class Submission:
    """One admitted attendance record. Never mutated after creation."""

    session_id: str
    student_id: str
    timestamp: Optional[datetime]
    verified: bool
    selfie_image: Optional[str] = None
    liveness_action: Optional[str] = None
    qr_token_hash: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    id: Optional[int] = None

    def copy(self, **changes) -> 'Submission':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['timestamp'] = self.timestamp.isoformat()
        # Selfies are large; list views never need them.
        result.pop('selfie_image')
        return result


@dataclass
class RosterEntry:
    student_id: str
    name: str
    email: Optional[str] = None


@dataclass
class SubmissionView:
    """A submission joined with roster details for display."""

    submission: Submission
    student_name: Optional[str] = None
    student_email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentId': self.submission.student_id,
            'studentName': self.student_name,
            'studentEmail': self.student_email,
            'timestamp': self.submission.timestamp.isoformat(),
            'verified': self.submission.verified,
            'livenessAction': self.submission.liveness_action
        }


@dataclass
class SubmissionInput:
    """Already-validated submission request."""

    session_id: str
    student_id: str
    token: str
    selfie_image: Optional[str] = None
    liveness_action: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

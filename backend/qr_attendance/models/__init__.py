"""Models package with all models."""
from .base import BaseModel
from .user import User
from .roster import ClassRoom, RosterStudent
from .attendance_session import AttendanceSession
from .attendance import AttendanceSubmission

__all__ = [
    'BaseModel', 'User',
    'ClassRoom', 'RosterStudent',
    'AttendanceSession', 'AttendanceSubmission'
]

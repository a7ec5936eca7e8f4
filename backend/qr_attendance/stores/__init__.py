"""Storage backends."""
from .base import AttendanceStore
from .memory import MemoryAttendanceStore

__all__ = ['AttendanceStore', 'MemoryAttendanceStore', 'create_store']


def create_store(kind: str) -> AttendanceStore:
    """Build the backend named by the ATTENDANCE_STORE setting."""
    if kind == 'memory':
        return MemoryAttendanceStore()
    if kind == 'sql':
        from .sql import SqlAttendanceStore
        return SqlAttendanceStore()
    raise ValueError(f"Unknown attendance store: {kind}")

"""Time sources used by the token codec and session registry."""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_epoch(value: datetime) -> int:
    """Convert a naive UTC datetime to unix seconds."""
    return int(value.replace(tzinfo=timezone.utc).timestamp())


class SystemClock:
    """Wall clock."""

    def now(self) -> datetime:
        return utcnow()

    def timestamp(self) -> int:
        return to_epoch(self.now())


class FrozenClock(SystemClock):
    """Manually advanced clock for tests and simulations."""

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2026, 1, 5, 9, 0, 0)

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)

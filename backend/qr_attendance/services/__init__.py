"""Attendance services and the wiring that binds them together."""
from dataclasses import dataclass
from typing import Mapping, Optional

from qr_attendance.services.attendance_coordinator import AttendanceCoordinator
from qr_attendance.services.session_registry import SessionRegistry
from qr_attendance.services.submission_ledger import SubmissionLedger
from qr_attendance.services.token_codec import TokenCodec
from qr_attendance.stores import AttendanceStore, create_store
from qr_attendance.utils.clock import SystemClock


@dataclass
class AttendanceServices:
    """One set of collaborators per application."""

    store: AttendanceStore
    codec: TokenCodec
    registry: SessionRegistry
    ledger: SubmissionLedger
    coordinator: AttendanceCoordinator
    refresh_interval: int

    @classmethod
    def from_config(
        cls,
        config: Mapping,
        store: Optional[AttendanceStore] = None,
        clock: Optional[SystemClock] = None
    ) -> 'AttendanceServices':
        clock = clock or SystemClock()
        store = store or create_store(config.get('ATTENDANCE_STORE', 'sql'))

        codec = TokenCodec(
            config['QR_SIGNING_KEY'],
            ttl_seconds=config.get('QR_TOKEN_TTL_SECONDS', 10),
            clock=clock
        )
        registry = SessionRegistry(
            store,
            clock=clock,
            default_ttl=config.get('SESSION_DEFAULT_TTL_SECONDS', 600),
            min_ttl=config.get('SESSION_MIN_TTL_SECONDS', 60),
            max_ttl=config.get('SESSION_MAX_TTL_SECONDS', 3600)
        )
        ledger = SubmissionLedger(store, clock=clock)

        return cls(
            store=store,
            codec=codec,
            registry=registry,
            ledger=ledger,
            coordinator=AttendanceCoordinator(codec, registry, ledger),
            refresh_interval=config.get('QR_REFRESH_INTERVAL_SECONDS', 6)
        )

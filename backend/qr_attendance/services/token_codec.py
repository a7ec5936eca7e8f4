"""Signed, short-lived QR payloads.

Wire format (compact JSON)::

    {"sid": "<session id>", "nonce": "<hex>", "exp": <unix seconds>, "sig": "<base64url>"}

``sig`` is HMAC-SHA256 over ``sid + ":" + nonce + ":" + exp`` with the
padding stripped. A token is valid while ``now < exp``.
"""
import base64
import hashlib
import hmac
import json
import re
import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from qr_attendance.utils.clock import SystemClock
from qr_attendance.utils.errors import InvalidTokenFormat

NONCE_BYTES = 8
DEFAULT_TOKEN_TTL = 10  # seconds

NONCE_PATTERN = re.compile(r'[0-9a-fA-F]+')
SIG_PATTERN = re.compile(r'[A-Za-z0-9_-]+')


@dataclass(frozen=True)
class QRToken:
    """Decoded QR payload."""

    sid: str
    nonce: str
    exp: int
    sig: str

    def to_dict(self) -> Dict[str, Any]:
        return {'sid': self.sid, 'nonce': self.nonce, 'exp': self.exp, 'sig': self.sig}


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode('ascii').rstrip('=')


def hash_token(raw_token: str) -> str:
    """One-way hash of the raw token string, kept for audit."""
    return hashlib.sha256(raw_token.encode('utf-8', errors='surrogatepass')).hexdigest()


class TokenCodec:
    """Builds and verifies signed QR payloads.

    Stateless apart from the signing key, so a single instance can be
    shared by every request thread.
    """

    def __init__(
        self,
        key: Union[str, bytes],
        ttl_seconds: int = DEFAULT_TOKEN_TTL,
        clock: Optional[SystemClock] = None
    ):
        if isinstance(key, str):
            key = key.encode('utf-8')
        if not key:
            raise ValueError("Signing key must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("Token TTL must be positive")

        self._key = key
        self.ttl_seconds = ttl_seconds
        self.clock = clock or SystemClock()

    def __repr__(self) -> str:
        return f'<TokenCodec ttl={self.ttl_seconds}s>'

    @staticmethod
    def signing_message(sid: str, nonce: str, exp: int) -> bytes:
        return f"{sid}:{nonce}:{exp}".encode('utf-8')

    def sign(self, sid: str, nonce: str, exp: int) -> str:
        digest = hmac.new(self._key, self.signing_message(sid, nonce, exp), hashlib.sha256).digest()
        return _b64url(digest)

    def generate(self, session_id: str, ttl_seconds: Optional[int] = None) -> QRToken:
        """Issue a fresh token for ``session_id``."""
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError("Token TTL must be positive")

        nonce = secrets.token_hex(NONCE_BYTES)
        exp = self.clock.timestamp() + ttl

        return QRToken(sid=session_id, nonce=nonce, exp=exp, sig=self.sign(session_id, nonce, exp))

    def verify(self, token: Any) -> bool:
        """Check expiry and signature. Malformed input returns False."""
        if not _well_formed(token):
            return False

        if self.clock.timestamp() >= token.exp:
            return False

        expected = self.sign(token.sid, token.nonce, token.exp)
        return hmac.compare_digest(expected.encode('ascii'), token.sig.encode('ascii'))

    def expires_in(self, token: QRToken) -> int:
        """Seconds of validity left, never negative."""
        return max(0, token.exp - self.clock.timestamp())

    @staticmethod
    def encode(token: QRToken) -> str:
        return json.dumps(token.to_dict(), separators=(',', ':'))

    @staticmethod
    def parse(raw: Any) -> QRToken:
        """Decode the JSON payload scanned from a QR code."""
        if isinstance(raw, bytes):
            try:
                raw = raw.decode('utf-8')
            except UnicodeDecodeError:
                raise InvalidTokenFormat()

        if not isinstance(raw, str):
            raise InvalidTokenFormat()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            raise InvalidTokenFormat()

        if not isinstance(data, dict):
            raise InvalidTokenFormat()

        missing = [f for f in ('sid', 'nonce', 'exp', 'sig') if f not in data]
        if missing:
            raise InvalidTokenFormat(f"Invalid token format: missing {', '.join(missing)}")

        token = QRToken(sid=data['sid'], nonce=data['nonce'], exp=data['exp'], sig=data['sig'])
        if not _well_formed(token):
            raise InvalidTokenFormat()

        return token


def _well_formed(token: Any) -> bool:
    if not isinstance(token, QRToken):
        return False
    # bool is an int subclass; reject it explicitly
    if isinstance(token.exp, bool) or not isinstance(token.exp, int):
        return False
    if not all(isinstance(v, str) and v for v in (token.sid, token.nonce, token.sig)):
        return False
    if not NONCE_PATTERN.fullmatch(token.nonce) or not SIG_PATTERN.fullmatch(token.sig):
        return False
    try:
        token.sid.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True

"""Shared fixtures."""
import json

import pytest
from qr_attendance import create_app, db
from qr_attendance.services.session_registry import SessionRegistry
from qr_attendance.services.submission_ledger import SubmissionLedger
from qr_attendance.services.token_codec import TokenCodec
from qr_attendance.services.attendance_coordinator import AttendanceCoordinator
from qr_attendance.stores import MemoryAttendanceStore
from qr_attendance.stores.sql import SqlAttendanceStore
from qr_attendance.utils.clock import FrozenClock

SIGNING_KEY = 'test-hmac-secret'


@pytest.fixture
def clock():
    """Frozen clock shared by the app and the services under test."""
    return FrozenClock()


@pytest.fixture
def app(clock):
    """Create test app."""
    app = create_app('testing', clock=clock)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(params=['memory', 'sql'])
def store(request, app):
    """Each service test runs against both backends."""
    if request.param == 'memory':
        return MemoryAttendanceStore()
    return SqlAttendanceStore()


@pytest.fixture
def codec(clock):
    return TokenCodec(SIGNING_KEY, ttl_seconds=10, clock=clock)


@pytest.fixture
def registry(store, clock):
    return SessionRegistry(store, clock=clock)


@pytest.fixture
def ledger(store, clock):
    return SubmissionLedger(store, clock=clock)


@pytest.fixture
def coordinator(codec, registry, ledger):
    return AttendanceCoordinator(codec, registry, ledger)


def register_and_login(client, email='teacher@example.com', password='password123', name='Test Teacher'):
    client.post('/api/auth/register', json={
        'email': email,
        'password': password,
        'name': name
    })
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    return json.loads(response.data)['data']['access_token']


@pytest.fixture
def auth_headers(client):
    """Bearer headers for a freshly registered teacher."""
    token = register_and_login(client)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def other_auth_headers(client):
    token = register_and_login(client, email='other@example.com', name='Other Teacher')
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def login():
    """Register a teacher on a client and return the access token."""
    return register_and_login

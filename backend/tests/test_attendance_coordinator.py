"""End-to-end admission scenarios."""
import hashlib

import pytest
from qr_attendance.records import SubmissionInput
from qr_attendance.utils.errors import (
    AuthorizationError,
    DuplicateSubmission,
    InvalidOrExpiredToken,
    InvalidTokenFormat,
    SessionExpired,
    SessionInactiveOrExpired,
    SessionMismatch,
    SessionNotFound,
    SessionStopped,
)


def submit(coordinator, session_id, student_id, raw_token, **kwargs):
    return coordinator.submit(SubmissionInput(
        session_id=session_id,
        student_id=student_id,
        token=raw_token,
        **kwargs
    ))


@pytest.fixture
def session(registry):
    return registry.create_session('teacher-1', ttl_seconds=600)


@pytest.fixture
def raw_token(coordinator, codec, session):
    return codec.encode(coordinator.issue_token(session.id, 'teacher-1'))


def test_submit_then_duplicate_then_other_student(coordinator, ledger, session, raw_token):
    first = submit(coordinator, session.id, 'S1', raw_token)
    assert first.verified is True
    assert first.student_id == 'S1'

    with pytest.raises(DuplicateSubmission) as exc:
        submit(coordinator, session.id, 'S1', raw_token)
    assert exc.value.code == 'ALREADY_SUBMITTED'

    second = submit(coordinator, session.id, 'S2', raw_token)
    assert second.student_id == 'S2'
    assert ledger.count(session.id) == 2


def test_submission_keeps_hash_not_raw_token(coordinator, ledger, session, raw_token):
    submit(coordinator, session.id, 'S1', raw_token,
           selfie_image='data:image/png;base64,AAAA', liveness_action='blink',
           ip_address='10.0.0.1', user_agent='pytest')

    stored = ledger.list(session.id)[0].submission
    assert stored.qr_token_hash == hashlib.sha256(raw_token.encode()).hexdigest()
    assert raw_token not in stored.to_dict().values()
    assert stored.liveness_action == 'blink'
    assert stored.selfie_image == 'data:image/png;base64,AAAA'
    assert stored.ip_address == '10.0.0.1'
    assert stored.user_agent == 'pytest'


def test_expired_token_rejected_without_submission(coordinator, ledger, session, raw_token, clock):
    clock.advance(11)

    with pytest.raises(InvalidOrExpiredToken) as exc:
        submit(coordinator, session.id, 'S1', raw_token)

    assert exc.value.code == 'INVALID_OR_EXPIRED_TOKEN'
    assert ledger.count(session.id) == 0


def test_stopped_session_rejects_fresh_token(coordinator, registry, codec, ledger, session):
    registry.stop_session(session.id, 'teacher-1')
    raw = codec.encode(codec.generate(session.id))

    with pytest.raises(SessionInactiveOrExpired) as exc:
        submit(coordinator, session.id, 'S1', raw)

    assert isinstance(exc.value, SessionStopped)
    assert exc.value.code == 'SESSION_INACTIVE'
    assert ledger.count(session.id) == 0


def test_expired_session_rejects_fresh_token(coordinator, registry, codec, ledger, clock):
    session = registry.create_session('teacher-1', ttl_seconds=60)
    clock.advance(60)
    raw = codec.encode(codec.generate(session.id))

    with pytest.raises(SessionExpired) as exc:
        submit(coordinator, session.id, 'S1', raw)

    assert exc.value.code == 'SESSION_EXPIRED'
    assert ledger.count(session.id) == 0


def test_token_for_other_session_rejected(coordinator, registry, ledger, session, raw_token):
    other = registry.create_session('teacher-1')

    with pytest.raises(SessionMismatch):
        submit(coordinator, other.id, 'S1', raw_token)

    assert ledger.count(other.id) == 0


def test_unknown_session(coordinator, codec):
    raw = codec.encode(codec.generate('SESSION_000000000000_deadbeef'))

    with pytest.raises(SessionNotFound) as exc:
        submit(coordinator, 'SESSION_000000000000_deadbeef', 'S1', raw)

    assert exc.value.status_code == 404


@pytest.mark.parametrize('raw', ['not json', '{}', '{"sid": "x"}'])
def test_malformed_token(coordinator, session, raw):
    with pytest.raises(InvalidTokenFormat) as exc:
        submit(coordinator, session.id, 'S1', raw)

    assert exc.value.code == 'INVALID_TOKEN_FORMAT'
    assert exc.value.status_code == 400


def test_forged_signature(coordinator, codec, session):
    token = codec.generate(session.id)
    forged = codec.encode(token).replace(token.sig, 'A' * len(token.sig))

    with pytest.raises(InvalidOrExpiredToken):
        submit(coordinator, session.id, 'S1', forged)


def test_stateless_checks_run_before_storage(coordinator, codec, store, clock, monkeypatch):
    token = codec.encode(codec.generate('SESSION_000000000000_deadbeef'))
    clock.advance(30)

    def fail(*args, **kwargs):
        raise AssertionError('store should not be touched')

    monkeypatch.setattr(store, 'get_session', fail)
    monkeypatch.setattr(store, 'insert_submission', fail)

    with pytest.raises(InvalidOrExpiredToken):
        submit(coordinator, 'SESSION_000000000000_deadbeef', 'S1', token)


def test_issue_token_requires_owner(coordinator, session):
    with pytest.raises(AuthorizationError):
        coordinator.issue_token(session.id, 'teacher-2')


def test_issue_token_for_stopped_session(coordinator, registry, session):
    registry.stop_session(session.id, 'teacher-1')

    with pytest.raises(SessionStopped):
        coordinator.issue_token(session.id, 'teacher-1')


def test_rotated_tokens_all_admit(coordinator, codec, session, clock):
    first = codec.encode(coordinator.issue_token(session.id, 'teacher-1'))
    clock.advance(6)
    second = codec.encode(coordinator.issue_token(session.id, 'teacher-1'))

    assert first != second
    submit(coordinator, session.id, 'S1', first)
    submit(coordinator, session.id, 'S2', second)


def test_extra_payload_keys_with_surrogates_are_hashed(coordinator, ledger, session, raw_token):
    raw = raw_token[:-1] + ',"note":"\ud800"}'

    submit(coordinator, session.id, 'S1', raw)

    stored = ledger.list(session.id)[0].submission
    assert stored.qr_token_hash == hashlib.sha256(raw.encode('utf-8', errors='surrogatepass')).hexdigest()


def test_surrogate_signature_is_a_format_error(coordinator, session):
    raw = '{"sid": "%s", "nonce": "ab", "exp": 9999999999, "sig": "\\ud800"}' % session.id

    with pytest.raises(InvalidTokenFormat):
        submit(coordinator, session.id, 'S1', raw)

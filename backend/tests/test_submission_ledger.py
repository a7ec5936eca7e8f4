"""Tests for submission admission and export."""
import csv
import io
import threading

import pytest
from config.testing import TestingConfig
from qr_attendance import create_app, db
from qr_attendance.records import RosterEntry, Submission
from qr_attendance.services.submission_ledger import SubmissionLedger
from qr_attendance.stores import MemoryAttendanceStore
from qr_attendance.stores.sql import SqlAttendanceStore
from qr_attendance.utils.errors import DuplicateSubmission


def make_record(**kwargs):
    defaults = {'session_id': '', 'student_id': '', 'timestamp': None, 'verified': True}
    defaults.update(kwargs)
    return Submission(**defaults)


@pytest.fixture
def session(registry):
    return registry.create_session('teacher-1')


def test_admit_creates_submission(ledger, session, clock):
    submission = ledger.admit(session.id, 'S1', make_record(liveness_action='blink'))

    assert submission.id is not None
    assert submission.session_id == session.id
    assert submission.student_id == 'S1'
    assert submission.timestamp == clock.now()
    assert submission.verified is True
    assert submission.liveness_action == 'blink'


def test_second_admit_is_duplicate(ledger, session):
    ledger.admit(session.id, 'S1', make_record())

    with pytest.raises(DuplicateSubmission):
        ledger.admit(session.id, 'S1', make_record(liveness_action='smile'))

    assert ledger.count(session.id) == 1
    assert ledger.list(session.id)[0].submission.liveness_action is None


def test_same_student_in_different_sessions(ledger, registry, session):
    other = registry.create_session('teacher-1')

    ledger.admit(session.id, 'S1', make_record())
    ledger.admit(other.id, 'S1', make_record())

    assert ledger.count(session.id) == 1
    assert ledger.count(other.id) == 1


def test_concurrent_admits_yield_one_success(clock):
    store = MemoryAttendanceStore()
    ledger = SubmissionLedger(store, clock=clock)
    workers = 16
    barrier = threading.Barrier(workers)
    results = []
    results_lock = threading.Lock()

    def attempt():
        barrier.wait()
        try:
            ledger.admit('SESSION_202601050900_abcd1234', 'S1', make_record())
            outcome = 'ok'
        except DuplicateSubmission:
            outcome = 'duplicate'
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count('ok') == 1
    assert results.count('duplicate') == workers - 1
    assert ledger.count('SESSION_202601050900_abcd1234') == 1


def test_concurrent_admits_on_sql_backend(monkeypatch, tmp_path, clock):
    monkeypatch.setattr(TestingConfig, 'SQLALCHEMY_DATABASE_URI', f"sqlite:///{tmp_path / 'attendance.db'}")
    monkeypatch.setattr(TestingConfig, 'SQLALCHEMY_ENGINE_OPTIONS', {
        'connect_args': {'check_same_thread': False, 'timeout': 30}
    }, raising=False)
    app = create_app('testing', clock=clock)
    with app.app_context():
        db.create_all()

    ledger = SubmissionLedger(SqlAttendanceStore(), clock=clock)
    workers = 8
    barrier = threading.Barrier(workers)
    results = []
    results_lock = threading.Lock()

    def attempt():
        with app.app_context():
            barrier.wait()
            try:
                ledger.admit('SESSION_202601050900_abcd1234', 'S1', make_record())
                outcome = 'ok'
            except DuplicateSubmission:
                outcome = 'duplicate'
            except Exception as e:
                outcome = repr(e)
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count('ok') == 1, results
    assert results.count('duplicate') == workers - 1, results
    with app.app_context():
        assert ledger.count('SESSION_202601050900_abcd1234') == 1
        db.drop_all()


def test_list_most_recent_first(ledger, session, clock):
    for student in ('S1', 'S2', 'S3'):
        ledger.admit(session.id, student, make_record())
        clock.advance(5)

    assert [v.submission.student_id for v in ledger.list(session.id)] == ['S3', 'S2', 'S1']


def test_list_enriched_from_roster(ledger, registry, store):
    class_id = store.add_class('Physics 101', 'teacher-1')
    store.add_roster_entries(class_id, [
        RosterEntry('S1', 'Ada Lovelace', 'ada@example.com'),
        RosterEntry('S2', 'Alan Turing'),
    ])
    session = registry.create_session('teacher-1', class_id=class_id)

    ledger.admit(session.id, 'S1', make_record())
    ledger.admit(session.id, 'S9', make_record())

    views = {v.submission.student_id: v for v in ledger.list(session.id, class_id=class_id)}

    assert views['S1'].student_name == 'Ada Lovelace'
    assert views['S1'].student_email == 'ada@example.com'
    assert views['S9'].student_name is None
    assert views['S1'].to_dict()['studentName'] == 'Ada Lovelace'


def test_list_without_class_has_no_names(ledger, session):
    ledger.admit(session.id, 'S1', make_record())
    view = ledger.list(session.id)[0]
    assert view.student_name is None
    assert view.student_email is None


def test_to_csv_header_and_rows(ledger, session, clock):
    ledger.admit(session.id, 'S1', make_record(liveness_action='blink'))
    clock.advance(1)
    ledger.admit(session.id, 'S2', make_record(verified=False))

    rows = list(csv.reader(io.StringIO(ledger.to_csv(session.id))))

    assert rows[0] == ['Student ID', 'Timestamp', 'Verified', 'Liveness Action']
    assert rows[1] == ['S2', clock.now().isoformat(), 'No', '-']
    assert rows[2][0] == 'S1'
    assert rows[2][2:] == ['Yes', 'blink']


def test_to_csv_round_trips_commas_and_quotes(ledger, session):
    students = ['Smith, John', 'O"Brien', 'plain']
    for student in students:
        ledger.admit(session.id, student, make_record(liveness_action='turn left, then right'))

    rows = list(csv.reader(io.StringIO(ledger.to_csv(session.id))))[1:]

    assert len(rows) == len(students)
    assert sorted(r[0] for r in rows) == sorted(students)
    assert all(r[3] == 'turn left, then right' for r in rows)


def test_to_csv_empty_session(ledger, session):
    assert ledger.to_csv(session.id) == '"Student ID","Timestamp","Verified","Liveness Action"\n'


def test_csv_filename():
    assert SubmissionLedger.csv_filename('SESSION_1') == 'attendance-SESSION_1.csv'

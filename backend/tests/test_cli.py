"""Flask CLI commands."""
from qr_attendance import get_attendance
from qr_attendance.models import ClassRoom
from qr_attendance.models.user import User


def test_create_teacher(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'create-teacher', '--email', 'cli@example.com', '--name', 'CLI Teacher',
        '--password', 'password123'
    ])

    assert result.exit_code == 0, result.output
    assert 'Teacher created: cli@example.com' in result.output
    assert User.query.filter_by(email='cli@example.com').first() is not None


def test_create_teacher_rejects_bad_email(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        'create-teacher', '--email', 'nope', '--name', 'CLI Teacher',
        '--password', 'password123'
    ])

    assert result.exit_code != 0
    assert 'Invalid email format' in result.output


def test_cleanup_sessions(app, clock):
    registry = get_attendance().registry
    registry.create_session('1', ttl_seconds=60)
    registry.create_session('1', ttl_seconds=3600)
    clock.advance(61)

    result = app.test_cli_runner().invoke(args=['cleanup-sessions'])

    assert result.exit_code == 0, result.output
    assert 'Deactivated 1 expired sessions.' in result.output


def test_import_roster(app, tmp_path):
    roster = tmp_path / 'roster.csv'
    roster.write_text(
        'student_id,name,email\n'
        'S1,Ada Lovelace,ada@example.com\n'
        'S2,Alan Turing,\n'
        ',Nobody,\n',
        encoding='utf-8'
    )

    result = app.test_cli_runner().invoke(args=[
        'import-roster', 'Physics 101', str(roster), '--owner', '1'
    ])

    assert result.exit_code == 0, result.output
    assert '2 students' in result.output

    classroom = ClassRoom.query.filter_by(name='Physics 101').first()
    found = get_attendance().store.roster_lookup(classroom.id, ['S1', 'S2'])
    assert found['S1'].email == 'ada@example.com'
    assert found['S2'].email is None

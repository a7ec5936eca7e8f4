# File: backend/run.py
"""Application entry point."""
import os
import click
from flask.cli import with_appcontext
from qr_attendance import create_app, get_attendance
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Create Flask app
app = create_app(os.getenv('FLASK_ENV', 'development'))


@app.cli.command('list-sessions')
@click.argument('owner_id')
@with_appcontext
def list_sessions(owner_id):
    """Print a teacher's sessions, newest first."""
    services = get_attendance()
    for session in services.registry.list_sessions(owner_id):
        state = 'usable' if services.registry.is_usable(session) else 'closed'
        click.echo(
            f'{session.id}  {state:6}  expires {session.expires_at.isoformat()}  '
            f'{services.ledger.count(session.id)} submissions'
        )


if __name__ == '__main__':
    # Development server
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '127.0.0.1')
    debug = os.environ.get('FLASK_ENV') == 'development'

    app.run(host=host, port=port, debug=debug)

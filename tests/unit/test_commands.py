from datetime import timedelta

from app import app
from conftest import make_user
from models import Movie, User, UserSession, db
from session_store import _utcnow, open_session
from seed import seed_movies


def test_seed_is_idempotent(client):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed"])
    assert result.exit_code == 0
    assert "Seeding complete!" in result.output
    assert User.query.count() == 1
    assert Movie.query.count() == len(seed_movies)

    result = runner.invoke(args=["seed"])
    assert result.exit_code == 0
    assert "Demo user already exists" in result.output
    assert Movie.query.count() == len(seed_movies)


def test_purge_sessions_command(client):
    user = make_user("gina")
    token = open_session(user)
    open_session(user)
    db.session.get(UserSession, token).expires_at = _utcnow() - timedelta(hours=1)
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["purge-sessions"])
    assert result.exit_code == 0
    assert "Removed 1 expired session(s)" in result.output
    assert UserSession.query.count() == 1

from functools import wraps

from flask import abort, current_app, g, redirect, url_for
from flask_jwt_extended import get_current_user, get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from models import Movie, db


def load_request_principal():
    # Runs before every request; a missing, expired or revoked cookie
    # simply means nobody is logged in.
    g.principal = None
    g.session_token = None
    try:
        verified = verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError) as exc:
        current_app.logger.debug("Ignoring unusable session cookie: %s", exc)
        return
    if verified is None:
        return
    g.principal = get_current_user()
    g.session_token = get_jwt().get("sub")


def current_principal():
    return g.get("principal")


def login_required_view(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if current_principal() is None:
            return redirect(url_for("auth.login_form"))
        return fn(*args, **kwargs)

    return wrapper


def require_owner(movie_id: int) -> Movie:
    """Load a movie and make sure the current principal owns it.

    Aborts with 404 when the movie does not exist and 403 when it belongs to
    someone else. The loaded movie is also bound to ``g.movie``.
    """
    principal = current_principal()
    movie = db.session.get(Movie, movie_id)
    if movie is None:
        abort(404)
    if principal is None or movie.owner_id != principal.id:
        current_app.logger.warning(
            "Denied %s on movie %s owned by user %s",
            principal.username if principal else "anonymous",
            movie.id,
            movie.owner_id,
        )
        abort(403)
    g.movie = movie
    return movie


def owner_required(fn):
    # Use under login_required_view so unauthenticated requests redirect first.
    @wraps(fn)
    def wrapper(*args, **kwargs):
        require_owner(kwargs["movie_id"])
        return fn(*args, **kwargs)

    return wrapper

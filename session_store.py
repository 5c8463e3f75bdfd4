"""Server-held session principals.

A login opens a ``UserSession`` row keyed by a random opaque token. The
client only ever holds that token, wrapped in a signed JWT access cookie
(the JWT ``sub`` claim). Each request resolves the token back to a
``Principal`` through the row, so deleting the row at logout revokes the
cookie even though its signature is still valid.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

from flask import current_app

from models import UserSession, db


class Principal(NamedTuple):
    id: int
    username: str


def _utcnow() -> datetime:
    # Stored naive; SQLite drops tzinfo.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def session_lifetime() -> timedelta:
    return current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]


def open_session(user) -> str:
    token = secrets.token_urlsafe(32)
    db.session.add(
        UserSession(
            token=token,
            user_id=user.id,
            username=user.username,
            expires_at=_utcnow() + session_lifetime(),
        )
    )
    db.session.commit()
    return token


def resolve_principal(token: Optional[str]) -> Optional[Principal]:
    if not token:
        return None
    row = UserSession.query.filter(
        UserSession.token == token,
        UserSession.expires_at > _utcnow(),
    ).first()
    if row is None:
        return None
    return Principal(id=row.user_id, username=row.username)


def close_session(token: Optional[str]) -> bool:
    if not token:
        return False
    deleted = UserSession.query.filter_by(token=token).delete()
    db.session.commit()
    return deleted > 0


def purge_expired_sessions() -> int:
    deleted = UserSession.query.filter(UserSession.expires_at <= _utcnow()).delete()
    db.session.commit()
    return deleted


def init_session_store(jwt):
    """Register the JWT callbacks that tie cookies to session rows."""

    @jwt.token_in_blocklist_loader
    def session_revoked(_jwt_header, jwt_payload):
        return resolve_principal(jwt_payload.get("sub")) is None

    @jwt.user_lookup_loader
    def load_principal(_jwt_header, jwt_data):
        return resolve_principal(jwt_data.get("sub"))

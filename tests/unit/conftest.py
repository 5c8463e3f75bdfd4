import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SECRET_KEY", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt")
os.environ.setdefault("PEPPER", "test-pepper")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from app import app, db
from models import Movie, User
from routes.auth_routes import hash_password


@pytest.fixture()
def client():
    app.config.update(TESTING=True)
    with app.app_context():
        db.drop_all()
        db.create_all()
        yield app.test_client()
        db.session.remove()
        db.drop_all()


def register(client, username="alice", email="alice@example.com", password="secret1", confirm=None):
    return client.post(
        "/register",
        data={
            "username": username,
            "email": email,
            "password": password,
            "confirm": password if confirm is None else confirm,
        },
    )


def login(client, email="alice@example.com", password="secret1"):
    return client.post("/login", data={"email": email, "password": password})


def make_user(username, email=None, password="secret1"):
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        password_hash=hash_password(password),
    )
    db.session.add(user)
    db.session.commit()
    return user


def make_movie(owner, name="The Matrix", year=1999, rating=None, **extra):
    movie = Movie(
        name=name,
        description=extra.pop("description", "A long enough description."),
        year=year,
        genres=extra.pop("genres", ["Action"]),
        rating=rating,
        poster_url=extra.pop("poster_url", ""),
        owner_id=owner.id,
        likes=extra.pop("likes", 0),
    )
    db.session.add(movie)
    db.session.commit()
    return movie


def movie_form(**overrides):
    form = {
        "name": "The Matrix",
        "description": "A hacker discovers the truth about reality.",
        "year": "1999",
        "genres": "Action, Sci-Fi",
        "rating": "8.7",
        "posterUrl": "https://example.com/matrix.jpg",
    }
    form.update(overrides)
    return form

import os

import click
from flask.cli import with_appcontext

from models import db, Movie, User
from routes.auth_routes import hash_password
from session_store import purge_expired_sessions

seed_movies = [
    {
        "name": "The Matrix",
        "description": "A hacker learns the world he lives in is a simulation.",
        "year": 1999,
        "genres": ["Action", "Sci-Fi"],
        "rating": 8.7,
    },
    {
        "name": "Spirited Away",
        "description": "A girl wanders into a world of spirits and must find her way home.",
        "year": 2001,
        "genres": ["Animation", "Fantasy"],
        "rating": 8.6,
    },
    {
        "name": "Arrival",
        "description": "A linguist is recruited to talk with visitors from elsewhere.",
        "year": 2016,
        "genres": ["Drama", "Sci-Fi"],
        "rating": 7.9,
    },
    {
        "name": "The Great Train Robbery",
        "description": "An early western short about a train hold-up.",
        "year": 1903,
        "genres": ["Western"],
        "rating": None,
    },
]


@click.command("seed")
@with_appcontext
def seed_command():
    """Create a demo user and a few demo movies."""
    username = os.getenv("DEMO_USERNAME", "demo")
    email = os.getenv("DEMO_EMAIL", "demo@example.com")
    password = os.getenv("DEMO_PASSWORD", "demo123")

    user = User.query.filter_by(email=email).first()
    if not user:
        user = User(username=username, email=email, password_hash=hash_password(password))
        db.session.add(user)
        db.session.flush()
        click.echo("Demo user created!")
    else:
        click.echo("Demo user already exists")

    for entry in seed_movies:
        if Movie.query.filter_by(name=entry["name"], owner_id=user.id).first():
            click.echo(f"Skipping {entry['name']} (already in DB)")
            continue
        db.session.add(Movie(owner_id=user.id, poster_url="", likes=0, **entry))
        click.echo(f"Added movie: {entry['name']}")

    db.session.commit()
    click.echo("Seeding complete!")


@click.command("purge-sessions")
@with_appcontext
def purge_sessions_command():
    """Delete expired login sessions."""
    click.echo(f"Removed {purge_expired_sessions()} expired session(s)")

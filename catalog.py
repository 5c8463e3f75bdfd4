"""Movie listing and mutations.

These helpers only talk to the database. Authentication, validation and
ownership checks are done by the routes before anything here is called.
"""
import math

from models import Comment, Movie, db

PAGE_SIZE = 6
SORT_OPTIONS = ("year", "rating")

# Fields a client can change. owner_id is deliberately absent.
EDITABLE_FIELDS = ("name", "description", "year", "genres", "rating", "poster_url")


def _escape_like(value):
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_movies(search=None, sort=None, page=1):
    query = Movie.query
    if search and search.strip():
        query = query.filter(Movie.name.ilike(f"%{_escape_like(search.strip())}%", escape="\\"))

    if sort == "year":
        query = query.order_by(Movie.year.desc(), Movie.id.asc())
    elif sort == "rating":
        query = query.order_by(Movie.rating.desc().nulls_last(), Movie.id.asc())
    else:
        query = query.order_by(Movie.id.asc())

    if page is None or page < 1:
        page = 1
    # Any page past the end is empty; keep the offset small enough for the driver.
    last_page = max(1, math.ceil(query.order_by(None).count() / PAGE_SIZE))
    page = min(page, last_page + 1)
    return query.paginate(page=page, per_page=PAGE_SIZE, error_out=False)


def create_movie(principal, data):
    movie = Movie(owner_id=principal.id, likes=0)
    for field in EDITABLE_FIELDS:
        setattr(movie, field, data.get(field))
    if movie.poster_url is None:
        movie.poster_url = ""
    db.session.add(movie)
    db.session.commit()
    return movie


def update_movie(movie, data):
    for field in EDITABLE_FIELDS:
        if field in data:
            setattr(movie, field, data[field])
    if movie.poster_url is None:
        movie.poster_url = ""
    db.session.commit()
    return movie


def delete_movie(movie):
    db.session.delete(movie)
    db.session.commit()


def like_movie(movie_id):
    """Increment likes in one UPDATE. Returns False if the movie is gone."""
    updated = (
        Movie.query.filter_by(id=movie_id)
        .update({Movie.likes: Movie.likes + 1}, synchronize_session=False)
    )
    db.session.commit()
    return updated == 1


def add_comment(principal, movie_id, text):
    if db.session.get(Movie, movie_id) is None:
        return None
    comment = Comment(movie_id=movie_id, author=principal.username, text=text)
    db.session.add(comment)
    db.session.commit()
    return comment


def movies_owned_by(user_id):
    return Movie.query.filter_by(owner_id=user_id).order_by(Movie.id.desc()).all()

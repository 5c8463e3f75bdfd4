from flask import Blueprint, abort, current_app, flash, g, redirect, render_template, request, url_for
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

import catalog
from authz import current_principal, login_required_view, owner_required
from models import Movie, db
from schemas import comment_schema, field_errors, movie_schema

movies_bp = Blueprint("movies", __name__, url_prefix="/movies")


def _server_error(message):
    db.session.rollback()
    current_app.logger.exception(message)
    return render_template("error.html", message="Server error"), 500


@movies_bp.route("/", methods=["GET"])
@movies_bp.route("", methods=["GET"])
def list_movies():
    search = request.args.get("search", "")
    sort = request.args.get("sort", "")
    page = request.args.get("page", 1, type=int)

    pagination = catalog.list_movies(search=search, sort=sort, page=page)
    return render_template(
        "movies/index.html",
        movies=pagination.items,
        search=search,
        sort=sort,
        current_page=pagination.page,
        total_pages=pagination.pages,
        title="Movies",
    )


@movies_bp.route("/add", methods=["GET"])
@login_required_view
def add_movie_form():
    return render_template("movies/add.html", errors=[], data={}, title="Add Movie")


@movies_bp.route("/add", methods=["POST"])
@login_required_view
def add_movie():
    try:
        payload = movie_schema.load(request.form.to_dict())
    except ValidationError as exc:
        return render_template(
            "movies/add.html", errors=field_errors(exc), data=request.form, title="Add Movie"
        ), 422

    principal = current_principal()
    try:
        movie = catalog.create_movie(principal, payload)
    except SQLAlchemyError:
        return _server_error("Failed to create movie")

    current_app.logger.info("User %s created movie %s", principal.username, movie.id)
    return redirect(url_for("movies.movie_detail", movie_id=movie.id))


@movies_bp.route("/<int:movie_id>", methods=["GET"])
def movie_detail(movie_id):
    movie = db.get_or_404(Movie, movie_id)
    return render_template("movies/details.html", movie=movie, title=movie.name)


@movies_bp.route("/<int:movie_id>/edit", methods=["GET"])
@login_required_view
@owner_required
def edit_movie_form(movie_id):
    movie = g.movie
    data = {
        "name": movie.name,
        "description": movie.description,
        "year": movie.year,
        "genres": ", ".join(movie.genres or []),
        "rating": "" if movie.rating is None else movie.rating,
        "posterUrl": movie.poster_url,
    }
    return render_template(
        "movies/edit.html", errors=[], data=data, movie_id=movie.id, title="Edit: " + movie.name
    )


@movies_bp.route("/<int:movie_id>", methods=["PUT", "PATCH"])
@login_required_view
@owner_required
def update_movie(movie_id):
    try:
        payload = movie_schema.load(request.form.to_dict())
    except ValidationError as exc:
        return render_template(
            "movies/edit.html",
            errors=field_errors(exc),
            data=request.form,
            movie_id=movie_id,
            title="Edit Movie",
        ), 422

    movie = g.movie
    try:
        catalog.update_movie(movie, payload)
    except SQLAlchemyError:
        return _server_error(f"Failed to update movie {movie_id}")

    current_app.logger.info("User %s updated movie %s", current_principal().username, movie_id)
    return redirect(url_for("movies.movie_detail", movie_id=movie_id))


@movies_bp.route("/<int:movie_id>", methods=["DELETE"])
@login_required_view
@owner_required
def delete_movie(movie_id):
    movie = g.movie
    try:
        catalog.delete_movie(movie)
    except SQLAlchemyError:
        return _server_error(f"Failed to delete movie {movie_id}")

    current_app.logger.info("User %s deleted movie %s", current_principal().username, movie_id)
    return redirect(url_for("movies.list_movies"))


@movies_bp.route("/<int:movie_id>/like", methods=["POST"])
@login_required_view
def like_movie(movie_id):
    try:
        liked = catalog.like_movie(movie_id)
    except SQLAlchemyError:
        return _server_error(f"Failed to like movie {movie_id}")
    if not liked:
        abort(404)
    return redirect(url_for("movies.movie_detail", movie_id=movie_id))


@movies_bp.route("/<int:movie_id>/comment", methods=["POST"])
@login_required_view
def comment_movie(movie_id):
    try:
        payload = comment_schema.load(request.form.to_dict())
    except ValidationError as exc:
        if db.session.get(Movie, movie_id) is None:
            abort(404)
        for error in field_errors(exc):
            flash(error.message, "error")
        return redirect(url_for("movies.movie_detail", movie_id=movie_id))

    try:
        comment = catalog.add_comment(current_principal(), movie_id, payload["comment"])
    except SQLAlchemyError:
        return _server_error(f"Failed to comment on movie {movie_id}")
    if comment is None:
        abort(404)
    return redirect(url_for("movies.movie_detail", movie_id=movie_id))


@movies_bp.route("/<int:movie_id>/comment", methods=["GET"])
def comment_redirect(movie_id):
    return redirect(url_for("movies.movie_detail", movie_id=movie_id))

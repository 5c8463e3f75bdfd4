import os

import bcrypt
from dotenv import load_dotenv
from flask import Blueprint, current_app, g, redirect, render_template, request, url_for
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from models import db, User
from schemas import FieldError, field_errors, login_schema, register_schema
from session_store import close_session, open_session

load_dotenv()

pepper_value = os.getenv("PEPPER")
if pepper_value is None:
    raise RuntimeError("PEPPER environment variable is not set.")
PEPPER = pepper_value.encode('utf-8')

INVALID_CREDENTIALS = "Invalid credentials"

auth_bp = Blueprint("auth", __name__)


def hash_password(password):
    salt = bcrypt.gensalt(rounds=current_app.config["BCRYPT_ROUNDS"])
    password_with_pepper = password.encode('utf-8') + PEPPER
    return bcrypt.hashpw(password_with_pepper, salt)


def verify_password(entered_password, stored_hashed_password):
    entered_password_with_pepper = entered_password.encode('utf-8') + PEPPER
    return bcrypt.checkpw(entered_password_with_pepper, stored_hashed_password)


def _form_echo(*hidden):
    # Re-render values the user typed, never passwords.
    return {key: value for key, value in request.form.items() if key not in hidden}


def _start_session(user, response):
    token = open_session(user)
    set_access_cookies(response, create_access_token(identity=token))
    return response


@auth_bp.route("/register", methods=["GET"])
def register_form():
    return render_template("auth/register.html", errors=[], data={})


@auth_bp.route("/register", methods=["POST"])
def register():
    data = _form_echo("password", "confirm")
    try:
        payload = register_schema.load(request.form.to_dict())
    except ValidationError as exc:
        return render_template("auth/register.html", errors=field_errors(exc), data=data), 422

    errors = []
    if User.query.filter_by(email=payload["email"]).first():
        errors.append(FieldError("email", "Email already in use"))
    if User.query.filter_by(username=payload["username"]).first():
        errors.append(FieldError("username", "Username already taken"))
    if errors:
        return render_template("auth/register.html", errors=errors, data=data), 422

    try:
        user = User(
            username=payload["username"],
            email=payload["email"],
            password_hash=hash_password(payload["password"]),
        )
        db.session.add(user)
        db.session.commit()
        response = _start_session(user, redirect(url_for("movies.list_movies")))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Registration failed for %s", payload["email"])
        return render_template("error.html", message="Server error"), 500

    current_app.logger.info("Registered user %s (id=%s)", user.username, user.id)
    return response


@auth_bp.route("/login", methods=["GET"])
def login_form():
    return render_template("auth/login.html", errors=[], data={})


@auth_bp.route("/login", methods=["POST"])
def login():
    data = _form_echo("password")
    try:
        payload = login_schema.load(request.form.to_dict())
    except ValidationError as exc:
        return render_template("auth/login.html", errors=field_errors(exc), data=data), 422

    user = User.query.filter_by(email=payload["email"]).first()
    if not user or not verify_password(payload["password"], user.password_hash):
        current_app.logger.warning("Rejected login for %s", payload["email"])
        errors = [FieldError("credentials", INVALID_CREDENTIALS)]
        return render_template("auth/login.html", errors=errors, data=data), 401

    try:
        response = _start_session(user, redirect(url_for("movies.list_movies")))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not open session for user %s", user.id)
        return render_template("error.html", message="Server error"), 500

    current_app.logger.info("User %s logged in", user.username)
    return response


@auth_bp.route("/logout", methods=["POST"])
def logout():
    try:
        close_session(g.get("session_token"))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not close session")
        return render_template("error.html", message="Server error"), 500

    principal = g.get("principal")
    if principal is not None:
        current_app.logger.info("User %s logged out", principal.username)
    response = redirect(url_for("auth.login_form"))
    unset_jwt_cookies(response)
    return response

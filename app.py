import os
from datetime import timedelta
from urllib.parse import parse_qs

from dotenv import load_dotenv
from flask import Flask, redirect, render_template, url_for
from flask_jwt_extended import JWTManager

from authz import current_principal, load_request_principal
from models import db
from routes.auth_routes import auth_bp
from routes.movie_routes import movies_bp
from routes.user_routes import user_bp
from seed import purge_sessions_command, seed_command
from session_store import init_session_store

load_dotenv()


class MethodOverrideMiddleware:
    """Let HTML forms send PUT/PATCH/DELETE via ``?_method=`` on a POST."""

    allowed_methods = frozenset(["PUT", "PATCH", "DELETE"])

    def __init__(self, wsgi_app):
        self.wsgi_app = wsgi_app

    def __call__(self, environ, start_response):
        if environ.get("REQUEST_METHOD", "").upper() == "POST":
            query = parse_qs(environ.get("QUERY_STRING", ""))
            method = (
                query.get("_method", [""])[0]
                or environ.get("HTTP_X_HTTP_METHOD_OVERRIDE", "")
            ).upper()
            if method in self.allowed_methods:
                environ["REQUEST_METHOD"] = method
        return self.wsgi_app(environ, start_response)


app = Flask(__name__)
app.wsgi_app = MethodOverrideMiddleware(app.wsgi_app)

session_hours = int(os.getenv("SESSION_HOURS", "24"))

app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///movies.db")
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
app.config['SECRET_KEY'] = os.getenv("SECRET_KEY", "dev-secret-key")
app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret")
app.config["JWT_TOKEN_LOCATION"] = ["cookies"]
app.config["JWT_COOKIE_SECURE"] = os.getenv("JWT_COOKIE_SECURE", "false").lower() == "true"
app.config["JWT_COOKIE_CSRF_PROTECT"] = False
app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours=session_hours)
app.config["JWT_SESSION_COOKIE"] = False
app.config["BCRYPT_ROUNDS"] = int(os.getenv("BCRYPT_ROUNDS", "12"))

app.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

db.init_app(app)

jwt = JWTManager(app)
init_session_store(jwt)

app.register_blueprint(auth_bp)
app.register_blueprint(movies_bp)
app.register_blueprint(user_bp)

app.cli.add_command(seed_command)
app.cli.add_command(purge_sessions_command)

app.before_request(load_request_principal)

with app.app_context():
    db.create_all()


@app.context_processor
def inject_user_context():
    return {"current_user": current_principal()}


@app.errorhandler(403)
def forbidden(_error):
    return render_template("error.html", message="Forbidden"), 403


@app.errorhandler(404)
def not_found(_error):
    return render_template("error.html", message="Not found"), 404


@app.errorhandler(500)
def server_error(_error):
    return render_template("error.html", message="Server error"), 500


@app.route("/")
def home_page():
    return redirect(url_for("movies.list_movies"))


if __name__ == '__main__':
    app.run(debug=True)

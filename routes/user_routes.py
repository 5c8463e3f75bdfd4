from flask import Blueprint, abort, render_template

from authz import current_principal, login_required_view
from catalog import movies_owned_by
from models import User, db

user_bp = Blueprint("users", __name__)


@user_bp.route("/profile", methods=["GET"])
@login_required_view
def profile():
    principal = current_principal()
    user = db.session.get(User, principal.id)
    if user is None:
        abort(404)
    return render_template(
        "profile.html",
        user=user,
        movies=movies_owned_by(user.id),
        title="Profile",
    )

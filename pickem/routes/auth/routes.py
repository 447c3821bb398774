import logging

from flask import jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from pickem import limiter
from pickem.errors import RemoteError, ValidationError
from pickem.models import SessionUser
from pickem.routes.auth import bp
from pickem.services import get_api, get_store, pick_session

logger = logging.getLogger(__name__)


def _start_session(response):
    user = SessionUser.from_auth_response(response or {})
    if user is None:
        raise RemoteError("Identity service returned no user")

    get_store().save_user(user)
    login_user(user)
    logger.info(f"User {user.user_id} logged in")
    return user


@bp.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not name or not email or not password:
        raise ValidationError("Name, email and password are required")

    user = _start_session(get_api().register(name, email, password))
    return jsonify({"user": user.to_dict()}), 201


@bp.route("/login", methods=["POST"])
@limiter.limit("20 per minute")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        raise ValidationError("Email and password are required")

    user = _start_session(get_api().login(email, password))
    return jsonify({"user": user.to_dict()})


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    user = current_user._get_current_object()
    pick_session(user).clear()
    get_store().clear(user.user_id)
    logout_user()
    logger.info(f"User {user.user_id} logged out")
    return jsonify({"success": True})


@bp.route("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})

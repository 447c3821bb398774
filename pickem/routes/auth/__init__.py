from flask import Blueprint

bp = Blueprint("auth", __name__)

from pickem.routes.auth import routes  # noqa: F401, E402

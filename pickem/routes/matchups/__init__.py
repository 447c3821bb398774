from flask import Blueprint

bp = Blueprint("matchups", __name__)

from pickem.routes.matchups import routes  # noqa: F401, E402

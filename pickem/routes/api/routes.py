import logging

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from pickem import cache
from pickem.errors import ValidationError
from pickem.models import Game
from pickem.routes.api import bp
from pickem.services import get_api, pick_session
from pickem.utils.leaderboard import aggregate, rows_from_payload
from pickem.utils.scoring import score_week
from pickem.utils.timezone_utils import format_lock_time, parse_timestamp

logger = logging.getLogger(__name__)


@bp.route("/health")
def health():
    """Liveness check; reports the remote API base URL and cache backend"""
    return jsonify(
        {
            "status": "ok",
            "apiBaseUrl": current_app.config.get("PICKEM_API_BASE_URL"),
            "cache": current_app.config.get("CACHE_TYPE"),
        }
    )


@bp.route("/leaderboard")
@cache.cached(timeout=60, key_prefix="leaderboard")
def leaderboard():
    """Global leaderboard, ranked"""
    rows = rows_from_payload(get_api().fetch_leaderboard())
    return jsonify([row.to_dict() for row in rows])


@bp.route("/lock-time")
def lock_time():
    """Current week and its lock time, with a display string in the app timezone"""
    data = get_api().fetch_lock_time()
    locks_at = parse_timestamp(data.get("lockTime"))
    return jsonify(
        {
            "week": data.get("week"),
            "lockTime": data.get("lockTime"),
            "lockTimeLocal": format_lock_time(locks_at),
        }
    )


@bp.route("/games")
def games():
    week, week_games = get_api().fetch_games(request.args.get("week", type=int))
    return jsonify({"week": week, "games": [game.to_dict() for game in week_games]})


@bp.route("/user-stats")
@login_required
def user_stats():
    """Win/loss record of the logged-in user for the session's week"""
    session = pick_session(current_user._get_current_object())
    if not session.games:
        session.start()
    stats = session.record()
    stats["week"] = session.current_week
    return jsonify(stats)


@bp.route("/score-week", methods=["POST"])
def score():
    """
    Score a week of picks against the supplied games.

    Body: {"games": [Game], "picks": [{"userId", "gameId", "side"}]}
    """
    data = request.get_json(silent=True) or {}
    try:
        week_games = [Game.from_dict(g) for g in data.get("games") or []]
        picks = {
            (str(p["userId"]), str(p["gameId"])): p.get("side", p.get("selectedTeam"))
            for p in data.get("picks") or []
        }
        scores = score_week(week_games, picks)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError("Invalid games or picks payload", detail=str(e)) from e
    return jsonify({"scores": scores})


@bp.route("/aggregate", methods=["POST"])
def aggregate_scores():
    """Body: {"weeks": [{userId: points}], "names": {userId: name}}"""
    data = request.get_json(silent=True) or {}
    weeks = data.get("weeks")
    if not isinstance(weeks, list):
        raise ValidationError("weeks must be a list of score maps")
    try:
        rows = aggregate(weeks, data.get("names"))
    except (AttributeError, TypeError, ValueError) as e:
        raise ValidationError("Invalid weekly scores", detail=str(e)) from e
    return jsonify([row.to_dict() for row in rows])


@bp.route("/users/<name>")
@login_required
def user_by_name(name):
    user = get_api().fetch_user_by_name(name, current_user.token)
    return jsonify({"user": user})

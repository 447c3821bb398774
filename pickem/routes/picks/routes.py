import logging

from flask import jsonify, request
from flask_login import current_user, login_required

from pickem.errors import ValidationError
from pickem.routes.picks import bp
from pickem.services import get_api, pick_session

logger = logging.getLogger(__name__)


def _session():
    return pick_session(current_user._get_current_object())


def _state(session, **extra):
    """Pick session as returned to the client"""
    data = {
        "week": session.current_week,
        "games": [game.to_dict() for game in session.games.values()],
        "picks": {
            game_id: pick.to_dict() for game_id, pick in session.selected_picks().items()
        },
        "hasPicks": session.has_picks,
        "isConfirmed": session.is_confirmed,
        "record": session.record(),
    }
    data.update(extra)
    return jsonify(data)


@bp.route("/week")
@login_required
def week():
    """Load a week's games and the user's confirmed picks (current week by default)"""
    session = _session().start(request.args.get("week", type=int))
    return _state(session)


@bp.route("/state")
@login_required
def state():
    """Session state as last saved, without contacting the remote API"""
    return _state(_session())


@bp.route("/select", methods=["POST"])
@login_required
def select():
    data = request.get_json(silent=True) or {}
    game_id = data.get("gameId")
    side = data.get("side", data.get("selectedTeam"))
    if not game_id or not side:
        raise ValidationError("gameId and side are required")

    session = _session().ensure_catalog()
    session.record_pick(game_id, side)
    return _state(session)


@bp.route("/select/<game_id>", methods=["DELETE"])
@login_required
def discard(game_id):
    session = _session()
    session.discard_draft(game_id)
    return _state(session)


@bp.route("/confirm", methods=["POST"])
@login_required
def confirm():
    session = _session().ensure_catalog()
    merged = session.confirm_picks()
    return _state(session, merged=[pick.to_dict() for pick in merged])


@bp.route("/update", methods=["PUT"])
@login_required
def update():
    session = _session().ensure_catalog()
    merged = session.update_picks()
    return _state(session, merged=[pick.to_dict() for pick in merged])


@bp.route("/<pick_id>", methods=["DELETE"])
@login_required
def delete(pick_id):
    session = _session()
    game_id = session.delete_pick(pick_id)
    return _state(session, deletedGameId=game_id)


@bp.route("/game/<game_id>")
@login_required
def game_pick(game_id):
    """The server's pick for one game, bypassing the session"""
    pick = get_api().fetch_user_pick_for_game(
        current_user.user_id, game_id, current_user.token
    )
    return jsonify({"pick": pick.to_dict() if pick else None})


@bp.route("/game/<game_id>", methods=["DELETE"])
@login_required
def delete_for_game(game_id):
    session = _session()
    session.delete_pick_for_game(game_id)
    return _state(session, deletedGameId=str(game_id))

import logging

from flask import jsonify, request
from flask_login import current_user, login_required

from pickem.routes.leagues import bp
from pickem.services import get_api, league_service
from pickem.services.league_service import league_leaderboard, membership_state
from pickem.utils.leaderboard import rows_from_payload

logger = logging.getLogger(__name__)


def _user():
    return current_user._get_current_object()


def _league_detail(league):
    data = league.to_dict(include_members=True)
    data["membershipStatus"] = membership_state(league, current_user.user_id).value
    data["isCommissioner"] = league.is_commissioner(current_user.user_id)
    return jsonify(data)


@bp.route("", methods=["GET"])
def index():
    """All leagues"""
    return jsonify([league.to_dict() for league in get_api().fetch_leagues()])


@bp.route("", methods=["POST"])
@login_required
def create():
    data = request.get_json(silent=True) or {}
    league = league_service().create_league(data.get("name"), _user())
    return jsonify(league.to_dict()), 201


@bp.route("/mine")
@login_required
def mine():
    """Leagues the logged-in user belongs to"""
    leagues = get_api().fetch_user_leagues(current_user.user_id)
    return jsonify([league.to_dict() for league in leagues])


@bp.route("/<league_id>")
@login_required
def detail(league_id):
    return _league_detail(league_service().load_league(league_id))


@bp.route("/<league_id>", methods=["DELETE"])
@login_required
def delete(league_id):
    service = league_service()
    league = service.load_league(league_id)
    service.delete_league(league, _user())
    return jsonify({"success": True})


@bp.route("/<league_id>/join", methods=["POST"])
@login_required
def join(league_id):
    service = league_service()
    league = service.load_league(league_id)
    status = service.request_join(league, _user())
    logger.info(f"Join request for league {league_id} by {current_user.user_id}")
    return jsonify({"status": status.value})


@bp.route("/<league_id>/leave", methods=["POST"])
@login_required
def leave(league_id):
    service = league_service()
    league = service.load_league(league_id)
    status = service.leave(league, _user())
    return jsonify({"status": status.value})


@bp.route("/<league_id>/requests")
@login_required
def pending_requests(league_id):
    service = league_service()
    league = service.load_league(league_id)
    requests_ = service.pending_requests(league, _user())
    return jsonify([r.to_dict() for r in requests_])


@bp.route("/<league_id>/requests/<request_id>/accept", methods=["POST"])
@login_required
def accept_request(league_id, request_id):
    service = league_service()
    league = service.load_league(league_id)
    accepted = service.accept_request(league, request_id, _user())
    return jsonify(accepted.to_dict())


@bp.route("/<league_id>/requests/<request_id>/reject", methods=["POST"])
@login_required
def reject_request(league_id, request_id):
    service = league_service()
    league = service.load_league(league_id)
    rejected = service.reject_request(league, request_id, _user())
    return jsonify({"success": True, "requestId": rejected.id})


@bp.route("/<league_id>/registration", methods=["POST"])
@login_required
def registration(league_id):
    data = request.get_json(silent=True) or {}
    service = league_service()
    league = service.load_league(league_id)
    is_open = service.set_registration(league, _user(), bool(data.get("open")))
    return jsonify({"registrationOpen": is_open})


@bp.route("/<league_id>/members", methods=["POST"])
@login_required
def add_member(league_id):
    data = request.get_json(silent=True) or {}
    service = league_service()
    league = service.load_league(league_id)
    service.add_user(league, _user(), user_id=data.get("userId"), name=data.get("name"))
    return _league_detail(league)


@bp.route("/<league_id>/leaderboard")
@login_required
def leaderboard(league_id):
    api = get_api()
    league = league_service().load_league(league_id)
    rows = league_leaderboard(league, rows_from_payload(api.fetch_leaderboard()))
    return jsonify({"league": league.to_dict(), "leaderboard": [row.to_dict() for row in rows]})

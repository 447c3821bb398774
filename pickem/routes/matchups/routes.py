import logging

from flask import jsonify, request
from flask_login import current_user, login_required

from pickem.errors import ValidationError
from pickem.routes.matchups import bp
from pickem.services import get_api, league_service, tournament_service
from pickem.services.league_service import league_leaderboard
from pickem.services.tournament_service import (
    champion,
    next_round_pairings,
    seed_bracket,
    tournament_active,
    tournament_state,
)
from pickem.utils.leaderboard import rows_from_payload

logger = logging.getLogger(__name__)


def _user():
    return current_user._get_current_object()


def _bracket(matchups, **extra):
    data = {
        "matchups": [m.to_dict() for m in matchups],
        "state": tournament_state(matchups).value,
        "tournamentActive": tournament_active(matchups),
        "champion": champion(matchups),
    }
    try:
        data["nextRound"] = next_round_pairings(matchups)
    except ValidationError:
        data["nextRound"] = []
    data.update(extra)
    return jsonify(data)


@bp.route("/<league_id>")
@login_required
def index(league_id):
    return _bracket(tournament_service().load(league_id, _user()))


@bp.route("/<league_id>", methods=["POST"])
@login_required
def create(league_id):
    data = request.get_json(silent=True) or {}
    service = tournament_service()
    # Week is checked first so a bad request never reaches the remote API
    service.validate_starting_week(data.get("startingWeek"))
    league = league_service().load_league(league_id)
    tournament_id, matchups = service.create(
        league, _user(), data.get("startingWeek"), tournament_id=data.get("tournamentId")
    )
    return _bracket(matchups, tournamentId=tournament_id), 201


@bp.route("/<league_id>", methods=["DELETE"])
@login_required
def delete(league_id):
    league = league_service().load_league(league_id)
    state = tournament_service().delete(league, _user())
    return jsonify({"state": state.value})


@bp.route("/<league_id>/<matchup_id>/winner", methods=["POST"])
@login_required
def record_winner(league_id, matchup_id):
    service = tournament_service()
    matchups = service.load(league_id, _user())
    updated = service.record_winner(matchups, matchup_id, _user())
    return _bracket(matchups, updated=updated.to_dict())


@bp.route("/<league_id>/settle", methods=["POST"])
@login_required
def settle(league_id):
    data = request.get_json(silent=True) or {}
    try:
        week = int(data["week"])
    except (KeyError, TypeError, ValueError):
        raise ValidationError("week is required") from None
    service = tournament_service()
    matchups = service.load(league_id, _user())
    settled = service.settle_week(matchups, week, _user())
    return _bracket(matchups, settled=[m.to_dict() for m in settled])


@bp.route("/<league_id>/seeding")
@login_required
def seeding(league_id):
    """First-round pairings the league's current standings would produce"""
    service = tournament_service()
    week = service.validate_starting_week(
        request.args.get("week", service.min_starting_week)
    )
    league = league_service().load_league(league_id)
    standings = league_leaderboard(league, rows_from_payload(get_api().fetch_leaderboard()))
    return jsonify(
        {
            "standings": [row.to_dict() for row in standings],
            "pairings": seed_bracket(standings, week),
        }
    )

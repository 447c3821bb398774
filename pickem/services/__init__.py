from flask import current_app

from pickem.models import Game
from pickem.services.league_service import LeagueService
from pickem.services.pick_service import PickSession
from pickem.services.session_store import SessionStore
from pickem.services.tournament_service import TournamentService


def get_api():
    """The remote API client bound to the current app"""
    return current_app.extensions["pickem_api"]


def get_store():
    return current_app.extensions["pickem_store"]


def league_service():
    return LeagueService(get_api())


def tournament_service():
    return TournamentService(
        get_api(), current_app.config.get("TOURNAMENT_MIN_STARTING_WEEK", 14)
    )


def pick_session(user):
    """Pick session for ``user`` restored from the session store"""
    store = get_store()
    session = PickSession(get_api(), user=user, store=store)
    session.restore(store.load_picks(user.user_id))
    if session.current_week is not None:
        cached_games = store.load_games(session.current_week)
        if cached_games:
            session.use_games(Game.from_dict(g) for g in cached_games)
    return session


__all__ = [
    "LeagueService",
    "PickSession",
    "SessionStore",
    "TournamentService",
    "get_api",
    "get_store",
    "league_service",
    "pick_session",
    "tournament_service",
]

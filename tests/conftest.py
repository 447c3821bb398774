"""
Shared pytest fixtures.

FakeAPI stands in for the remote pick'em API: it records every outbound call
in ``calls`` so tests can check exactly what was (or was not) sent, and any
method can be made to fail through ``fail``.
"""

from datetime import datetime, timedelta, timezone

import pytest

from pickem import create_app
from pickem.models import (
    ByPickId,
    Game,
    League,
    Matchup,
    Member,
    MembershipRequest,
    Pick,
    SessionUser,
)


def make_game(game_id, winner=None, week=15, lock_in_hours=48, status=None):
    """Game payload as served by the remote catalog"""
    lock_time = datetime.now(timezone.utc) + timedelta(hours=lock_in_hours)
    data = {
        "id": game_id,
        "week": week,
        "homeTeam": "Packers",
        "awayTeam": "Bears",
        "pointSpread": -3.5,
        "lockTime": lock_time.isoformat(),
        "status": status or "scheduled",
    }
    if winner:
        data["result"] = {"winner": winner, "homeScore": 24, "awayScore": 17}
    return data


def make_matchup(matchup_id, user1, user2, winner=None, round_=1, week=14, league_id="L1"):
    return Matchup(
        id=matchup_id,
        league_id=league_id,
        tournament_id="T1",
        round=round_,
        week=week,
        user1_id=user1,
        user2_id=user2,
        winner_id=winner,
    )


class FakeAPI:
    """In-memory stand-in for PickemAPI"""

    def __init__(self):
        self.calls = []
        self.fail = {}
        self.week = 15
        self.lock_time = "2026-12-14T18:00:00Z"
        self.games = [Game.from_dict(make_game("g1")), Game.from_dict(make_game("g2"))]
        self.user_picks = {}
        self.created_picks = None
        self.updated_picks = None
        self.leaderboard = []
        self.auth_response = {
            "user": {"id": "u1", "name": "Alice", "email": "alice@example.com"},
            "token": "tok-alice",
        }
        self.users = {}
        self.leagues = {}
        self.members = {}
        self.pending = {}
        self.join_response = {"status": "PENDING", "id": "r-new"}
        self.created_league = None
        self.matchups = {}
        self.created_matchups = []
        self.winners = {}

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        error = self.fail.get(name)
        if error is not None:
            raise error

    def call_names(self):
        return [call[0] for call in self.calls]

    # Games

    def fetch_games(self, week=None):
        self._call("fetch_games", week)
        return (week or self.week), list(self.games)

    def fetch_lock_time(self):
        self._call("fetch_lock_time")
        return {"week": self.week, "lockTime": self.lock_time}

    # Picks

    def submit_picks(self, user_id, picks, token):
        picks = list(picks)
        self._call("submit_picks", user_id, picks, token)
        if self.created_picks is not None:
            return self.created_picks
        return [
            Pick(game_id=p.game_id, side=p.side, user_id=user_id, id=f"p-{p.game_id}", week=p.week)
            for p in picks
        ]

    def update_picks(self, user_id, updates, token):
        updates = list(updates)
        self._call("update_picks", user_id, updates, token)
        if self.updated_picks is not None:
            return self.updated_picks
        rows = []
        for update in updates:
            if isinstance(update.key, ByPickId):
                rows.append(Pick(game_id=None, side=update.side, id=update.key.pick_id))
            else:
                game_id = update.key.game_id
                rows.append(Pick(game_id=game_id, side=update.side, id=f"p-{game_id}"))
        return rows

    def delete_pick(self, user_id, pick_id, token):
        self._call("delete_pick", user_id, pick_id, token)
        return {"success": True}

    def fetch_user_picks(self, user_id, token):
        self._call("fetch_user_picks", user_id, token)
        return self.user_picks

    def fetch_user_pick_for_game(self, user_id, game_id, token):
        self._call("fetch_user_pick_for_game", user_id, game_id, token)
        return None

    def fetch_leaderboard(self):
        self._call("fetch_leaderboard")
        return list(self.leaderboard)

    # Users

    def register(self, name, email, password):
        self._call("register", name, email)
        return self.auth_response

    def login(self, email, password):
        self._call("login", email)
        return self.auth_response

    def fetch_user_by_name(self, name, token):
        self._call("fetch_user_by_name", name, token)
        return self.users.get(name)

    # Leagues

    def fetch_leagues(self):
        self._call("fetch_leagues")
        return [League.from_dict(data) for data in self.leagues.values()]

    def fetch_user_leagues(self, user_id):
        self._call("fetch_user_leagues", user_id)
        return [
            League.from_dict(data)
            for league_id, data in self.leagues.items()
            if data["commissionerId"] == user_id
            or any(m.user_id == user_id for m in self.members.get(league_id, []))
        ]

    def fetch_league(self, league_id):
        self._call("fetch_league", league_id)
        return League.from_dict(self.leagues[league_id])

    def create_league(self, name, commissioner_id, token):
        self._call("create_league", name, commissioner_id, token)
        return self.created_league or League(id="L-new", name=name, commissioner_id=commissioner_id)

    def delete_league(self, league_id, commissioner_id, token):
        self._call("delete_league", league_id, commissioner_id, token)

    def fetch_league_members(self, league_id):
        self._call("fetch_league_members", league_id)
        return list(self.members.get(league_id, []))

    def fetch_pending_members(self, league_id):
        self._call("fetch_pending_members", league_id)
        return list(self.pending.get(league_id, []))

    def join_league(self, league_id, user_id, token):
        self._call("join_league", league_id, user_id, token)
        return dict(self.join_response)

    def leave_league(self, league_id, user_id, token):
        self._call("leave_league", league_id, user_id, token)

    def get_pending_requests(self, league_id, commissioner_id):
        self._call("get_pending_requests", league_id, commissioner_id)
        return list(self.pending.get(league_id, []))

    def accept_request(self, league_id, request_id, commissioner_id):
        self._call("accept_request", league_id, request_id, commissioner_id)
        return None

    def reject_request(self, league_id, request_id, commissioner_id):
        self._call("reject_request", league_id, request_id, commissioner_id)

    def add_user_to_league(self, league_id, commissioner_id, user_id=None, name=None):
        self._call("add_user_to_league", league_id, commissioner_id, user_id, name)
        return {"userId": user_id or f"id-{name}", "name": name}

    def close_registration(self, league_id, commissioner_id):
        self._call("close_registration", league_id, commissioner_id)

    def reopen_registration(self, league_id, commissioner_id):
        self._call("reopen_registration", league_id, commissioner_id)

    # Matchups

    def create_tournament(self, league_id, starting_week, tournament_id, token):
        self._call("create_tournament", league_id, starting_week, tournament_id, token)
        return tournament_id, list(self.created_matchups)

    def fetch_matchups(self, league_id, token):
        self._call("fetch_matchups", league_id, token)
        return list(self.matchups.get(league_id, []))

    def delete_tournament(self, league_id, token):
        self._call("delete_tournament", league_id, token)

    def update_matchup_winner(self, matchup_id, token):
        self._call("update_matchup_winner", matchup_id, token)
        for matchups in self.matchups.values():
            for m in matchups:
                if m.id == matchup_id:
                    return Matchup(
                        id=m.id,
                        league_id=m.league_id,
                        tournament_id=m.tournament_id,
                        round=m.round,
                        week=m.week,
                        user1_id=m.user1_id,
                        user2_id=m.user2_id,
                        winner_id=self.winners.get(matchup_id, m.user1_id),
                    )
        raise KeyError(matchup_id)


@pytest.fixture
def fake_api():
    return FakeAPI()


@pytest.fixture
def user():
    return SessionUser("u1", name="Alice", email="alice@example.com", token="tok-alice")


@pytest.fixture
def commissioner():
    return SessionUser("c1", name="Carol", email="carol@example.com", token="tok-carol")


@pytest.fixture
def league_payload():
    return {"id": "L1", "name": "Sunday Squad", "commissionerId": "c1", "registrationOpen": True}


@pytest.fixture
def league(league_payload):
    league = League.from_dict(league_payload)
    league.members = [Member("u2", "Bob")]
    league.pending_requests = [
        MembershipRequest(id="r1", league_id="L1", user_id="u3", name="Dave")
    ]
    return league


@pytest.fixture
def app(fake_api):
    return create_app("testing", api=fake_api)


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def logged_in(client, fake_api):
    """Test client with Alice logged in; login is not counted as a remote call"""
    response = client.post("/auth/login", json={"email": "alice@example.com", "password": "pw"})
    assert response.status_code == 200
    fake_api.calls.clear()
    return client

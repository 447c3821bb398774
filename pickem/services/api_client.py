"""
Client for the remote pick'em API.

The remote service owns games, picks, leagues, matchups and the leaderboard.
This client translates each call into one HTTP request and its response into
the pickem models. It never retries: transport failures and non-2xx answers
surface as RemoteError (NotFoundError for 404) and the caller decides.
"""

import logging

import requests

from pickem.errors import AuthorizationError, NotFoundError, RemoteError, ValidationError
from pickem.models import Game, League, Matchup, MembershipRequest, Member, Pick
from pickem.utils.performance import PerformanceMonitor

logger = logging.getLogger(__name__)


def _require_token(token):
    if not token:
        raise AuthorizationError("Authentication token is required")


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def _commissioner_header(commissioner_id):
    return {"userid": str(commissioner_id)}


class PickemAPI:
    """
    Thin wrapper over the remote pick'em REST API
    """

    def __init__(self, base_url, timeout=15, slow_threshold=1.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.slow_threshold = slow_threshold
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "Pickem-Client/1.0"})

    @classmethod
    def from_config(cls, config):
        return cls(
            config["PICKEM_API_BASE_URL"],
            timeout=config.get("PICKEM_API_TIMEOUT", 15),
            slow_threshold=config.get("SLOW_REQUEST_THRESHOLD", 2.0) / 2,
        )

    def _make_api_request(self, method, path, json=None, params=None, headers=None):
        """Issue one request and return the decoded JSON body (None when empty)"""
        url = f"{self.base_url}{path}"

        with PerformanceMonitor(f"{method} {path}", log_threshold=self.slow_threshold):
            try:
                response = self.session.request(
                    method,
                    url,
                    json=json,
                    params=params,
                    headers=headers,
                    timeout=self.timeout,
                )
            except requests.exceptions.Timeout as e:
                logger.warning(f"Request timeout for {method} {url}")
                raise RemoteError("Remote API timed out", detail=str(e)) from e
            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error for {method} {url}")
                raise RemoteError("Remote API unreachable", detail=str(e)) from e
            except requests.exceptions.RequestException as e:
                logger.error(f"Request failed for {method} {url}: {e}")
                raise RemoteError("Remote API request failed", detail=str(e)) from e

        body = self._decode(response)

        if response.status_code == 404:
            logger.info(f"Not found: {method} {url}")
            raise NotFoundError(self._error_message(body, "Resource not found"), detail=body)

        if response.status_code >= 400:
            if response.status_code >= 500:
                logger.warning(f"Server error {response.status_code}: {method} {url}")
            else:
                logger.error(f"HTTP error {response.status_code}: {method} {url}")
            raise RemoteError(
                self._error_message(body, f"Remote API returned {response.status_code}"),
                detail=body,
                status=response.status_code,
            )

        return body

    @staticmethod
    def _decode(response):
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _error_message(body, default):
        if isinstance(body, dict):
            return body.get("message") or body.get("error") or default
        if isinstance(body, str) and body:
            return body
        return default

    # Games

    def fetch_games(self, week=None):
        """Games for a week (current week when None). Returns (week, [Game])"""
        params = {"week": week} if week is not None else None
        data = self._make_api_request("GET", "/games/current-week-games", params=params) or {}
        resolved_week = data.get("week", week)
        games = [Game.from_dict(g, week=resolved_week) for g in data.get("games") or []]
        return resolved_week, games

    def fetch_lock_time(self):
        """Current week and its lock time: {"week": int, "lockTime": str}"""
        return self._make_api_request("GET", "/games/current-week/lock-time") or {}

    # Picks

    def submit_picks(self, user_id, picks, token):
        """Confirm new picks. ``picks`` is an iterable of Pick; returns created [Pick]"""
        _require_token(token)
        payload = {
            "userId": user_id,
            "picks": [{"gameId": p.game_id, "selectedTeam": p.side.value} for p in picks],
        }
        data = self._make_api_request(
            "POST", "/picks/confirm", json=payload, headers=_bearer(token)
        ) or {}
        created = data.get("createdPicks")
        if created is None:
            logger.warning("Confirm response carried no createdPicks")
            return []
        return [Pick.from_dict(p) for p in created]

    def update_picks(self, user_id, updates, token):
        """Resubmit confirmed picks. ``updates`` is an iterable of PickUpdate"""
        _require_token(token)
        payload = {"userId": user_id, "picks": [u.to_payload() for u in updates]}
        data = self._make_api_request(
            "PUT", "/picks/update-picks", json=payload, headers=_bearer(token)
        ) or {}
        return [Pick.from_dict(p) for p in data.get("updatedPicks") or []]

    def delete_pick(self, user_id, pick_id, token):
        _require_token(token)
        return self._make_api_request(
            "DELETE", f"/picks/{user_id}/{pick_id}", headers=_bearer(token)
        )

    def fetch_user_picks(self, user_id, token):
        """Raw {leagues: {leagueId: {weeks: {week: [pick]}}}} payload"""
        _require_token(token)
        return self._make_api_request("GET", f"/picks/{user_id}", headers=_bearer(token)) or {}

    def fetch_user_pick_for_game(self, user_id, game_id, token):
        _require_token(token)
        data = self._make_api_request(
            "GET", f"/picks/{user_id}/{game_id}", headers=_bearer(token)
        )
        return Pick.from_dict(data) if data else None

    # Leaderboard

    def fetch_leaderboard(self):
        return self._make_api_request("GET", "/leaderboard") or []

    # Users

    def register(self, name, email, password):
        return self._make_api_request(
            "POST", "/users/register", json={"name": name, "email": email, "password": password}
        )

    def login(self, email, password):
        return self._make_api_request(
            "POST", "/users/login", json={"email": email, "password": password}
        )

    def fetch_user_by_name(self, name, token):
        if not name:
            raise ValidationError("Name parameter is required")
        _require_token(token)
        data = self._make_api_request("GET", f"/users/user/{name}", headers=_bearer(token)) or {}
        return data.get("user")

    # Leagues

    def fetch_leagues(self):
        return [League.from_dict(l) for l in self._make_api_request("GET", "/leagues") or []]

    def fetch_user_leagues(self, user_id):
        data = self._make_api_request("GET", f"/leagues/user/{user_id}") or []
        return [League.from_dict(l) for l in data]

    def fetch_league(self, league_id):
        return League.from_dict(self._make_api_request("GET", f"/leagues/{league_id}"))

    def create_league(self, name, commissioner_id, token):
        _require_token(token)
        data = self._make_api_request(
            "POST",
            "/leagues",
            json={"name": name, "commissionerId": commissioner_id},
            headers=_bearer(token),
        )
        return League.from_dict(data.get("league", data))

    def delete_league(self, league_id, commissioner_id, token):
        _require_token(token)
        headers = _bearer(token)
        headers.update(_commissioner_header(commissioner_id))
        return self._make_api_request("DELETE", f"/leagues/{league_id}", headers=headers)

    def fetch_league_members(self, league_id):
        data = self._make_api_request("GET", f"/league-members/{league_id}/members") or []
        return [Member.from_dict(m) for m in data]

    def fetch_pending_members(self, league_id):
        data = self._make_api_request("GET", f"/league-members/{league_id}/pending-members") or []
        return [MembershipRequest.from_dict(dict(r, leagueId=r.get("leagueId", league_id))) for r in data]

    def join_league(self, league_id, user_id, token):
        """Request to join; the remote answers {"status": "PENDING", ...}"""
        _require_token(token)
        return self._make_api_request(
            "POST",
            "/league-members/join",
            json={"leagueId": league_id, "userId": user_id},
            headers=_bearer(token),
        ) or {}

    def leave_league(self, league_id, user_id, token):
        _require_token(token)
        return self._make_api_request(
            "POST",
            "/league-members/leave",
            json={"leagueId": league_id, "userId": user_id},
            headers=_bearer(token),
        )

    def get_pending_requests(self, league_id, commissioner_id):
        data = self._make_api_request(
            "GET",
            f"/leagues/{league_id}/pending-requests",
            headers=_commissioner_header(commissioner_id),
        ) or []
        return [MembershipRequest.from_dict(dict(r, leagueId=r.get("leagueId", league_id))) for r in data]

    def accept_request(self, league_id, request_id, commissioner_id):
        data = self._make_api_request(
            "PUT",
            f"/leagues/{league_id}/requests/{request_id}/accept",
            headers=_commissioner_header(commissioner_id),
        )
        if isinstance(data, dict) and data.get("id") is not None:
            return MembershipRequest.from_dict(dict(data, leagueId=data.get("leagueId", league_id)))
        return None

    def reject_request(self, league_id, request_id, commissioner_id):
        return self._make_api_request(
            "DELETE",
            f"/leagues/{league_id}/requests/{request_id}/reject",
            headers=_commissioner_header(commissioner_id),
        )

    def add_user_to_league(self, league_id, commissioner_id, user_id=None, name=None):
        if user_id:
            body = {"userId": user_id}
        elif name:
            body = {"name": name}
        else:
            raise ValidationError("Either userId or name must be provided.")
        return self._make_api_request(
            "POST",
            f"/leagues/{league_id}/add-user",
            json=body,
            headers=_commissioner_header(commissioner_id),
        )

    def close_registration(self, league_id, commissioner_id):
        return self._make_api_request(
            "POST",
            f"/leagues/{league_id}/close-registration",
            json={"commissionerId": commissioner_id},
        )

    def reopen_registration(self, league_id, commissioner_id):
        return self._make_api_request(
            "POST",
            f"/leagues/{league_id}/reopen-registration",
            json={"commissionerId": commissioner_id},
        )

    # Matchups

    def create_tournament(self, league_id, starting_week, tournament_id, token):
        """Returns (tournament_id, [Matchup])"""
        _require_token(token)
        data = self._make_api_request(
            "POST",
            "/matchups/create-tournament",
            json={
                "leagueId": league_id,
                "startingWeek": starting_week,
                "tournamentId": tournament_id,
            },
            headers=_bearer(token),
        ) or {}
        matchups = [Matchup.from_dict(m) for m in data.get("matchups") or []]
        return data.get("tournamentId") or tournament_id, matchups

    def fetch_matchups(self, league_id, token):
        if not league_id:
            raise ValidationError("leagueId is required")
        _require_token(token)
        data = self._make_api_request("GET", f"/matchups/{league_id}", headers=_bearer(token)) or {}
        return [Matchup.from_dict(m) for m in data.get("matchups") or []]

    def delete_tournament(self, league_id, token):
        if not league_id:
            raise ValidationError("League ID is required.")
        _require_token(token)
        return self._make_api_request(
            "DELETE", f"/matchups/delete/{league_id}", headers=_bearer(token)
        )

    def update_matchup_winner(self, matchup_id, token):
        _require_token(token)
        data = self._make_api_request(
            "PATCH", f"/matchups/update-winner/{matchup_id}", headers=_bearer(token)
        )
        return Matchup.from_dict(data.get("matchup", data))

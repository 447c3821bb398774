"""
League membership

Per (user, league) the membership moves NONE -> PENDING -> ACCEPTED, with
PENDING -> NONE (cancelled or rejected) and ACCEPTED -> NONE (left). The
commissioner is always an accepted member and never goes through these
transitions. Role and state checks run before the remote call; the League
object is only changed after the remote API accepted the action.
"""

import logging

from pickem.errors import AuthorizationError, NotFoundError, ValidationError
from pickem.models import Member, MembershipRequest, MembershipState, RequestState
from pickem.utils.leaderboard import rank_rows

logger = logging.getLogger(__name__)


def membership_state(league, user_id):
    """Where ``user_id`` stands in ``league``"""
    user_id = str(user_id)
    if league.is_commissioner(user_id):
        return MembershipState.ACCEPTED
    if any(m.user_id == user_id for m in league.members):
        return MembershipState.ACCEPTED
    if any(
        r.user_id == user_id and r.state is RequestState.PENDING
        for r in league.pending_requests
    ):
        return MembershipState.PENDING
    return MembershipState.NONE


def league_leaderboard(league, rows):
    """Restrict leaderboard rows to the league's accepted members and re-rank"""
    member_ids = set(league.member_ids())
    totals = {}
    names = {}
    for row in rows:
        if row.user_id in member_ids:
            totals[row.user_id] = row.total_points
            names[row.user_id] = row.name
    return rank_rows(totals, names)


class LeagueService:
    def __init__(self, api):
        self.api = api

    def _require_commissioner(self, league, user, action):
        if user is None or not league.is_commissioner(user.user_id):
            raise AuthorizationError(f"Only the commissioner can {action}.")

    # Leagues

    def create_league(self, name, user):
        if user is None:
            raise AuthorizationError("You need to be logged in to create a league.")
        name = (name or "").strip()
        if not name:
            raise ValidationError("League name is required.")
        league = self.api.create_league(name, user.user_id, user.token)
        logger.info(f"League {league.id} '{league.name}' created by {user.user_id}")
        return league

    def load_league(self, league_id):
        """League with its accepted members and pending requests"""
        league = self.api.fetch_league(league_id)
        league.members = self.api.fetch_league_members(league_id)
        league.pending_requests = self.api.fetch_pending_members(league_id)
        return league

    def delete_league(self, league, user):
        self._require_commissioner(league, user, "delete the league")
        self.api.delete_league(league.id, user.user_id, user.token)
        logger.info(f"League {league.id} deleted by {user.user_id}")

    # Self-service transitions

    def request_join(self, league, user):
        """NONE -> PENDING, only while registration is open"""
        if user is None:
            raise AuthorizationError("You need to be logged in to join a league.")
        if league.is_commissioner(user.user_id):
            raise ValidationError("The commissioner is already a member of this league.")
        state = membership_state(league, user.user_id)
        if state is not MembershipState.NONE:
            raise ValidationError(f"Membership is already {state.value}.")
        if not league.registration_open:
            raise ValidationError("League registration is closed.")

        response = self.api.join_league(league.id, user.user_id, user.token)
        status = str(response.get("status") or "PENDING").upper()
        if status != RequestState.PENDING.value:
            logger.warning(f"Unexpected join status {status} for league {league.id}")

        request_id = response.get("id", response.get("requestId"))
        league.pending_requests.append(
            MembershipRequest(
                id=str(request_id) if request_id is not None else None,
                league_id=league.id,
                user_id=user.user_id,
                name=user.name,
            )
        )
        logger.info(f"User {user.user_id} requested to join league {league.id}")
        return MembershipState.PENDING

    def leave(self, league, user):
        """PENDING|ACCEPTED -> NONE, regardless of registration state"""
        if user is None:
            raise AuthorizationError("You need to be logged in to leave a league.")
        if league.is_commissioner(user.user_id):
            raise ValidationError("The commissioner cannot leave their own league.")
        state = membership_state(league, user.user_id)
        if state is MembershipState.NONE:
            raise NotFoundError("You are not a member of this league.")

        self.api.leave_league(league.id, user.user_id, user.token)

        league.members = [m for m in league.members if m.user_id != user.user_id]
        league.pending_requests = [
            r for r in league.pending_requests if r.user_id != user.user_id
        ]
        logger.info(f"User {user.user_id} left league {league.id} (was {state.value})")
        return MembershipState.NONE

    # Commissioner transitions

    def pending_requests(self, league, user):
        self._require_commissioner(league, user, "view pending requests")
        league.pending_requests = self.api.get_pending_requests(league.id, user.user_id)
        return list(league.pending_requests)

    def _find_pending(self, league, request_id):
        request = league.find_request(request_id)
        if request is None or request.state is not RequestState.PENDING:
            raise NotFoundError(f"Request {request_id} not found in league {league.id}.")
        return request

    def accept_request(self, league, request_id, user):
        """PENDING -> ACCEPTED"""
        self._require_commissioner(league, user, "accept members")
        request = self._find_pending(league, request_id)

        updated = self.api.accept_request(league.id, request.id, user.user_id)

        league.pending_requests = [r for r in league.pending_requests if r.id != request.id]
        if not any(m.user_id == request.user_id for m in league.members):
            league.members.append(Member(user_id=request.user_id, name=request.name))
        logger.info(f"Request {request.id} accepted into league {league.id}")
        return updated or MembershipRequest(
            id=request.id,
            league_id=league.id,
            user_id=request.user_id,
            state=RequestState.ACCEPTED,
            name=request.name,
        )

    def reject_request(self, league, request_id, user):
        """PENDING -> NONE"""
        self._require_commissioner(league, user, "reject members")
        request = self._find_pending(league, request_id)

        self.api.reject_request(league.id, request.id, user.user_id)

        league.pending_requests = [r for r in league.pending_requests if r.id != request.id]
        logger.info(f"Request {request.id} rejected from league {league.id}")
        return request

    def set_registration(self, league, user, open_):
        self._require_commissioner(
            league, user, "reopen registration" if open_ else "close registration"
        )
        if open_:
            self.api.reopen_registration(league.id, user.user_id)
        else:
            self.api.close_registration(league.id, user.user_id)
        league.registration_open = bool(open_)
        logger.info(
            f"League {league.id} registration {'reopened' if open_ else 'closed'}"
        )
        return league.registration_open

    def add_user(self, league, user, user_id=None, name=None):
        """Commissioner adds a user directly by id or by name"""
        self._require_commissioner(league, user, "add a user to the league")
        if not user_id and not name:
            raise ValidationError("Either userId or name must be provided.")

        response = self.api.add_user_to_league(
            league.id, user.user_id, user_id=user_id, name=name
        )

        added = response.get("member", response) if isinstance(response, dict) else {}
        added_id = added.get("userId", user_id)
        if added_id is not None and not any(m.user_id == str(added_id) for m in league.members):
            league.members.append(Member(user_id=str(added_id), name=added.get("name", name)))
        return response

"""
Tournament bracket lifecycle

A league runs at most one single-elimination tournament at a time. The
bracket is seeded from league standings, one round per week, and each
matchup's winner is decided once by the remote API. A decided matchup is
terminal and is never sent back for scoring.

    NONE -> ACTIVE -> (rounds advance) -> COMPLETE
    any non-NONE state -> NONE on delete
"""

import logging
import secrets

from pickem.errors import AuthorizationError, NotFoundError, ValidationError
from pickem.models import MembershipState, TournamentState
from pickem.services.league_service import membership_state

logger = logging.getLogger(__name__)


def tournament_active(matchups):
    """True iff any matchup is still waiting for a winner"""
    return any(m.winner_id is None for m in matchups)


def current_round(matchups):
    return max((m.round for m in matchups), default=0)


def round_matchups(matchups, round_number):
    return [m for m in matchups if m.round == round_number]


def round_complete(matchups, round_number):
    games = round_matchups(matchups, round_number)
    return bool(games) and all(m.is_decided for m in games)


def tournament_state(matchups):
    """
    NONE without matchups, COMPLETE once the single final matchup is decided,
    ACTIVE otherwise (including between rounds).
    """
    if not matchups:
        return TournamentState.NONE
    latest = current_round(matchups)
    if round_complete(matchups, latest) and len(round_matchups(matchups, latest)) == 1:
        return TournamentState.COMPLETE
    return TournamentState.ACTIVE


def champion(matchups):
    if tournament_state(matchups) is not TournamentState.COMPLETE:
        return None
    return round_matchups(matchups, current_round(matchups))[0].winner_id


def bracket_size(entrants):
    """Largest power of two not above ``entrants``"""
    size = 1
    while size * 2 <= entrants:
        size *= 2
    return size


def seed_bracket(standings, starting_week):
    """
    First-round pairings from standings (best first).

    The field is cut to the largest power of two that fits; seed 1 meets the
    last qualifying seed, seed 2 the second to last, and so on.

    Args:
        standings: ordered LeaderboardRow list or user ids
        starting_week: week the first round is played

    Returns:
        list of {"round", "week", "user1Id", "user2Id"} dicts
    """
    user_ids = [getattr(entry, "user_id", entry) for entry in standings]
    if len(user_ids) < 2:
        raise ValidationError("At least two players are needed for a tournament.")

    size = bracket_size(len(user_ids))
    field = user_ids[:size]
    return [
        {
            "round": 1,
            "week": starting_week,
            "user1Id": field[i],
            "user2Id": field[size - 1 - i],
        }
        for i in range(size // 2)
    ]


def next_round_pairings(matchups):
    """
    Pairings for the round after the latest one.

    Winners of consecutive matchups meet. Only available once every matchup
    of the latest round has a winner.
    """
    if not matchups:
        raise ValidationError("No tournament is running.")
    latest = current_round(matchups)
    games = round_matchups(matchups, latest)
    if not round_complete(matchups, latest):
        raise ValidationError(f"Round {latest} still has undecided matchups.")
    if len(games) == 1:
        raise ValidationError("The tournament is complete.")

    week = max(m.week for m in games) + 1
    winners = [m.winner_id for m in games]
    return [
        {
            "round": latest + 1,
            "week": week,
            "user1Id": winners[i],
            "user2Id": winners[i + 1],
        }
        for i in range(0, len(winners) - 1, 2)
    ]


class TournamentService:
    def __init__(self, api, min_starting_week=14):
        self.api = api
        self.min_starting_week = min_starting_week

    def load(self, league_id, user):
        return self.api.fetch_matchups(league_id, user.token if user else None)

    def validate_starting_week(self, starting_week):
        try:
            week = int(starting_week)
        except (TypeError, ValueError):
            raise ValidationError("Starting week must be a number.") from None
        if week < self.min_starting_week:
            raise ValidationError(
                f"Cannot create match-up until week {self.min_starting_week}"
            )
        return week

    def create(self, league, user, starting_week, tournament_id=None, existing=None):
        """
        Create the league's bracket. Returns (tournament_id, [Matchup]).

        ``existing`` is the league's current matchups when already loaded;
        otherwise they are fetched to check that no tournament is running.
        """
        week = self.validate_starting_week(starting_week)
        if user is None or not league.is_commissioner(user.user_id):
            raise AuthorizationError("Only the commissioner can create a tournament.")

        if existing is None:
            existing = self.load(league.id, user)
        # Only undecided matchups count; between rounds a new bracket may start
        if tournament_active(existing):
            raise ValidationError("This league already has an active tournament.")

        tournament_id = tournament_id or secrets.token_urlsafe(6)
        created_id, matchups = self.api.create_tournament(
            league.id, week, tournament_id, user.token
        )
        if not matchups:
            matchups = self.load(league.id, user)

        logger.info(
            f"Tournament {created_id} created for league {league.id} "
            f"starting week {week} with {len(matchups)} matchups"
        )
        return created_id, matchups

    def delete(self, league, user):
        """Tear down every matchup of the league's tournament"""
        if user is None or membership_state(league, user.user_id) is not MembershipState.ACCEPTED:
            raise AuthorizationError("Only league members can delete the tournament.")
        self.api.delete_tournament(league.id, user.token)
        logger.info(f"Tournament deleted for league {league.id} by {user.user_id}")
        return TournamentState.NONE

    def record_winner(self, matchups, matchup_id, user):
        """Ask the remote API to settle one matchup and merge the result by id"""
        matchup_id = str(matchup_id)
        index = next((i for i, m in enumerate(matchups) if m.id == matchup_id), None)
        if index is None:
            raise NotFoundError(f"Matchup {matchup_id} not found.")
        if matchups[index].is_decided:
            raise ValidationError(f"Matchup {matchup_id} already has a winner.")

        updated = self.api.update_matchup_winner(matchup_id, user.token if user else None)
        matchups[index] = updated
        logger.info(f"Matchup {matchup_id} settled, winner {updated.winner_id}")
        return updated

    def settle_week(self, matchups, week, user):
        """Settle every undecided matchup played in or before ``week``"""
        settled = []
        for matchup in list(matchups):
            if matchup.is_decided or matchup.week > week:
                continue
            settled.append(self.record_winner(matchups, matchup.id, user))
        return settled

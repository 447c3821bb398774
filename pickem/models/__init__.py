from .game import Game, GameResult, GameStatus, Side, Team
from .leaderboard import LeaderboardRow
from .league import League, Member, MembershipRequest, MembershipState, RequestState
from .matchup import Matchup, TournamentState
from .pick import ByGameId, ByPickId, Pick, PickUpdate
from .user import SessionUser

__all__ = [
    "Game",
    "GameResult",
    "GameStatus",
    "Side",
    "Team",
    "LeaderboardRow",
    "League",
    "Member",
    "MembershipRequest",
    "MembershipState",
    "RequestState",
    "Matchup",
    "TournamentState",
    "ByGameId",
    "ByPickId",
    "Pick",
    "PickUpdate",
    "SessionUser",
]

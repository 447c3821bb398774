from dataclasses import dataclass
from enum import Enum


def _optional_id(value):
    return str(value) if value not in (None, "") else None


class TournamentState(str, Enum):
    NONE = "none"
    ACTIVE = "active"
    COMPLETE = "complete"


@dataclass
class Matchup:
    id: str
    league_id: str
    tournament_id: str
    round: int
    week: int
    user1_id: str
    user2_id: str
    winner_id: str = None
    user1_name: str = None
    user2_name: str = None

    def __repr__(self):
        return f"<Matchup {self.id} round={self.round} {self.user1_id} vs {self.user2_id}>"

    @property
    def is_decided(self):
        return self.winner_id is not None

    def participants(self):
        return (self.user1_id, self.user2_id)

    @classmethod
    def from_dict(cls, data):
        user1 = data.get("user1") or {}
        user2 = data.get("user2") or {}
        winner = data.get("winnerId")
        league_id = data.get("leagueId")
        return cls(
            id=str(data["id"]),
            league_id=_optional_id(league_id),
            tournament_id=_optional_id(data.get("tournamentId")),
            round=int(data.get("round") or 1),
            week=int(data.get("week") or 0),
            user1_id=_optional_id(data.get("user1Id", user1.get("id"))),
            user2_id=_optional_id(data.get("user2Id", user2.get("id"))),
            winner_id=_optional_id(winner),
            user1_name=user1.get("name"),
            user2_name=user2.get("name"),
        )

    def to_dict(self):
        """Convert matchup to dictionary for API responses"""
        return {
            "id": self.id,
            "leagueId": self.league_id,
            "tournamentId": self.tournament_id,
            "round": self.round,
            "week": self.week,
            "user1Id": self.user1_id,
            "user2Id": self.user2_id,
            "user1": {"id": self.user1_id, "name": self.user1_name},
            "user2": {"id": self.user2_id, "name": self.user2_name},
            "winnerId": self.winner_id,
        }

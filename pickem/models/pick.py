from dataclasses import dataclass
from datetime import datetime

from pickem.models.game import Side
from pickem.utils.timezone_utils import parse_timestamp


@dataclass
class Pick:
    """A user's selected side for one game

    ``id`` stays None until the remote API has confirmed the pick.
    """

    game_id: str
    side: Side
    user_id: str = None
    id: str = None
    week: int = None
    created_at: datetime = None

    def __repr__(self):
        return f"<Pick user_id={self.user_id} game_id={self.game_id} side={self.side.value} id={self.id}>"

    @property
    def is_confirmed(self):
        return bool(self.id)

    @classmethod
    def from_dict(cls, data):
        pick_id = data.get("id", data.get("pickId"))
        game_id = data.get("gameId")
        week = data.get("week")
        return cls(
            id=str(pick_id) if pick_id not in (None, "") else None,
            user_id=str(data["userId"]) if data.get("userId") is not None else None,
            game_id=str(game_id) if game_id is not None else None,
            side=Side.parse(data.get("selectedTeam", data.get("side"))),
            week=int(week) if week is not None else None,
            created_at=parse_timestamp(data.get("createdAt")),
        )

    def to_dict(self):
        """Convert pick to dictionary for API responses"""
        return {
            "id": self.id,
            "userId": self.user_id,
            "gameId": self.game_id,
            "selectedTeam": self.side.value,
            "week": self.week,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class ByPickId:
    pick_id: str

    def to_payload(self):
        return {"pickId": self.pick_id}


@dataclass(frozen=True)
class ByGameId:
    game_id: str

    def to_payload(self):
        return {"gameId": self.game_id}


@dataclass(frozen=True)
class PickUpdate:
    """One row of an update request, keyed by pick id or (fallback) game id"""

    key: object  # ByPickId | ByGameId
    side: Side

    def to_payload(self):
        payload = self.key.to_payload()
        payload["selectedTeam"] = self.side.value
        return payload

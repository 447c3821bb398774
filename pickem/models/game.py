from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pickem.utils.timezone_utils import is_past, parse_timestamp


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"

    @classmethod
    def parse(cls, value):
        """Coerce a wire value ("home"/"away", any case) into a Side"""
        if isinstance(value, cls):
            return value
        if value is None:
            raise ValueError("Side is required")
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown side: {value!r}") from None


class GameStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"

    @classmethod
    def parse(cls, value):
        if not value:
            return cls.SCHEDULED
        normalized = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        if normalized in ("completed", "complete"):
            return cls.FINAL
        try:
            return cls(normalized)
        except ValueError:
            # Postponed or suspended games have not been played
            return cls.SCHEDULED


def generate_abbreviation(team_name):
    """Three-letter abbreviation for a team name"""
    if not team_name:
        return "???"
    return team_name[:3].upper()


@dataclass(frozen=True)
class Team:
    name: str
    abbreviation: str
    logo: str = None

    @classmethod
    def from_name(cls, name, logo=None):
        return cls(name=name, abbreviation=generate_abbreviation(name), logo=logo)

    def to_dict(self):
        return {"name": self.name, "abbreviation": self.abbreviation, "logo": self.logo}


@dataclass(frozen=True)
class GameResult:
    winner: Side
    home_score: int = None
    away_score: int = None

    @classmethod
    def from_dict(cls, data):
        if not data or data.get("winner") is None:
            return None
        return cls(
            winner=Side.parse(data["winner"]),
            home_score=data.get("homeScore"),
            away_score=data.get("awayScore"),
        )

    def to_dict(self):
        return {
            "winner": self.winner.value,
            "homeScore": self.home_score,
            "awayScore": self.away_score,
        }


@dataclass
class Game:
    id: str
    week: int
    home_team: Team
    away_team: Team
    spread: float = None  # Display only, positive = home team favored
    start_time: datetime = None
    lock_time: datetime = None
    status: GameStatus = GameStatus.SCHEDULED
    result: GameResult = field(default=None)

    def __repr__(self):
        return f"<Game {self.away_team.abbreviation} @ {self.home_team.abbreviation} Week {self.week}>"

    @classmethod
    def from_dict(cls, data, week=None):
        """Build a game from the remote catalog payload

        Team fields arrive either as plain names (with separate logo fields)
        or as already-expanded team objects.
        """
        home = data.get("homeTeam")
        away = data.get("awayTeam")
        if isinstance(home, dict):
            home_team = Team(
                name=home.get("name"),
                abbreviation=home.get("abbreviation") or generate_abbreviation(home.get("name")),
                logo=home.get("logo"),
            )
        else:
            home_team = Team.from_name(home, data.get("homeTeamLogo"))
        if isinstance(away, dict):
            away_team = Team(
                name=away.get("name"),
                abbreviation=away.get("abbreviation") or generate_abbreviation(away.get("name")),
                logo=away.get("logo"),
            )
        else:
            away_team = Team.from_name(away, data.get("awayTeamLogo"))

        result = GameResult.from_dict(data.get("result"))
        status = GameStatus.parse(data.get("status"))
        if result is not None:
            status = GameStatus.FINAL

        spread = data.get("pointSpread", data.get("spread"))
        return cls(
            id=str(data["id"]),
            week=int(data.get("week") or week or 0),
            home_team=home_team,
            away_team=away_team,
            spread=float(spread) if spread is not None else None,
            start_time=parse_timestamp(data.get("startTime") or data.get("gameTime")),
            lock_time=parse_timestamp(data.get("lockTime")),
            status=status,
            result=result,
        )

    @property
    def is_final(self):
        return self.result is not None

    @property
    def winning_side(self):
        return self.result.winner if self.result else None

    def is_locked(self, now=None):
        """Check if picks on this game are frozen"""
        if self.is_final or self.status is GameStatus.IN_PROGRESS:
            return True
        if self.lock_time is None:
            return False
        return is_past(self.lock_time, now)

    def to_dict(self):
        """Convert game to dictionary for API responses"""
        return {
            "id": self.id,
            "week": self.week,
            "homeTeam": self.home_team.to_dict(),
            "awayTeam": self.away_team.to_dict(),
            "spread": self.spread,
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "lockTime": self.lock_time.isoformat() if self.lock_time else None,
            "status": self.status.value,
            "result": self.result.to_dict() if self.result else None,
            "isLocked": self.is_locked(),
        }

from dataclasses import dataclass


@dataclass(frozen=True)
class LeaderboardRow:
    user_id: str
    total_points: int
    rank: int
    name: str = None

    def to_dict(self):
        return {
            "userId": self.user_id,
            "name": self.name,
            "points": self.total_points,
            "rank": self.rank,
        }

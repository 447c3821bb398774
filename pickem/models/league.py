from dataclasses import dataclass, field
from enum import Enum

from pickem.utils.timezone_utils import parse_timestamp


class MembershipState(str, Enum):
    NONE = "none"
    PENDING = "pending"
    ACCEPTED = "accepted"


class RequestState(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


@dataclass
class Member:
    user_id: str
    name: str = None

    @classmethod
    def from_dict(cls, data):
        user = data.get("user") or {}
        user_id = data.get("userId", user.get("id", data.get("id")))
        return cls(user_id=str(user_id), name=data.get("name", user.get("name")))

    def to_dict(self):
        return {"userId": self.user_id, "name": self.name}


@dataclass
class MembershipRequest:
    id: str
    league_id: str
    user_id: str
    state: RequestState = RequestState.PENDING
    name: str = None
    created_at: object = None

    def __repr__(self):
        return f"<MembershipRequest {self.id} user_id={self.user_id} league_id={self.league_id} {self.state.value}>"

    @classmethod
    def from_dict(cls, data):
        user = data.get("user") or {}
        return cls(
            id=str(data["id"]),
            league_id=str(data.get("leagueId")),
            user_id=str(data.get("userId", user.get("id"))),
            state=RequestState(str(data.get("status") or "PENDING").upper()),
            name=data.get("name", user.get("name")),
            created_at=parse_timestamp(data.get("createdAt")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "leagueId": self.league_id,
            "userId": self.user_id,
            "name": self.name,
            "status": self.state.value,
        }


@dataclass
class League:
    id: str
    name: str
    commissioner_id: str
    registration_open: bool = True
    members: list = field(default_factory=list)
    pending_requests: list = field(default_factory=list)

    def __repr__(self):
        return f"<League {self.name}>"

    @classmethod
    def from_dict(cls, data):
        registration_open = data.get("registrationOpen")
        if registration_open is None:
            registration_open = not data.get("registrationClosed", False)
        return cls(
            id=str(data["id"]),
            name=data.get("name"),
            commissioner_id=str(data.get("commissionerId")),
            registration_open=bool(registration_open),
            members=[Member.from_dict(m) for m in data.get("members") or []],
            pending_requests=[
                MembershipRequest.from_dict(r) for r in data.get("pendingRequests") or []
            ],
        )

    def is_commissioner(self, user_id):
        return user_id is not None and str(user_id) == self.commissioner_id

    def member_ids(self):
        """Accepted members, commissioner included"""
        ids = [self.commissioner_id]
        ids.extend(m.user_id for m in self.members if m.user_id != self.commissioner_id)
        return ids

    def find_request(self, request_id):
        return next((r for r in self.pending_requests if r.id == str(request_id)), None)

    def to_dict(self, include_members=False):
        """Convert league to dictionary for API responses"""
        data = {
            "id": self.id,
            "name": self.name,
            "commissionerId": self.commissioner_id,
            "registrationOpen": self.registration_open,
            "memberCount": len(self.member_ids()),
        }
        if include_members:
            data["members"] = [m.to_dict() for m in self.members]
            data["pendingRequests"] = [r.to_dict() for r in self.pending_requests]
        return data

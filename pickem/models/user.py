from flask_login import UserMixin


class SessionUser(UserMixin):
    """The logged-in user as issued by the external identity service"""

    def __init__(self, user_id, name=None, email=None, token=None):
        self.user_id = str(user_id)
        self.name = name
        self.email = email
        self.token = token

    def __repr__(self):
        return f"<SessionUser {self.user_id} {self.name}>"

    def get_id(self):
        return self.user_id

    @classmethod
    def from_auth_response(cls, data):
        """Build from a register/login response: {user: {...}, token}"""
        user = data.get("user") or {}
        if not user.get("id"):
            return None
        return cls(
            user_id=user["id"],
            name=user.get("name"),
            email=user.get("email"),
            token=data.get("token"),
        )

    @classmethod
    def from_dict(cls, data):
        return cls(
            user_id=data["userId"],
            name=data.get("name"),
            email=data.get("email"),
            token=data.get("token"),
        )

    def to_dict(self, include_token=False):
        data = {"userId": self.user_id, "name": self.name, "email": self.email}
        if include_token:
            data["token"] = self.token
        return data

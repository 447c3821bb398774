"""
Error types raised by the pick'em core.

ValidationError and AuthorizationError are raised before any remote call is
made. RemoteError wraps whatever the remote API (or the transport) reported
and is never retried by the core.
"""


class PickemError(Exception):
    """Base class for all pick'em errors"""

    status_code = 500

    def __init__(self, message, detail=None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self):
        data = {"error": self.message}
        if self.detail is not None:
            data["detail"] = self.detail
        return data


class ValidationError(PickemError):
    """A precondition that can be checked locally failed"""

    status_code = 400


class AuthorizationError(PickemError):
    """The caller lacks the role the action requires"""

    status_code = 403


class NotFoundError(PickemError):
    """Referenced pick, game, league or request does not exist for the caller"""

    status_code = 404


class RemoteError(PickemError):
    """The remote API returned a failure or could not be reached"""

    status_code = 502

    def __init__(self, message, detail=None, status=None):
        super().__init__(message, detail)
        self.status = status

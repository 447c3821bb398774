"""
Client-side session state kept in the application cache

Holds the last-known authenticated user and the user's pick map so both can
be restored at session start. Writes are best effort: a failed cache write is
logged and never fails the operation that triggered it.
"""

import logging

from flask import current_app

from pickem import cache
from pickem.models import SessionUser

logger = logging.getLogger(__name__)


def _user_key(user_id):
    return f"session_user_{user_id}"


def _picks_key(user_id):
    return f"session_picks_{user_id}"


def _submit_key(user_id):
    return f"pick_submit_{user_id}"


class SessionStore:
    """Cache-backed persistence for session users and pick state"""

    def __init__(self, cache_backend=None):
        self.cache = cache_backend or cache

    def _timeout(self, key, default):
        try:
            return current_app.config.get(key, default)
        except RuntimeError:
            return default

    def save_user(self, user):
        try:
            self.cache.set(
                _user_key(user.user_id),
                user.to_dict(include_token=True),
                timeout=self._timeout("SESSION_TIMEOUT", 3600),
            )
        except Exception as e:
            logger.warning(f"Could not cache session user {user.user_id}: {e}")

    def load_user(self, user_id):
        try:
            data = self.cache.get(_user_key(user_id))
        except Exception as e:
            logger.warning(f"Could not read session user {user_id}: {e}")
            return None
        return SessionUser.from_dict(data) if data else None

    def save_picks(self, user_id, state):
        try:
            self.cache.set(
                _picks_key(user_id),
                state,
                timeout=self._timeout("PICK_STATE_TIMEOUT", 7 * 24 * 3600),
            )
        except Exception as e:
            # Non-critical: in-memory state is already updated
            logger.warning(f"Could not cache picks for user {user_id}: {e}")

    def load_picks(self, user_id):
        try:
            return self.cache.get(_picks_key(user_id))
        except Exception as e:
            logger.warning(f"Could not read cached picks for user {user_id}: {e}")
            return None

    def begin_submission(self, user_id):
        """
        Claim the per-user submission marker. False when another request holds it.

        The marker expires after PICK_SUBMIT_TIMEOUT. Granted when the cache is
        unreachable.
        """
        try:
            return bool(
                self.cache.add(
                    _submit_key(user_id), 1, timeout=self._timeout("PICK_SUBMIT_TIMEOUT", 60)
                )
            )
        except Exception as e:
            logger.warning(f"Could not claim submission marker for user {user_id}: {e}")
            return True

    def end_submission(self, user_id):
        try:
            self.cache.delete(_submit_key(user_id))
        except Exception as e:
            logger.warning(f"Could not release submission marker for user {user_id}: {e}")

    def save_games(self, week, games):
        """Cache a week's catalog (list of Game dicts) briefly"""
        try:
            self.cache.set(
                f"week_games_{week}", games, timeout=self._timeout("CACHE_DEFAULT_TIMEOUT", 300)
            )
        except Exception as e:
            logger.warning(f"Could not cache games for week {week}: {e}")

    def load_games(self, week):
        try:
            return self.cache.get(f"week_games_{week}")
        except Exception as e:
            logger.warning(f"Could not read cached games for week {week}: {e}")
            return None

    def clear_picks(self, user_id):
        try:
            self.cache.delete(_picks_key(user_id))
        except Exception as e:
            logger.warning(f"Could not clear cached picks for user {user_id}: {e}")

    def clear(self, user_id):
        """Drop everything held for a user (logout)"""
        self.clear_picks(user_id)
        try:
            self.cache.delete(_user_key(user_id))
        except Exception as e:
            logger.warning(f"Could not clear session user {user_id}: {e}")

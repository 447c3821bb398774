"""
Pick session: the user's picks for the active week.

State is kept in two layers. ``drafts`` holds local selections (game id ->
side) that have not been accepted by the remote API yet. ``confirmed`` holds
the picks the remote API has accepted, keyed by game id and carrying the
server-assigned pick id. A selection shown to the user is the draft when one
exists, otherwise the confirmed pick.

Only ``record_pick`` mutates state without talking to the remote API. Every
other mutating call changes local state after, and only after, a successful
response, merging the returned rows by game id.
"""

import logging
from contextlib import contextmanager

from pickem.errors import AuthorizationError, NotFoundError, ValidationError
from pickem.models import ByGameId, ByPickId, Pick, PickUpdate, Side
from pickem.utils.logging_config import ContextualLogger
from pickem.utils.scoring import pick_record

logger = logging.getLogger(__name__)


class PickSession:
    """Session-scoped pick state for one logged-in user"""

    def __init__(self, api, user=None, store=None):
        self.api = api
        self.user = user
        self.store = store
        self.current_week = None
        self.lock_time = None
        self.games = {}
        self.drafts = {}
        self.confirmed = {}
        # Set by local edits, cleared by an authoritative merge
        self.changed = False
        self._in_flight = False
        self.log = ContextualLogger(
            __name__, {"user_id": user.user_id} if user is not None else None
        )

    def __repr__(self):
        return (
            f"<PickSession user={self.user.user_id if self.user else None} "
            f"week={self.current_week} drafts={len(self.drafts)} confirmed={len(self.confirmed)}>"
        )

    # Loading

    def start(self, week=None):
        """Load the week (current week from the lock-time endpoint when None) and the user's picks"""
        if week is None:
            lock = self.api.fetch_lock_time()
            week = lock.get("week")
            self.lock_time = lock.get("lockTime")
        self.load_week(week)
        if self.user is not None:
            self.load_user_picks()
        return self

    def load_week(self, week=None):
        """Replace the game catalog with the given week's games"""
        resolved_week, games = self.api.fetch_games(week)
        if resolved_week is not None and resolved_week != self.current_week:
            # Drafts belong to the week they were made in
            if self.current_week is not None:
                self.drafts = {}
                self.confirmed = {}
                self.changed = False
            self.current_week = int(resolved_week)
        self.games = {game.id: game for game in games}
        self.log.debug(f"Loaded {len(self.games)} games for week {self.current_week}")
        if self.store is not None and self.current_week is not None:
            self.store.save_games(self.current_week, [game.to_dict() for game in games])
        return list(self.games.values())

    def ensure_catalog(self):
        """Reload the week's games when none are held (expired cache, fresh session)"""
        if self.games:
            return self
        if self.current_week is None:
            return self.start()
        self.load_week(self.current_week)
        return self

    def use_games(self, games):
        """Install an already-fetched catalog for the active week"""
        self.games = {game.id: game for game in games}

    def load_user_picks(self):
        """Replace the confirmed layer with the server's picks for the active week"""
        self._require_user()
        data = self.api.fetch_user_picks(self.user.user_id, self.user.token)
        self.confirmed = flatten_user_picks(data, self.current_week, self.user.user_id)
        self.changed = False
        self._persist()
        return dict(self.confirmed)

    # Derived state

    def selected_picks(self):
        """Current selection per game: the draft if any, else the confirmed pick"""
        selected = {}
        for game_id, pick in self.confirmed.items():
            selected[game_id] = pick
        for game_id, side in self.drafts.items():
            selected[game_id] = Pick(
                game_id=game_id,
                side=side,
                user_id=self.user.user_id if self.user else None,
                week=self.current_week,
            )
        return selected

    @property
    def has_picks(self):
        return bool(self.drafts) or bool(self.confirmed)

    @property
    def is_confirmed(self):
        """
        True iff there are selections, every one carries a pick id, and nothing
        was edited locally since the last authoritative merge (even if reverted)
        """
        if self.changed:
            return False
        selected = self.selected_picks()
        return bool(selected) and all(pick.is_confirmed for pick in selected.values())

    def record(self):
        """Wins/losses/pending for the current selection against the loaded games"""
        sides = {game_id: pick.side for game_id, pick in self.selected_picks().items()}
        return pick_record(self.games.values(), sides)

    # Local selection

    def record_pick(self, game_id, side, now=None):
        """Set or overwrite the local selection for a game. No remote call."""
        self._require_user()
        game_id = str(game_id)
        side = self._parse_side(side)

        game = self.games.get(game_id)
        if self.games and game is None:
            raise NotFoundError(f"Game {game_id} is not on the week {self.current_week} slate")
        if game is not None and game.is_locked(now):
            raise ValidationError(f"Picks for game {game_id} are locked")

        self.drafts[game_id] = side
        self.changed = True
        self.log.debug(f"Recorded {side.value} for game {game_id}")
        self._persist()
        return side

    def discard_draft(self, game_id):
        """Drop a local selection, falling back to the confirmed pick if any"""
        removed = self.drafts.pop(str(game_id), None)
        if removed is not None:
            self.changed = True
            self._persist()
        return removed

    # Remote operations

    def confirm_picks(self):
        """Submit every new or changed selection and merge the created picks by game id"""
        self._require_user()
        to_submit = [
            Pick(game_id=game_id, side=side, user_id=self.user.user_id, week=self.current_week)
            for game_id, side in self.drafts.items()
        ]
        if not to_submit:
            raise ValidationError("No picks to confirm")

        with self._submission("confirm"):
            created = self.api.submit_picks(self.user.user_id, to_submit, self.user.token)

        merged = self._merge_response(created)
        self.changed = False
        self.log.info(f"Confirmed {len(merged)} of {len(to_submit)} picks for week {self.current_week}")
        self._persist()
        return merged

    def update_picks(self):
        """Resubmit changed selections keyed by pick id, or by game id when none is known"""
        self._require_user()
        updates = []
        for game_id, side in self.drafts.items():
            confirmed = self.confirmed.get(game_id)
            key = ByPickId(confirmed.id) if confirmed and confirmed.id else ByGameId(game_id)
            updates.append(PickUpdate(key=key, side=side))
        if not updates:
            raise ValidationError("No valid picks to update")

        with self._submission("update"):
            updated = self.api.update_picks(self.user.user_id, updates, self.user.token)

        merged = self._merge_response(updated)
        self.changed = False
        self.log.info(f"Updated {len(merged)} of {len(updates)} picks for week {self.current_week}")
        self._persist()
        return merged

    def delete_pick(self, pick_id):
        """Delete one confirmed pick owned by this user"""
        self._require_user()
        pick_id = str(pick_id)
        game_id = next(
            (gid for gid, pick in self.confirmed.items() if pick.id == pick_id), None
        )
        if game_id is None:
            raise NotFoundError(f"Pick {pick_id} not found for user {self.user.user_id}")

        with self._submission("delete"):
            self.api.delete_pick(self.user.user_id, pick_id, self.user.token)

        del self.confirmed[game_id]
        self.drafts.pop(game_id, None)
        self.changed = False
        self.log.info(f"Deleted pick {pick_id} on game {game_id}")
        self._persist()
        return game_id

    def delete_pick_for_game(self, game_id):
        confirmed = self.confirmed.get(str(game_id))
        if confirmed is None or not confirmed.id:
            raise NotFoundError(f"No confirmed pick for game {game_id}")
        return self.delete_pick(confirmed.id)

    # Persistence

    def to_dict(self):
        return {
            "week": self.current_week,
            "drafts": {game_id: side.value for game_id, side in self.drafts.items()},
            "changed": self.changed,
            "confirmed": [pick.to_dict() for pick in self.confirmed.values()],
        }

    def restore(self, data):
        """Restore drafts and confirmed picks saved by ``to_dict``"""
        if not data:
            return self
        self.current_week = data.get("week", self.current_week)
        self.drafts = {
            str(game_id): Side.parse(side) for game_id, side in (data.get("drafts") or {}).items()
        }
        self.changed = bool(data.get("changed", bool(self.drafts)))
        self.confirmed = {}
        for raw in data.get("confirmed") or []:
            pick = Pick.from_dict(raw)
            self.confirmed[pick.game_id] = pick
        return self

    def clear(self):
        """Forget all session state (logout)"""
        self.drafts = {}
        self.confirmed = {}
        self.games = {}
        self.current_week = None
        self.changed = False
        if self.store is not None and self.user is not None:
            self.store.clear_picks(self.user.user_id)

    # Helpers

    def _merge_response(self, rows):
        """Merge returned picks into the confirmed layer by game id, never by position"""
        by_pick_id = {pick.id: game_id for game_id, pick in self.confirmed.items() if pick.id}
        merged = []
        for row in rows:
            game_id = row.game_id or by_pick_id.get(row.id)
            if game_id is None:
                self.log.warning(f"Dropping response row with no resolvable game: {row!r}")
                continue
            previous = self.confirmed.get(game_id)
            self.confirmed[game_id] = Pick(
                game_id=game_id,
                side=row.side,
                user_id=row.user_id or self.user.user_id,
                id=row.id or (previous.id if previous else None),
                week=row.week or self.current_week,
                created_at=row.created_at or (previous.created_at if previous else None),
            )
            self.drafts.pop(game_id, None)
            merged.append(self.confirmed[game_id])
        return merged

    @contextmanager
    def _submission(self, operation):
        """One confirm/update/delete at a time per user, across requests"""
        if self._in_flight:
            raise ValidationError("Another pick submission is still in progress")
        if self.store is not None and not self.store.begin_submission(self.user.user_id):
            raise ValidationError("Another pick submission is still in progress")
        self._in_flight = True
        try:
            yield
        except Exception as e:
            self.log.error(f"Pick {operation} failed: {e}")
            raise
        finally:
            self._in_flight = False
            if self.store is not None:
                self.store.end_submission(self.user.user_id)

    def _require_user(self):
        if self.user is None:
            raise AuthorizationError("User is not logged in")

    @staticmethod
    def _parse_side(side):
        try:
            return Side.parse(side)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def _persist(self):
        if self.store is not None and self.user is not None:
            self.store.save_picks(self.user.user_id, self.to_dict())


def flatten_user_picks(data, week, user_id=None):
    """
    Flatten {leagues: {id: {weeks: {week: [pick]}}}} into game id -> Pick for one week

    When several leagues hold a pick for the same game the last one wins.
    """
    picks = {}
    if not data or week is None:
        return picks
    for league_data in (data.get("leagues") or {}).values():
        weeks = (league_data or {}).get("weeks") or {}
        week_picks = weeks.get(str(week), weeks.get(week)) or []
        for raw in week_picks:
            pick = Pick.from_dict(raw)
            if pick.user_id is None:
                pick.user_id = user_id
            if pick.week is None:
                pick.week = int(week)
            picks[pick.game_id] = pick
    return picks


# tests/test_session_store.py
# -------------------------------
# Best-effort persistence of the session user and pick state.
# -------------------------------

import pytest

from pickem.errors import RemoteError, ValidationError
from pickem.models import SessionUser
from pickem.services import pick_session
from pickem.services.session_store import SessionStore


class BrokenCache:
    def set(self, *args, **kwargs):
        raise ConnectionError("redis down")

    def get(self, *args, **kwargs):
        raise ConnectionError("redis down")

    def add(self, *args, **kwargs):
        raise ConnectionError("redis down")

    def delete(self, *args, **kwargs):
        raise ConnectionError("redis down")


def test_user_round_trip(app_ctx, user):
    store = SessionStore()
    store.save_user(user)

    loaded = store.load_user("u1")

    assert loaded.user_id == "u1"
    assert loaded.token == "tok-alice"


def test_clear_forgets_user_and_picks(app_ctx, user):
    store = SessionStore()
    store.save_user(user)
    store.save_picks("u1", {"week": 15, "drafts": {"g1": "home"}, "confirmed": []})

    store.clear("u1")

    assert store.load_user("u1") is None
    assert store.load_picks("u1") is None


def test_cache_failures_are_swallowed(user):
    store = SessionStore(BrokenCache())

    store.save_user(user)
    store.save_picks("u1", {})
    store.clear("u1")

    assert store.load_user("u1") is None
    assert store.load_games(15) is None


def test_pick_session_survives_broken_cache(fake_api, user):
    from pickem.services.pick_service import PickSession

    session = PickSession(fake_api, user=user, store=SessionStore(BrokenCache()))
    session.load_week(15)

    session.record_pick("g1", "home")

    assert session.drafts["g1"].value == "home"


def test_pick_session_restored_from_store(app_ctx, fake_api):
    user = SessionUser("u5", token="tok")
    first = pick_session(user)
    first.load_week(15)
    first.record_pick("g2", "away")

    fake_api.calls.clear()
    second = pick_session(user)

    assert second.drafts["g2"].value == "away"
    assert set(second.games) == {"g1", "g2"}
    assert fake_api.calls == []


def test_submission_is_exclusive_across_sessions(app_ctx, fake_api, user):
    first = pick_session(user)
    first.load_week(15)
    first.record_pick("g1", "home")
    second = pick_session(user)
    fake_api.calls.clear()

    with first._submission("confirm"):
        with pytest.raises(ValidationError):
            second.confirm_picks()

    assert "submit_picks" not in fake_api.call_names()

    second.confirm_picks()

    assert fake_api.call_names() == ["submit_picks"]
    assert second.confirmed["g1"].id == "p-g1"


def test_failed_submission_releases_the_user(app_ctx, fake_api, user):
    session = pick_session(user)
    session.load_week(15)
    session.record_pick("g2", "away")
    fake_api.fail["submit_picks"] = RemoteError("Remote API unreachable")

    with pytest.raises(RemoteError):
        session.confirm_picks()

    del fake_api.fail["submit_picks"]
    assert SessionStore().begin_submission(user.user_id)


def test_broken_cache_does_not_block_submissions(user):
    store = SessionStore(BrokenCache())

    assert store.begin_submission(user.user_id)
    store.end_submission(user.user_id)

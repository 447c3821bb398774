# tests/test_league_service.py
# -------------------------------
# Membership transitions and commissioner-only actions.
# -------------------------------

import pytest

from pickem.errors import AuthorizationError, NotFoundError, RemoteError, ValidationError
from pickem.models import Member, MembershipState, SessionUser
from pickem.services.league_service import LeagueService, membership_state


@pytest.fixture
def service(fake_api):
    return LeagueService(fake_api)


@pytest.fixture
def outsider():
    return SessionUser("u9", name="Erin", token="tok-erin")


def test_membership_states(league):
    assert membership_state(league, "c1") is MembershipState.ACCEPTED
    assert membership_state(league, "u2") is MembershipState.ACCEPTED
    assert membership_state(league, "u3") is MembershipState.PENDING
    assert membership_state(league, "u9") is MembershipState.NONE


def test_join_moves_none_to_pending(service, league, outsider, fake_api):
    state = service.request_join(league, outsider)

    assert state is MembershipState.PENDING
    assert membership_state(league, "u9") is MembershipState.PENDING
    assert fake_api.call_names() == ["join_league"]


def test_join_blocked_while_registration_closed(service, league, outsider, fake_api):
    league.registration_open = False

    with pytest.raises(ValidationError):
        service.request_join(league, outsider)

    assert fake_api.calls == []
    assert membership_state(league, "u9") is MembershipState.NONE


def test_join_twice_is_rejected_locally(service, league, fake_api):
    pending_user = SessionUser("u3", token="tok")

    with pytest.raises(ValidationError):
        service.request_join(league, pending_user)

    assert fake_api.calls == []


def test_commissioner_never_joins_or_leaves(service, league, commissioner, fake_api):
    with pytest.raises(ValidationError):
        service.request_join(league, commissioner)
    with pytest.raises(ValidationError):
        service.leave(league, commissioner)

    assert fake_api.calls == []
    assert membership_state(league, "c1") is MembershipState.ACCEPTED


def test_leave_allowed_when_registration_closed(service, league, fake_api):
    league.registration_open = False
    member = SessionUser("u2", token="tok-bob")

    assert service.leave(league, member) is MembershipState.NONE
    assert membership_state(league, "u2") is MembershipState.NONE


def test_cancel_pending_request(service, league):
    pending_user = SessionUser("u3", token="tok")

    service.leave(league, pending_user)

    assert league.pending_requests == []


def test_leave_without_membership_is_not_found(service, league, outsider, fake_api):
    with pytest.raises(NotFoundError):
        service.leave(league, outsider)

    assert fake_api.calls == []


def test_accept_moves_pending_to_accepted(service, league, commissioner, fake_api):
    accepted = service.accept_request(league, "r1", commissioner)

    assert accepted.user_id == "u3"
    assert membership_state(league, "u3") is MembershipState.ACCEPTED
    assert fake_api.calls == [("accept_request", "L1", "r1", "c1")]


def test_reject_moves_pending_to_none(service, league, commissioner):
    service.reject_request(league, "r1", commissioner)

    assert membership_state(league, "u3") is MembershipState.NONE


@pytest.mark.parametrize(
    "action",
    [
        lambda s, league, u: s.accept_request(league, "r1", u),
        lambda s, league, u: s.reject_request(league, "r1", u),
        lambda s, league, u: s.set_registration(league, u, False),
        lambda s, league, u: s.delete_league(league, u),
        lambda s, league, u: s.pending_requests(league, u),
        lambda s, league, u: s.add_user(league, u, user_id="u7"),
    ],
)
def test_commissioner_only_actions(service, league, fake_api, action):
    member = SessionUser("u2", token="tok-bob")

    with pytest.raises(AuthorizationError):
        action(service, league, member)

    assert fake_api.calls == []


def test_unknown_request_is_not_found(service, league, commissioner, fake_api):
    with pytest.raises(NotFoundError):
        service.accept_request(league, "r404", commissioner)

    assert fake_api.calls == []


def test_failed_accept_leaves_request_pending(service, league, commissioner, fake_api):
    fake_api.fail["accept_request"] = RemoteError("Remote API returned 500", status=500)

    with pytest.raises(RemoteError):
        service.accept_request(league, "r1", commissioner)

    assert membership_state(league, "u3") is MembershipState.PENDING


def test_toggle_registration(service, league, commissioner, fake_api):
    assert service.set_registration(league, commissioner, False) is False
    assert service.set_registration(league, commissioner, True) is True

    assert fake_api.call_names() == ["close_registration", "reopen_registration"]


def test_add_user_requires_id_or_name(service, league, commissioner, fake_api):
    with pytest.raises(ValidationError):
        service.add_user(league, commissioner)

    service.add_user(league, commissioner, name="Frank")

    assert Member("id-Frank", "Frank") in league.members


def test_create_league_requires_name(service, user, fake_api):
    with pytest.raises(ValidationError):
        service.create_league("   ", user)

    league = service.create_league("Monday Crew", user)

    assert league.commissioner_id == "u1"
    assert fake_api.call_names() == ["create_league"]


def test_load_league_fetches_members_and_requests(service, fake_api, league_payload):
    fake_api.leagues["L1"] = league_payload
    fake_api.members["L1"] = [Member("u2", "Bob")]

    league = service.load_league("L1")

    assert league.member_ids() == ["c1", "u2"]
    assert fake_api.call_names() == [
        "fetch_league",
        "fetch_league_members",
        "fetch_pending_members",
    ]

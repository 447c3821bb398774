# tests/test_tournament_service.py
# -------------------------------
# Bracket lifecycle: creation guard, seeding, advancement, teardown.
# -------------------------------

import pytest

from pickem.errors import AuthorizationError, NotFoundError, ValidationError
from pickem.models import SessionUser, TournamentState
from pickem.services.tournament_service import (
    TournamentService,
    bracket_size,
    champion,
    next_round_pairings,
    seed_bracket,
    tournament_active,
    tournament_state,
)

from conftest import make_matchup


@pytest.fixture
def service(fake_api):
    return TournamentService(fake_api, min_starting_week=14)


def test_week_below_minimum_makes_no_calls(service, league, commissioner, fake_api):
    with pytest.raises(ValidationError, match="week 14"):
        service.create(league, commissioner, 10)

    assert fake_api.calls == []


def test_week_is_checked_before_role(service, league, fake_api):
    member = SessionUser("u2", token="tok-bob")

    with pytest.raises(ValidationError):
        service.create(league, member, 10)


def test_only_commissioner_creates(service, league, fake_api):
    member = SessionUser("u2", token="tok-bob")

    with pytest.raises(AuthorizationError):
        service.create(league, member, 14)

    assert fake_api.calls == []


def test_create_tournament(service, league, commissioner, fake_api):
    fake_api.created_matchups = [make_matchup("m1", "c1", "u2")]

    tournament_id, matchups = service.create(league, commissioner, 14, tournament_id="T1")

    assert tournament_id == "T1"
    assert tournament_state(matchups) is TournamentState.ACTIVE
    assert fake_api.call_names() == ["fetch_matchups", "create_tournament"]
    assert fake_api.calls[1] == ("create_tournament", "L1", 14, "T1", "tok-carol")


def test_create_refetches_when_response_is_empty(service, league, commissioner, fake_api):
    fake_api.created_matchups = []

    def created(*args):
        fake_api.matchups["L1"] = [make_matchup("m1", "c1", "u2")]
        return "T9", []

    fake_api.create_tournament = created

    tournament_id, matchups = service.create(league, commissioner, 15)

    assert tournament_id == "T9"
    assert [m.id for m in matchups] == ["m1"]


def test_one_active_tournament_per_league(service, league, commissioner, fake_api):
    existing = [make_matchup("m1", "c1", "u2")]

    with pytest.raises(ValidationError):
        service.create(league, commissioner, 14, existing=existing)

    assert fake_api.calls == []


def test_finished_tournament_allows_a_new_one(service, league, commissioner, fake_api):
    existing = [make_matchup("m1", "c1", "u2", winner="c1")]

    service.create(league, commissioner, 16, existing=existing)

    assert fake_api.call_names() == ["create_tournament"]


def test_between_rounds_does_not_block_creation(service, league, commissioner, fake_api):
    existing = [
        make_matchup("m1", "c1", "u2", winner="c1"),
        make_matchup("m2", "u3", "u4", winner="u4"),
    ]

    service.create(league, commissioner, 16, existing=existing)

    assert fake_api.call_names() == ["create_tournament"]


def test_active_projection():
    assert not tournament_active([])
    assert tournament_active([make_matchup("m1", "a", "b"), make_matchup("m2", "c", "d", winner="c")])
    assert not tournament_active([make_matchup("m1", "a", "b", winner="a")])


def test_bracket_size():
    assert [bracket_size(n) for n in (2, 3, 4, 7, 8, 9)] == [2, 2, 4, 4, 8, 8]


def test_seed_bracket_pairs_top_with_bottom():
    pairings = seed_bracket(["s1", "s2", "s3", "s4", "s5"], 14)

    assert [(p["user1Id"], p["user2Id"]) for p in pairings] == [("s1", "s4"), ("s2", "s3")]
    assert all(p["round"] == 1 and p["week"] == 14 for p in pairings)


def test_seed_bracket_needs_two_players():
    with pytest.raises(ValidationError):
        seed_bracket(["solo"], 14)


def test_next_round_only_after_round_complete():
    matchups = [
        make_matchup("m1", "s1", "s4", winner="s1"),
        make_matchup("m2", "s2", "s3"),
    ]

    with pytest.raises(ValidationError):
        next_round_pairings(matchups)

    matchups[1] = make_matchup("m2", "s2", "s3", winner="s3")
    pairings = next_round_pairings(matchups)

    assert pairings == [{"round": 2, "week": 15, "user1Id": "s1", "user2Id": "s3"}]


def test_complete_after_final():
    matchups = [
        make_matchup("m1", "s1", "s4", winner="s1"),
        make_matchup("m2", "s2", "s3", winner="s3"),
        make_matchup("m3", "s1", "s3", winner="s3", round_=2, week=15),
    ]

    assert tournament_state(matchups) is TournamentState.COMPLETE
    assert champion(matchups) == "s3"
    with pytest.raises(ValidationError):
        next_round_pairings(matchups)


def test_record_winner_merges_by_id(service, commissioner, fake_api):
    matchups = [make_matchup("m1", "c1", "u2"), make_matchup("m2", "u3", "u4")]
    fake_api.matchups["L1"] = matchups
    fake_api.winners["m2"] = "u4"

    updated = service.record_winner(list(matchups), "m2", commissioner)

    assert updated.winner_id == "u4"
    assert fake_api.calls == [("update_matchup_winner", "m2", "tok-carol")]


def test_decided_matchup_is_terminal(service, commissioner, fake_api):
    matchups = [make_matchup("m1", "c1", "u2", winner="u2")]

    with pytest.raises(ValidationError):
        service.record_winner(matchups, "m1", commissioner)

    assert fake_api.calls == []


def test_unknown_matchup(service, commissioner):
    with pytest.raises(NotFoundError):
        service.record_winner([], "m404", commissioner)


def test_settle_week_skips_decided_and_future(service, commissioner, fake_api):
    matchups = [
        make_matchup("m1", "a", "b", winner="a"),
        make_matchup("m2", "c", "d"),
        make_matchup("m3", "e", "f", round_=2, week=15),
    ]
    fake_api.matchups["L1"] = list(matchups)

    settled = service.settle_week(matchups, 14, commissioner)

    assert [m.id for m in settled] == ["m2"]
    assert fake_api.call_names() == ["update_matchup_winner"]
    assert matchups[1].winner_id == "c"


def test_member_can_delete(service, league, fake_api):
    member = SessionUser("u2", token="tok-bob")

    assert service.delete(league, member) is TournamentState.NONE
    assert fake_api.calls == [("delete_tournament", "L1", "tok-bob")]


def test_outsider_cannot_delete(service, league, fake_api):
    with pytest.raises(AuthorizationError):
        service.delete(league, SessionUser("u9", token="tok"))

    assert fake_api.calls == []

"""End-to-end tests for registration, result entry and views through PoolService."""

import logging
from collections import Counter

import pytest

import config
from engine.errors import (
    GameNotFound, InsufficientRoster, InvalidGameResult, ParticipantNotFound, RosterImportError,
)
from engine.events import AllocationDegraded, ParticipantRegistered, ScoresRecomputed


@pytest.fixture
def loaded(service, roster):
    service.import_teams(roster)
    return service


@pytest.fixture
def team_at(store):
    def lookup(region, seed):
        for team in store.list_teams():
            if team.region == region and team.seed == seed:
                return team
        raise KeyError((region, seed))
    return lookup


def _points(store):
    return {(s.participant_id, s.period): (s.points, s.cumulative_points) for s in store.list_scores()}


def test_three_registrations_get_distinct_valid_bundles(service, make_roster):
    service.import_teams(make_roster(seeds=[1, 5, 8, 12]))  # 16 teams, 4 per tier

    results = [
        service.register("Avery", "avery@example.com"),
        service.register("Blake", "blake@example.com"),
        service.register("Casey", "casey@example.com"),
    ]

    keys = set()
    for result in results:
        assert not result.degraded
        assert not result.already_registered
        assert [team.tier for team in result.bundle] == [0, 1, 2, 3]
        assert max(Counter(team.region for team in result.bundle).values()) <= 2
        keys.add(frozenset(team.id for team in result.bundle))
    assert len(keys) == 3


def test_registration_persists_bundle_and_zero_scores(loaded, store):
    result = loaded.register("Avery", "avery@example.com")
    pid = result.participant.id

    stored = store.teams_for_participant(pid, primary_only=True)
    assert {team.id for team, _ in stored} == {team.id for team in result.bundle}
    assert all(not is_bonus for _, is_bonus in stored)

    scores = store.scores_for_participant(pid)
    assert [(s.period, s.points, s.cumulative_points) for s in scores] == [
        (1, 0, 0), (2, 0, 0), (3, 0, 0),
    ]
    assert store.existing_bundles() == {tuple(sorted(t.id for t in result.bundle))}


def test_registration_publishes_event(loaded, events):
    result = loaded.register("Avery", "avery@example.com")
    registered = [e for e in events if isinstance(e, ParticipantRegistered)]
    assert len(registered) == 1
    assert registered[0].participant.id == result.participant.id
    assert registered[0].bundle == result.bundle


def test_registering_same_email_returns_existing_pack(loaded, store, events):
    first = loaded.register("Avery", "avery@example.com")
    again = loaded.register("Avery", "  AVERY@example.com ")

    assert again.already_registered
    assert again.participant.id == first.participant.id
    assert {t.id for t in again.bundle} == {t.id for t in first.bundle}
    assert len(store.list_participants()) == 1
    assert sum(isinstance(e, ParticipantRegistered) for e in events) == 1


def test_register_requires_name_and_email(loaded):
    with pytest.raises(ValueError):
        loaded.register("  ", "avery@example.com")


def test_register_fails_without_full_roster(service, store, make_roster):
    service.import_teams(make_roster(seeds=range(1, 11)))
    with pytest.raises(InsufficientRoster):
        service.register("Avery", "avery@example.com")
    assert store.list_participants() == []


def test_degraded_allocation_still_registers(service, store, events, make_roster):
    service.import_teams(make_roster(regions=["East"]))
    result = service.register("Avery", "avery@example.com")

    assert result.degraded
    assert len(result.bundle) == 4
    assert store.get_participant(result.participant.id) is not None
    assert AllocationDegraded(result.participant.id) in events


def test_round_of_64_win_scores_only_the_holder(loaded, store, team_at, events):
    def bundle(*keys):
        return [team_at(region, seed).id for region, seed in keys]

    avery = store.register_participant("Avery", "avery@example.com", bundle(
        ("East", 1), ("West", 4), ("South", 7), ("Midwest", 11)))
    blake = store.register_participant("Blake", "blake@example.com", bundle(
        ("East", 2), ("West", 5), ("South", 8), ("Midwest", 12)))
    casey = store.register_participant("Casey", "casey@example.com", bundle(
        ("West", 1), ("South", 4), ("Midwest", 7), ("East", 11)))
    before = _points(store)

    favorite = team_at("East", 1)
    game = loaded.add_game("Round of 64", favorite.id, team_at("East", 16).id)
    loaded.record_result(game.id, 82, 55, favorite.id, period=1)
    after = _points(store)

    assert after[(avery.id, 1)][0] == before[(avery.id, 1)][0] + 1
    for pid in (blake.id, casey.id):
        for period in config.PERIODS:
            assert after[(pid, period)] == before[(pid, period)]
    assert ScoresRecomputed(1) in events


def test_record_result_marks_loser_eliminated(loaded, store, team_at):
    winner, loser = team_at("South", 5), team_at("South", 12)
    game = loaded.add_game("Round of 64", winner.id, loser.id)
    loaded.record_result(game.id, 70, 61, winner.id)

    assert store.get_team(loser.id).eliminated
    assert not store.get_team(winner.id).eliminated
    stored = store.get_game(game.id)
    assert stored.completed
    assert (stored.score1, stored.score2, stored.winner_id) == (70, 61, winner.id)


def test_corrected_result_overwrites_previous_one(loaded, store, team_at):
    five, twelve = team_at("South", 5), team_at("South", 12)
    holder = store.register_participant("Avery", "avery@example.com", [
        team_at("East", 1).id, five.id, team_at("West", 8).id, team_at("Midwest", 14).id,
    ])
    game = loaded.add_game("Round of 64", five.id, twelve.id)

    loaded.record_result(game.id, 61, 70, twelve.id)
    assert store.get_team(five.id).eliminated
    assert _points(store)[(holder.id, 1)] == (0, 0)

    loaded.record_result(game.id, 70, 61, five.id)
    assert store.get_team(twelve.id).eliminated
    assert not store.get_team(five.id).eliminated
    assert _points(store)[(holder.id, 1)] == (1, 1)


def test_record_result_rejects_foreign_winner(loaded, team_at):
    game = loaded.add_game("Round of 64", team_at("East", 1).id, team_at("East", 16).id)
    with pytest.raises(InvalidGameResult):
        loaded.record_result(game.id, 80, 50, team_at("West", 1).id)


def test_record_result_rejects_tied_score(loaded, team_at):
    game = loaded.add_game("Round of 64", team_at("East", 1).id, team_at("East", 16).id)
    with pytest.raises(InvalidGameResult):
        loaded.record_result(game.id, 70, 70, team_at("East", 1).id)


def test_record_result_unknown_game(loaded):
    with pytest.raises(GameNotFound):
        loaded.record_result(999, 1, 0, 1)


def test_recompute_is_idempotent_in_store(loaded, store, team_at):
    loaded.register("Avery", "avery@example.com")
    loaded.register("Blake", "blake@example.com")
    for game in loaded.build_opening_round()[:6]:
        loaded.record_result(game.id, 75, 60, game.team1_id)

    first = _points(store)
    loaded.recompute()
    assert _points(store) == first


def test_build_opening_round_pairs_seed_matchups(loaded, store, team_at):
    games = loaded.build_opening_round()
    assert len(games) == 32
    assert all(g.round == "Round of 64" for g in games)

    east_pairs = {
        frozenset((g.team1_id, g.team2_id)) for g in games
        if store.get_team(g.team1_id).region == "East"
    }
    assert frozenset((team_at("East", 1).id, team_at("East", 16).id)) in east_pairs
    assert frozenset((team_at("East", 7).id, team_at("East", 10).id)) in east_pairs

    assert loaded.build_opening_round() == []
    assert len(store.list_games()) == 32


def test_add_game_validates_input(loaded, team_at):
    one, two = team_at("East", 1).id, team_at("East", 2).id
    with pytest.raises(ValueError):
        loaded.add_game("Play-in", one, two)
    with pytest.raises(ValueError):
        loaded.add_game("Sweet 16", one, one)
    with pytest.raises(ValueError):
        loaded.add_game("Sweet 16", one, 999)


def test_roster_cannot_be_replaced_after_registration(loaded, roster):
    loaded.register("Avery", "avery@example.com")
    with pytest.raises(RosterImportError):
        loaded.import_teams(roster)


def test_leaderboards(loaded, store, team_at):
    avery = store.register_participant("Avery", "avery@example.com", [
        team_at("East", 1).id, team_at("West", 4).id, team_at("South", 7).id,
        team_at("Midwest", 11).id,
    ])
    store.register_participant("Blake", "blake@example.com", [
        team_at("East", 2).id, team_at("West", 5).id, team_at("South", 8).id,
        team_at("Midwest", 12).id,
    ])
    game = loaded.add_game("Sweet 16", team_at("East", 1).id, team_at("East", 4).id)
    loaded.record_result(game.id, 66, 60, team_at("East", 1).id)

    overall = loaded.leaderboard()
    assert overall[0].participant_id == avery.id
    assert overall[0].cumulative_points == 4

    period_two = loaded.leaderboard(period=2)
    assert period_two[0].points == 4
    assert loaded.leaderboard(period=1)[0].points == 0

    digest = loaded.standings_digest(period=2, limit=1)
    assert [s.name for s in digest] == ["Avery"]

    winners = loaded.period_winners(2)
    assert winners[0].standing.name == "Avery"
    assert winners[0].payout == 50

    with pytest.raises(ValueError):
        loaded.leaderboard(period=4)


def test_upsets_view(loaded, team_at):
    game = loaded.add_game("Round of 64", team_at("West", 3).id, team_at("West", 14).id)
    loaded.record_result(game.id, 58, 63, team_at("West", 14).id)
    upsets = loaded.upsets()
    assert len(upsets) == 1
    assert upsets[0].seed_gap == 11


def test_participant_detail(loaded):
    result = loaded.register("Avery", "avery@example.com")
    detail = loaded.participant_detail(result.participant.id)
    assert detail.participant.email == "avery@example.com"
    assert len(detail.teams) == 4
    assert [s.period for s in detail.scores] == [1, 2, 3]

    with pytest.raises(ParticipantNotFound):
        loaded.participant_detail(12345)


def test_failing_subscriber_does_not_undo_registration(loaded, store, events, caplog):
    def broken(event):
        raise RuntimeError("template missing")

    loaded.bus.subscribe(ParticipantRegistered, broken)
    with caplog.at_level(logging.ERROR, logger="engine.events"):
        result = loaded.register("Avery", "avery@example.com")

    assert store.get_participant(result.participant.id) is not None
    assert len(result.bundle) == 4
    assert sum(isinstance(e, ParticipantRegistered) for e in events) == 1
    assert "ParticipantRegistered" in caplog.text

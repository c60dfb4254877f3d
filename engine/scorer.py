"""Pool scoring.

Re-derives every participant's per-period and cumulative points from the full
set of completed games. Nothing is incremental: existing score rows are
treated as stale and the whole table is recomputed on every call, so
corrected or out-of-order results always converge to the same standings.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

from tqdm import tqdm

import config
from engine.errors import InvalidGameResult
from models.game import Game, period_for_round
from models.participant import Assignment, Participant
from models.team import Team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreLine:
    points: int
    cumulative: int


@dataclass(frozen=True)
class ScoredGame:
    """Points a completed game awards to whoever holds its winner."""
    game_id: int | None
    period: int
    winner_id: int
    points: int


def upset_bonus(winner_seed: int, loser_seed: int) -> int:
    """Bonus added when the numerically higher seed wins.

    Computed as min(loser_seed - winner_seed, UPSET_BONUS_CAP). Because the
    winner's seed is the larger one, the difference is negative: a 12 seed
    beating a 2 seed yields -10.
    """
    if winner_seed > loser_seed:
        return min(loser_seed - winner_seed, config.UPSET_BONUS_CAP)
    return 0


def game_points(round_name: str, winner_seed: int, loser_seed: int) -> int:
    return config.ROUND_POINTS[round_name] + upset_bonus(winner_seed, loser_seed)


def resolve_winner(game: Game) -> tuple[int, int] | None:
    """Get (winner_id, loser_id) for a completed game.

    Returns None when the game is not completed, has no winner, or has a tied
    final score.

    Raises:
        InvalidGameResult: if the recorded winner did not play in the game
    """
    if not game.completed or game.winner_id is None:
        return None
    if game.score1 is not None and game.score2 is not None and game.score1 == game.score2:
        return None

    loser_id = game.loser_id
    if loser_id is None:
        raise InvalidGameResult(game.id, game.winner_id)
    return game.winner_id, loser_id


def score_games(games: list[Game], teams: list[Team]) -> list[ScoredGame]:
    """Price every completed game once. Unscorable games are logged and skipped."""
    seeds = {team.id: team.seed for team in teams}
    scored = []

    for game in games:
        period = period_for_round(game.round)
        if period is None:
            logger.warning("Skipping game %s: unknown round %r", game.id, game.round)
            continue

        try:
            result = resolve_winner(game)
        except InvalidGameResult as exc:
            logger.warning("Skipping game %s: %s", game.id, exc)
            continue
        if result is None:
            if game.completed:
                logger.warning("Skipping game %s: no decisive winner", game.id)
            continue

        winner_id, loser_id = result
        if winner_id not in seeds or loser_id not in seeds:
            logger.warning("Skipping game %s: team missing from roster", game.id)
            continue

        points = game_points(game.round, seeds[winner_id], seeds[loser_id])
        scored.append(ScoredGame(game.id, period, winner_id, points))

    return scored


def primary_bundles(assignments: list[Assignment]) -> dict[int, set[int]]:
    """Group primary (non-bonus) assignments as {participant_id: {team_id}}."""
    bundles: dict[int, set[int]] = defaultdict(set)
    for assignment in assignments:
        if not assignment.is_bonus:
            bundles[assignment.participant_id].add(assignment.team_id)
    return bundles


def score_bundle(bundle: set[int], scored_games: list[ScoredGame]) -> dict[int, int]:
    """Points earned by one bundle, broken down by period.

    Returns:
        {period: points} for every period, zero where nothing was won
    """
    by_period = {period: 0 for period in config.PERIODS}
    for scored in scored_games:
        if scored.winner_id in bundle:
            by_period[scored.period] += scored.points
    return by_period


def recompute_scores(participants: list[Participant],
                     assignments: list[Assignment],
                     games: list[Game],
                     teams: list[Team],
                     show_progress: bool = False) -> dict[tuple[int, int], ScoreLine]:
    """Recompute every participant's score for every period.

    Args:
        participants: All registered participants
        assignments: Team assignments; bonus rows are ignored
        games: Games to score; only completed games count
        teams: The roster, used for seed lookups
        show_progress: Show progress bar

    Returns:
        {(participant_id, period): ScoreLine(points, cumulative)}
    """
    scored_games = score_games(games, teams)
    bundles = primary_bundles(assignments)

    iterator = participants
    if show_progress:
        iterator = tqdm(iterator, desc="Scoring participants")

    scores: dict[tuple[int, int], ScoreLine] = {}
    for participant in iterator:
        by_period = score_bundle(bundles.get(participant.id, set()), scored_games)
        running = 0
        for period in config.PERIODS:
            running += by_period[period]
            scores[(participant.id, period)] = ScoreLine(by_period[period], running)

    return scores

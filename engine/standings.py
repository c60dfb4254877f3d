"""Leaderboards, period winners and the upset spotlight.

All functions here read already-computed score rows; none of them score games.
"""

from dataclasses import dataclass

import config
from engine.errors import InvalidGameResult
from engine.scorer import resolve_winner
from models.game import Game
from models.participant import Participant
from models.score import Score
from models.team import Team


@dataclass
class Standing:
    rank: int
    participant_id: int
    name: str
    email: str
    points: int
    cumulative_points: int


@dataclass
class PeriodWinner:
    place: int
    standing: Standing
    payout: int


@dataclass
class Upset:
    game: Game
    winner: Team
    loser: Team

    @property
    def seed_gap(self) -> int:
        return abs(self.winner.seed - self.loser.seed)


def period_standings(participants: list[Participant], scores: list[Score], period: int,
                     order_by: str = "points", limit: int | None = None) -> list[Standing]:
    """Rank participants for one period.

    Args:
        participants: All participants
        scores: Score rows; only rows for `period` are used
        period: 1-3
        order_by: "points" ranks by the period's points, "cumulative" by the
            running total through the end of the period
        limit: Keep only the top N rows

    Participants without a score row for the period rank with zero points.
    Ties are broken by name.
    """
    if order_by not in ("points", "cumulative"):
        raise ValueError(f"Unknown ordering: {order_by}")

    by_participant = {s.participant_id: s for s in scores if s.period == period}
    rows = []
    for participant in participants:
        score = by_participant.get(participant.id)
        points = score.points if score else 0
        cumulative = score.cumulative_points if score else 0
        rows.append((participant, points, cumulative))

    key_index = 1 if order_by == "points" else 2
    rows.sort(key=lambda row: (-row[key_index], row[0].name))
    if limit is not None:
        rows = rows[:limit]

    return [
        Standing(rank, p.id, p.name, p.email, points, cumulative)
        for rank, (p, points, cumulative) in enumerate(rows, 1)
    ]


def overall_standings(participants: list[Participant], scores: list[Score],
                      limit: int | None = None) -> list[Standing]:
    """Rank by total points across all periods (cumulative through the last period)."""
    return period_standings(participants, scores, config.PERIODS[-1],
                            order_by="cumulative", limit=limit)


def period_winners(participants: list[Participant], scores: list[Score], period: int,
                   payouts: list[int] = config.PERIOD_PAYOUTS) -> list[PeriodWinner]:
    """Top finishers of a period by period points, one per payout slot."""
    top = period_standings(participants, scores, period, order_by="points", limit=len(payouts))
    return [
        PeriodWinner(standing.rank, standing, payouts[standing.rank - 1])
        for standing in top
    ]


def upset_spotlight(games: list[Game], teams: list[Team],
                    limit: int = config.UPSET_SPOTLIGHT_LIMIT) -> list[Upset]:
    """Completed games won by the higher seed number, largest seed gap first."""
    by_id = {team.id: team for team in teams}
    upsets = []

    for game in games:
        try:
            result = resolve_winner(game)
        except InvalidGameResult:
            continue
        if result is None:
            continue

        winner = by_id.get(result[0])
        loser = by_id.get(result[1])
        if winner is None or loser is None:
            continue
        if winner.seed > loser.seed:
            upsets.append(Upset(game, winner, loser))

    upsets.sort(key=lambda u: u.seed_gap, reverse=True)
    return upsets[:limit]

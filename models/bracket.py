"""Bracket setup helpers.

Opening-round games pair teams within a region by the standard seed
matchups: 1 vs 16, 8 vs 9, 5 vs 12, 4 vs 13, 6 vs 11, 3 vs 14, 7 vs 10, 2 vs 15.
Later rounds are created one game at a time as the bracket advances.
"""

from __future__ import annotations

import config
from models.team import Team


def group_by_region(teams: list[Team]) -> dict[str, dict[int, Team]]:
    """Index teams as {region: {seed: Team}}, regions in first-seen order."""
    regions: dict[str, dict[int, Team]] = {}
    for team in teams:
        regions.setdefault(team.region, {})[team.seed] = team
    return regions


def opening_round_pairings(teams: list[Team]) -> list[tuple[Team, Team]]:
    """Get the Round of 64 matchups for a roster.

    Matchups with a missing seed (e.g. a play-in not yet decided) are skipped.
    """
    pairings = []
    for region, by_seed in group_by_region(teams).items():
        for high_seed, low_seed in config.SEED_MATCHUPS:
            team_a = by_seed.get(high_seed)
            team_b = by_seed.get(low_seed)
            if team_a is None or team_b is None:
                continue
            pairings.append((team_a, team_b))
    return pairings

"""Team pack allocation.

Each participant receives a bundle of four teams, one drawn uniformly at
random from each seed tier (1-3, 4-6, 7-10, 11-16). A candidate bundle is
rejected and redrawn when more than two of its teams share a region, or when
the same set of teams was already issued to another participant.

The retry budget is bounded. When it runs out, the last candidate is returned
with degraded=True so that registration still succeeds.

The allocator is pure: the roster, the index of issued bundles and the random
generator are all supplied by the caller.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Container, Iterable

import numpy as np

import config
from engine.errors import InsufficientRoster
from models.team import Team, tier_for_seed

logger = logging.getLogger(__name__)


@dataclass
class AllocationResult:
    bundle: list[Team] = field(default_factory=list)
    degraded: bool = False
    attempts: int = 0

    @property
    def team_ids(self) -> list[int]:
        return [team.id for team in self.bundle]

    @property
    def key(self) -> tuple[int, ...]:
        return bundle_key(self.team_ids)


def bundle_key(team_ids: Iterable[int]) -> tuple[int, ...]:
    """Canonical form of a bundle for collision checks (order-insensitive)."""
    return tuple(sorted(team_ids))


def partition_tiers(roster: list[Team]) -> list[list[Team]]:
    """Split the roster into the seed tiers. Teams outside every tier are dropped."""
    tiers: list[list[Team]] = [[] for _ in config.SEED_TIERS]
    for team in roster:
        idx = tier_for_seed(team.seed)
        if idx is not None:
            tiers[idx].append(team)
    return tiers


def violates_region_cap(bundle: list[Team], cap: int = config.MAX_TEAMS_PER_REGION) -> bool:
    counts = Counter(team.region for team in bundle)
    return any(count > cap for count in counts.values())


def allocate(roster: list[Team],
             existing_bundles: Container[tuple[int, ...]],
             rng: np.random.Generator,
             max_attempts: int = config.MAX_ALLOCATION_ATTEMPTS) -> AllocationResult:
    """Draw a bundle for a new participant.

    Args:
        roster: All teams currently in the tournament
        existing_bundles: Canonical team-id tuples (see bundle_key) already issued
        rng: Random generator; a seeded generator makes the draw reproducible
        max_attempts: Number of draws before falling back to a degraded bundle

    Returns:
        AllocationResult with one team per tier, in tier order

    Raises:
        InsufficientRoster: if any tier has no teams
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    tiers = partition_tiers(roster)
    empty = [config.SEED_TIERS[i] for i, tier in enumerate(tiers) if not tier]
    if empty:
        raise InsufficientRoster(empty)

    candidate: list[Team] = []
    for attempt in range(1, max_attempts + 1):
        candidate = [tier[rng.integers(len(tier))] for tier in tiers]

        if violates_region_cap(candidate):
            continue
        if bundle_key(team.id for team in candidate) in existing_bundles:
            continue

        return AllocationResult(bundle=candidate, degraded=False, attempts=attempt)

    logger.warning(
        "No valid bundle after %d draws; keeping last candidate %s",
        max_attempts, ", ".join(str(team) for team in candidate),
    )
    return AllocationResult(bundle=candidate, degraded=True, attempts=max_attempts)

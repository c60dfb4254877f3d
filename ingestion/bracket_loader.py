"""Bracket loader - read and write the tournament roster as JSON.

Format:
{
    "regions": [
        {
            "name": "East",
            "teams": {"1": "Duke", "2": "Alabama", ..., "16": "Norfolk St."}
        },
        ...
    ]
}
"""

import json
import os

import config
from engine.errors import RosterImportError
from models.bracket import group_by_region
from models.team import Team


def load_teams_from_json(filepath: str) -> list[Team]:
    """Load the roster from a bracket JSON file."""
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict) or "regions" not in data:
        raise RosterImportError(f"{filepath}: expected a top-level 'regions' list")

    teams = []
    for region_data in data["regions"]:
        region_name = str(region_data.get("name", "")).strip()
        for seed_str, name in region_data.get("teams", {}).items():
            try:
                seed = int(seed_str)
            except ValueError:
                raise RosterImportError(f"{filepath}: invalid seed {seed_str!r} in {region_name}")
            teams.append(Team(name=str(name).strip(), seed=seed, region=region_name))

    validate_roster(teams)
    print(f"Loaded {len(teams)} teams from {filepath}")
    return teams


def save_teams_to_json(teams: list[Team], filepath: str):
    """Save the roster in the bracket JSON format."""
    data = {"regions": []}
    for region_name, by_seed in group_by_region(teams).items():
        data["regions"].append({
            "name": region_name,
            "teams": {str(seed): by_seed[seed].name for seed in sorted(by_seed)},
        })

    if os.path.dirname(filepath):
        os.makedirs(os.path.dirname(filepath), exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    print(f"Saved roster to {filepath}")


def validate_roster(teams: list[Team]):
    """Check names, regions and seeds, and that no seed repeats within a region.

    Raises:
        RosterImportError: describing the first problem found
    """
    seen: set[tuple[str, int]] = set()
    for team in teams:
        if not team.name:
            raise RosterImportError(f"Team with seed {team.seed} in {team.region!r} has no name")
        if not team.region:
            raise RosterImportError(f"{team.name} has no region")
        if not 1 <= team.seed <= config.NUM_SEEDS:
            raise RosterImportError(f"{team.name} has seed {team.seed}, expected 1-{config.NUM_SEEDS}")
        key = (team.region, team.seed)
        if key in seen:
            raise RosterImportError(f"Duplicate seed {team.seed} in region {team.region}")
        seen.add(key)

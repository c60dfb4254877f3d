"""Roster import from a user-prepared CSV.

Expected columns: name (or team), seed, region
"""

import pandas as pd

from engine.errors import RosterImportError
from ingestion.bracket_loader import validate_roster
from models.team import Team


def load_teams_from_csv(filepath: str) -> list[Team]:
    """Load the roster from a CSV file."""
    df = pd.read_csv(filepath)
    df.columns = [str(c).strip().lower() for c in df.columns]

    name_col = "name" if "name" in df.columns else "team"
    missing = [c for c in (name_col, "seed", "region") if c not in df.columns]
    if missing:
        raise RosterImportError(f"{filepath}: missing column(s): {', '.join(missing)}")

    teams = []
    for idx, row in df.iterrows():
        try:
            seed = int(row["seed"])
        except (ValueError, TypeError):
            raise RosterImportError(f"{filepath}: row {idx + 2} has invalid seed {row['seed']!r}")

        name = "" if pd.isna(row[name_col]) else str(row[name_col]).strip()
        region = "" if pd.isna(row["region"]) else str(row["region"]).strip()
        teams.append(Team(name=name, seed=seed, region=region))

    validate_roster(teams)
    print(f"Loaded {len(teams)} teams from {filepath}")
    return teams

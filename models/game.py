"""Game data model.

A game is created by bracket setup with its round and two teams, then
completed exactly once per result entry (re-entry overwrites the result).
"""

from typing import Optional

from sqlmodel import Field, SQLModel

import config


class Game(SQLModel, table=True):
    __tablename__ = "games"

    id: Optional[int] = Field(default=None, primary_key=True)
    round: str = Field(index=True)
    team1_id: int = Field(foreign_key="teams.id")
    team2_id: int = Field(foreign_key="teams.id")
    winner_id: Optional[int] = Field(default=None, foreign_key="teams.id")
    score1: Optional[int] = None
    score2: Optional[int] = None
    completed: bool = Field(default=False, index=True)

    @property
    def team_ids(self) -> tuple[int, int]:
        return self.team1_id, self.team2_id

    @property
    def loser_id(self) -> int | None:
        """The team that did not win, or None when the winner is missing or not in this game."""
        if self.winner_id == self.team1_id:
            return self.team2_id
        if self.winner_id == self.team2_id:
            return self.team1_id
        return None


def period_for_round(round_name: str) -> int | None:
    """Get the scoring period (1-3) that covers a round. None for unknown rounds."""
    for period, rounds in config.PERIOD_ROUNDS.items():
        if round_name in rounds:
            return period
    return None

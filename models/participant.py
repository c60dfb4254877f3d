"""
Participants and their team assignments.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Participant(SQLModel, table=True):
    __tablename__ = "participants"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Assignment(SQLModel, table=True):
    """Links a participant to one team. Primary (tier-drawn) rows have is_bonus=False."""

    __tablename__ = "team_assignments"

    id: Optional[int] = Field(default=None, primary_key=True)
    participant_id: int = Field(foreign_key="participants.id", index=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    is_bonus: bool = False

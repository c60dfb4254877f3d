"""
Per-period score rows. Derived data, rewritten on every recomputation.
"""
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class Score(SQLModel, table=True):
    __tablename__ = "scores"
    __table_args__ = (
        UniqueConstraint("participant_id", "period", name="uq_participant_period"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    participant_id: int = Field(foreign_key="participants.id", index=True)
    period: int
    points: int = 0
    cumulative_points: int = 0

"""Team data model."""

from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint

import config


class Team(SQLModel, table=True):
    __tablename__ = "teams"
    __table_args__ = (
        UniqueConstraint("region", "seed", name="uq_region_seed"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    seed: int = Field(index=True)
    region: str = Field(index=True)
    eliminated: bool = False

    def __str__(self):
        return f"({self.seed}) {self.name}"

    @property
    def tier(self) -> int | None:
        return tier_for_seed(self.seed)


def tier_for_seed(seed: int) -> int | None:
    """Get the seed tier index (0-3) for a seed. None if the seed is outside every tier."""
    for idx, (low, high) in enumerate(config.SEED_TIERS):
        if low <= seed <= high:
            return idx
    return None

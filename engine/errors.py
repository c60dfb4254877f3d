"""Pool error types.

Allocation degradation is not an error: it is reported on the
AllocationResult and published as an AllocationDegraded event.
"""


class PoolError(Exception):
    """Base class for errors raised by the pool engine."""


class InsufficientRoster(PoolError):
    """Some seed tier has no teams, so no bundle can be drawn."""

    def __init__(self, empty_tiers: list[tuple[int, int]]):
        self.empty_tiers = empty_tiers
        ranges = ", ".join(f"{low}-{high}" for low, high in empty_tiers)
        super().__init__(f"No teams available in seed tier(s): {ranges}")


class InvalidGameResult(PoolError):
    """A game result with no valid winner: a tie, or a winner who did not play."""

    def __init__(self, game_id: int | None, winner_id: int | None, reason: str | None = None):
        self.game_id = game_id
        self.winner_id = winner_id
        super().__init__(reason or f"Winner {winner_id} did not play in game {game_id}")


class GameNotFound(PoolError):
    def __init__(self, game_id: int):
        self.game_id = game_id
        super().__init__(f"Game not found: {game_id}")


class ParticipantNotFound(PoolError):
    def __init__(self, participant_id: int):
        self.participant_id = participant_id
        super().__init__(f"Participant not found: {participant_id}")


class RosterImportError(PoolError):
    """A roster file is malformed or cannot replace the current roster."""

"""Pool service - the event layer that invokes the allocator and the scorer.

Registration runs the allocator once and stores the bundle; result entry
stores the result and reruns the full score recomputation. Both publish
events on the bus for external delivery.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

import config
from engine.allocator import allocate
from engine.errors import InvalidGameResult, ParticipantNotFound
from engine.events import AllocationDegraded, EventBus, ParticipantRegistered, ScoresRecomputed
from engine.scorer import ScoreLine, recompute_scores
from engine.standings import (
    PeriodWinner, Standing, Upset, overall_standings, period_standings, period_winners,
    upset_spotlight,
)
from models.bracket import opening_round_pairings
from models.game import Game
from models.participant import Participant
from models.score import Score
from models.team import Team
from store.repository import PoolStore

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    participant: Participant
    bundle: list[Team]
    already_registered: bool = False
    degraded: bool = False


@dataclass
class ParticipantDetail:
    participant: Participant
    teams: list[tuple[Team, bool]] = field(default_factory=list)
    scores: list[Score] = field(default_factory=list)


class PoolService:
    def __init__(self, store: PoolStore, bus: EventBus | None = None,
                 rng: np.random.Generator | None = None,
                 max_attempts: int = config.MAX_ALLOCATION_ATTEMPTS):
        self.store = store
        self.bus = bus or EventBus()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts

    # --- Roster and bracket setup ---

    def import_teams(self, teams: list[Team]) -> int:
        return self.store.replace_teams(teams)

    def list_teams(self) -> list[Team]:
        return self.store.list_teams()

    def add_game(self, round_name: str, team1_id: int, team2_id: int) -> Game:
        if round_name not in config.ROUND_NAMES:
            raise ValueError(f"Unknown round: {round_name!r}")
        if team1_id == team2_id:
            raise ValueError("A game needs two different teams")
        for team_id in (team1_id, team2_id):
            if self.store.get_team(team_id) is None:
                raise ValueError(f"Unknown team: {team_id}")
        return self.store.add_game(round_name, team1_id, team2_id)

    def build_opening_round(self) -> list[Game]:
        """Create the Round of 64 games from the roster's seed matchups.

        Matchups that already have a game are left alone, so this is safe to rerun.
        """
        round_name = config.ROUND_NAMES[0]
        scheduled = {frozenset(g.team_ids) for g in self.store.list_games(round_name)}
        created = []
        for team_a, team_b in opening_round_pairings(self.store.list_teams()):
            if frozenset((team_a.id, team_b.id)) in scheduled:
                continue
            created.append(self.store.add_game(round_name, team_a.id, team_b.id))
        logger.info("Scheduled %d %s games", len(created), round_name)
        return created

    # --- Registration ---

    def register(self, name: str, email: str) -> RegistrationResult:
        """Register a participant and hand out a team pack.

        An email that is already registered gets its existing bundle back.

        Raises:
            InsufficientRoster: if some seed tier has no teams
        """
        name = name.strip()
        email = email.strip().lower()
        if not name or not email:
            raise ValueError("Name and email are required")

        existing = self.store.find_participant_by_email(email)
        if existing is not None:
            bundle = [team for team, _ in
                      self.store.teams_for_participant(existing.id, primary_only=True)]
            return RegistrationResult(existing, bundle, already_registered=True)

        allocation = allocate(self.store.list_teams(), self.store.existing_bundles(),
                              self.rng, max_attempts=self.max_attempts)
        participant = self.store.register_participant(name, email, allocation.team_ids)
        logger.info("Registered participant %s with teams %s", participant.id,
                    ", ".join(str(t) for t in allocation.bundle))

        if allocation.degraded:
            self.bus.publish(AllocationDegraded(participant.id))
        self.bus.publish(ParticipantRegistered(participant, allocation.bundle))

        return RegistrationResult(participant, allocation.bundle, degraded=allocation.degraded)

    # --- Results and scoring ---

    def record_result(self, game_id: int, score1: int | None, score2: int | None,
                      winner_id: int, period: int | None = None) -> dict[tuple[int, int], ScoreLine]:
        """Enter (or correct) a game result, then recompute all scores.

        Raises:
            GameNotFound: if the game does not exist
            InvalidGameResult: if the winner did not play in the game or the score is tied
        """
        if score1 is not None and score2 is not None and score1 == score2:
            raise InvalidGameResult(game_id, winner_id, f"Game {game_id} cannot end in a tie")
        self.store.record_game_result(game_id, score1, score2, winner_id)
        return self.recompute(period)

    def recompute(self, period: int | None = None,
                  show_progress: bool = False) -> dict[tuple[int, int], ScoreLine]:
        """Recompute and store every participant's score for every period."""
        scores = recompute_scores(
            participants=self.store.list_participants(),
            assignments=self.store.list_assignments(primary_only=True),
            games=self.store.list_completed_games(),
            teams=self.store.list_teams(),
            show_progress=show_progress,
        )
        self.store.save_scores(scores)
        self.bus.publish(ScoresRecomputed(period or config.CURRENT_PERIOD))
        return scores

    # --- Views ---

    def leaderboard(self, period: int | None = None, limit: int | None = None) -> list[Standing]:
        """Overall standings, or a single period's standings by period points."""
        participants = self.store.list_participants()
        scores = self.store.list_scores()
        if period is None:
            return overall_standings(participants, scores, limit=limit)
        _check_period(period)
        return period_standings(participants, scores, period, order_by="points", limit=limit)

    def standings_digest(self, period: int = config.CURRENT_PERIOD,
                         limit: int = config.STANDINGS_LIMIT) -> list[Standing]:
        """Top participants by running total through the given period."""
        _check_period(period)
        return period_standings(self.store.list_participants(), self.store.list_scores(),
                                period, order_by="cumulative", limit=limit)

    def period_winners(self, period: int) -> list[PeriodWinner]:
        _check_period(period)
        return period_winners(self.store.list_participants(), self.store.list_scores(), period)

    def upsets(self, limit: int = config.UPSET_SPOTLIGHT_LIMIT) -> list[Upset]:
        return upset_spotlight(self.store.list_completed_games(), self.store.list_teams(), limit)

    def participant_detail(self, participant_id: int) -> ParticipantDetail:
        participant = self.store.get_participant(participant_id)
        if participant is None:
            raise ParticipantNotFound(participant_id)
        return ParticipantDetail(
            participant=participant,
            teams=self.store.teams_for_participant(participant_id),
            scores=self.store.scores_for_participant(participant_id),
        )


def _check_period(period: int):
    if period not in config.PERIODS:
        raise ValueError(f"Invalid period: {period}")

"""
Pool store - the read/write operations the engine needs, over SQLModel tables.

Every write method runs in its own transaction: it either commits all of its
rows or rolls back and re-raises. Database errors propagate unchanged.
"""
import logging
from contextlib import contextmanager

from sqlmodel import Session, select

import config
from engine.allocator import bundle_key
from engine.errors import GameNotFound, InvalidGameResult, RosterImportError
from engine.scorer import ScoreLine
from models.game import Game
from models.participant import Assignment, Participant
from models.score import Score
from models.team import Team

logger = logging.getLogger(__name__)


class PoolStore:
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _transaction(self):
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    # --- Teams ---

    def list_teams(self) -> list[Team]:
        return list(self.session.exec(select(Team).order_by(Team.region, Team.seed)).all())

    def get_team(self, team_id: int) -> Team | None:
        return self.session.get(Team, team_id)

    def replace_teams(self, teams: list[Team]) -> int:
        """Replace the whole roster. Refused once teams are referenced by assignments or games."""
        has_assignments = self.session.exec(select(Assignment).limit(1)).first() is not None
        has_games = self.session.exec(select(Game).limit(1)).first() is not None
        if has_assignments or has_games:
            raise RosterImportError(
                "Cannot replace the roster after teams have been assigned or scheduled"
            )

        with self._transaction() as session:
            for existing in session.exec(select(Team)).all():
                session.delete(existing)
            session.flush()
            for team in teams:
                session.add(Team(name=team.name, seed=team.seed, region=team.region))

        logger.info("Roster replaced with %d teams", len(teams))
        return len(teams)

    # --- Participants and assignments ---

    def list_participants(self) -> list[Participant]:
        return list(self.session.exec(
            select(Participant).order_by(Participant.created_at, Participant.id)
        ).all())

    def get_participant(self, participant_id: int) -> Participant | None:
        return self.session.get(Participant, participant_id)

    def find_participant_by_email(self, email: str) -> Participant | None:
        return self.session.exec(
            select(Participant).where(Participant.email == email)
        ).first()

    def list_assignments(self, primary_only: bool = False) -> list[Assignment]:
        query = select(Assignment)
        if primary_only:
            query = query.where(Assignment.is_bonus == False)  # noqa: E712
        return list(self.session.exec(query.order_by(Assignment.id)).all())

    def existing_bundles(self) -> set[tuple[int, ...]]:
        """Canonical team-id tuples of every participant's primary bundle."""
        by_participant: dict[int, list[int]] = {}
        for assignment in self.list_assignments(primary_only=True):
            by_participant.setdefault(assignment.participant_id, []).append(assignment.team_id)
        return {bundle_key(team_ids) for team_ids in by_participant.values()}

    def _add_assignments(self, participant_id: int, team_ids: list[int], is_bonus: bool):
        for team_id in team_ids:
            self.session.add(Assignment(participant_id=participant_id, team_id=team_id,
                                        is_bonus=is_bonus))

    def save_assignments(self, participant_id: int, team_ids: list[int], is_bonus: bool = False):
        """Store a participant's assignments: all of them or none."""
        with self._transaction():
            self._add_assignments(participant_id, team_ids, is_bonus)

    def register_participant(self, name: str, email: str, team_ids: list[int]) -> Participant:
        """Create a participant with its primary bundle and zeroed score rows, atomically."""
        with self._transaction() as session:
            participant = Participant(name=name, email=email)
            session.add(participant)
            session.flush()

            self._add_assignments(participant.id, team_ids, is_bonus=False)
            for period in config.PERIODS:
                session.add(Score(participant_id=participant.id, period=period))

        self.session.refresh(participant)
        return participant

    def teams_for_participant(self, participant_id: int,
                              primary_only: bool = False) -> list[tuple[Team, bool]]:
        """Get (team, is_bonus) pairs assigned to a participant."""
        query = (
            select(Team, Assignment.is_bonus)
            .join(Assignment, Assignment.team_id == Team.id)
            .where(Assignment.participant_id == participant_id)
        )
        if primary_only:
            query = query.where(Assignment.is_bonus == False)  # noqa: E712
        rows = self.session.exec(query.order_by(Team.seed, Team.region)).all()
        return [(team, is_bonus) for team, is_bonus in rows]

    # --- Games ---

    def list_games(self, round_name: str | None = None) -> list[Game]:
        query = select(Game)
        if round_name is not None:
            query = query.where(Game.round == round_name)
        return list(self.session.exec(query.order_by(Game.id)).all())

    def list_completed_games(self) -> list[Game]:
        return list(self.session.exec(
            select(Game).where(Game.completed == True).order_by(Game.id)  # noqa: E712
        ).all())

    def get_game(self, game_id: int) -> Game | None:
        return self.session.get(Game, game_id)

    def add_game(self, round_name: str, team1_id: int, team2_id: int) -> Game:
        with self._transaction() as session:
            game = Game(round=round_name, team1_id=team1_id, team2_id=team2_id)
            session.add(game)
        self.session.refresh(game)
        return game

    def record_game_result(self, game_id: int, score1: int | None, score2: int | None,
                           winner_id: int) -> Game:
        """Complete a game and update elimination flags.

        Re-entering a result overwrites the previous one; if the winner changed,
        the team that was previously marked eliminated is restored.
        """
        game = self.get_game(game_id)
        if game is None:
            raise GameNotFound(game_id)
        if winner_id not in game.team_ids:
            raise InvalidGameResult(game_id, winner_id)

        previous_winner = game.winner_id if game.completed else None

        with self._transaction() as session:
            game.score1 = score1
            game.score2 = score2
            game.winner_id = winner_id
            game.completed = True
            session.add(game)

            loser = session.get(Team, game.loser_id)
            if loser is not None:
                loser.eliminated = True
                session.add(loser)

            if previous_winner is not None and previous_winner != winner_id:
                winner = session.get(Team, winner_id)
                if winner is not None:
                    winner.eliminated = False
                    session.add(winner)

        self.session.refresh(game)
        return game

    # --- Scores ---

    def list_scores(self, period: int | None = None) -> list[Score]:
        query = select(Score)
        if period is not None:
            query = query.where(Score.period == period)
        return list(self.session.exec(query.order_by(Score.participant_id, Score.period)).all())

    def scores_for_participant(self, participant_id: int) -> list[Score]:
        return list(self.session.exec(
            select(Score).where(Score.participant_id == participant_id).order_by(Score.period)
        ).all())

    def save_scores(self, scores: dict[tuple[int, int], ScoreLine]):
        """Overwrite score rows with freshly computed values in one transaction."""
        existing = {(s.participant_id, s.period): s for s in self.list_scores()}

        with self._transaction() as session:
            for (participant_id, period), line in scores.items():
                row = existing.get((participant_id, period))
                if row is None:
                    row = Score(participant_id=participant_id, period=period)
                row.points = line.points
                row.cumulative_points = line.cumulative
                session.add(row)

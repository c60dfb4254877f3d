"""
SQLModel models for the team pack pool.
"""
from models.team import Team
from models.participant import Assignment, Participant
from models.game import Game
from models.score import Score

__all__ = [
    "Team",
    "Participant",
    "Assignment",
    "Game",
    "Score",
]

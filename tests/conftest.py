"""Shared fixtures: in-memory database, rosters and a seeded generator."""

import numpy as np
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401
from engine.events import AllocationDegraded, EventBus, ParticipantRegistered, ScoresRecomputed
from engine.service import PoolService
from models.team import Team
from store.repository import PoolStore

REGIONS = ["East", "West", "South", "Midwest"]


def build_roster(regions=REGIONS, seeds=range(1, 17), with_ids=True) -> list[Team]:
    teams = []
    for region in regions:
        for seed in seeds:
            team_id = len(teams) + 1 if with_ids else None
            teams.append(Team(id=team_id, name=f"{region} {seed}", seed=seed, region=region))
    return teams


@pytest.fixture
def make_roster():
    return build_roster


@pytest.fixture
def roster():
    return build_roster()


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session):
    return PoolStore(session)


@pytest.fixture
def events():
    return []


@pytest.fixture
def service(store, rng, events):
    bus = EventBus()
    for event_type in (ParticipantRegistered, ScoresRecomputed, AllocationDegraded):
        bus.subscribe(event_type, events.append)
    return PoolService(store, bus=bus, rng=rng)

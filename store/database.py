"""
Database engine and session management.
"""
import os

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

import config
import models  # noqa: F401  registers every table on SQLModel.metadata


def make_engine(database_url: str = config.DATABASE_URL, **kwargs) -> Engine:
    """Create an engine, preparing the data directory for file-backed SQLite."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Use check_same_thread only for SQLite
        connect_args["check_same_thread"] = False
        path = database_url.split(":///", 1)[-1]
        if path and path != ":memory:" and os.path.dirname(path):
            os.makedirs(os.path.dirname(path), exist_ok=True)

    return create_engine(database_url, echo=False, connect_args=connect_args, **kwargs)


def create_db_and_tables(engine: Engine):
    """Create all tables defined in SQLModel metadata."""
    SQLModel.metadata.create_all(engine)

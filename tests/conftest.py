"""Fixtures shared by the db and service tests"""

import random
from typing import Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from gambit.db.schema import Base

# one in-memory SQLite connection shared by all sessions (StaticPool)
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

SessionForTests = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Fresh tables for every test: they are dropped again at teardown."""
    Base.metadata.create_all(bind=engine)
    session = SessionForTests()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source: AI picks become reproducible."""
    return random.Random(1234)

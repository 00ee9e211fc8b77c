"""Pytest fixtures for shared lookup tests.

Each test gets a fresh in-memory SQLite database with the lookup tables.
"""

import gc
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

import shared.models  # noqa: F401


@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine with all lookup tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    try:
        yield engine
    finally:
        engine.dispose()
        gc.collect()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a database session, rolled back after each test."""
    session = Session(db_engine)
    try:
        yield session
    finally:
        session.rollback()
        session.close()

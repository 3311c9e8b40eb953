"""
Pytest configuration and fixtures for all tests.

Every test gets a fresh in-memory SQLite database. The API client shares
that database through a ``get_db`` dependency override.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eduportal_backend import model  # noqa: F401
from eduportal_backend.database import get_db
from eduportal_backend.model.base import Base
from eduportal_backend.server import app
from eduportal_backend.tests.fixtures import make_school


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def SessionLocal(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(SessionLocal):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(SessionLocal):

    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def school(db):
    return make_school(db, "Springfield Elementary", "admin@springfield.edu")


@pytest.fixture
def other_school(db):
    return make_school(db, "Shelbyville High", "admin@shelbyville.edu")

"""
- Spins up temp test DB
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Provide a client fixture (TestClient(app)) that already has the DB override applied.
- Small factories for users/puzzles/gameplays so service tests stay short.
"""
import os
import json
import pytest
from datetime import datetime, timedelta
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Must be set before campus_wordle.db is imported (it refuses to start without one),
# and keeps the app from running the dev-only create_all against it.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("APP_ENV", "test")

from campus_wordle.db import Base, get_db
from campus_wordle.main import app
from campus_wordle import config
from campus_wordle import models

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets Starlette's TestClient and SQLAlchemy
    # share ONE in-memory SQLite database across threads.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The services commit, so wipe every table before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM gameplays"))
        conn.execute(text("DELETE FROM game_stats"))
        conn.execute(text("DELETE FROM users"))
        conn.execute(text("DELETE FROM games"))
        conn.execute(text("DELETE FROM admins"))
    yield


@pytest.fixture(autouse=True)
def _no_webhook(monkeypatch):
    monkeypatch.setattr(config, "PROGRESS_WEBHOOK_URL", "")


@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session for every request."""
    def _get_db_for_tests():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_for_tests
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


# ---------------- factories ----------------

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def make_user(db_session):
    def _make(username: str, full_name: str = None):
        user = models.User(username=username, full_name=full_name, device_info=[])
        user.stats = models.GameStats(guess_distribution={})
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture
def make_puzzle(db_session):
    """Puzzles get increasing created_at, so creation order == level order."""
    counter = {"n": 0}

    def _make(word: str, hint: str = None, active: bool = True):
        counter["n"] += 1
        puzzle = models.Puzzle(
            word=word.upper(),
            hint=hint,
            active=active,
            created_at=BASE_TIME + timedelta(minutes=counter["n"]),
        )
        db_session.add(puzzle)
        db_session.commit()
        return puzzle
    return _make


@pytest.fixture
def make_gameplay(db_session):
    """Insert a gameplay row directly, with whatever numbers a test needs."""
    def _make(user, puzzle, points: int, tries: int, completed: bool = True, created_at: datetime = None):
        attempt = models.Attempt(
            user_id=user.id,
            puzzle_id=puzzle.id,
            num_tries=tries,
            points_earned=points,
            guess_sequence=json.dumps(["X" * len(puzzle.word)] * tries),
            completed=completed,
            created_at=created_at or BASE_TIME,
            updated_at=created_at or BASE_TIME,
            completed_at=(created_at or BASE_TIME) if completed else None,
        )
        db_session.add(attempt)
        db_session.commit()
        return attempt
    return _make

"""
Database wiring for the wordle service.

DATABASE_URL picks the backend: mysql+pymysql://... in the deployed
service, sqlite+pysqlite:///... for local play and the test suite.
Services get a Session from get_db() and decide themselves when to commit.
"""

import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from . import config  # noqa: F401  (loads .env before we read DATABASE_URL)

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError(
        "DATABASE_URL is not set. Put it in the environment or in .env (see .env.example)."
    )

# Guesses are saved on every submit, so stale pooled MySQL connections get checked first
engine = create_engine(DATABASE_URL, pool_pre_ping=True, future=True)

# No autoflush: services flush explicitly before reading back new ids
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class Base(DeclarativeBase):
    """Declarative base for users, games, gameplays, game_stats and admins."""


def get_db() -> Generator:
    """FastAPI dependency: one Session per request, always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

"""
SQLAlchemy ORM models.

Tables:
- users: player accounts (registered or anonymous guests)
- games: puzzles; a puzzle's level is its position among active puzzles by created_at
- gameplays: one row per (user, puzzle), updated in place on every guess
- game_stats: per-user counters, best-effort only (rankings read gameplays)
- admins: separate identity space for the admin console

Why JSON for guess_sequence?
- It's a short list of words; JSON text keeps the column portable across MySQL/SQLite.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String, Integer, DateTime, Boolean, ForeignKey, JSON, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Always stored lowercase/trimmed; callers normalize before lookups
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    # Display name (the claim dialog stores the player's handle here)
    full_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    # Guests have no password until they register
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    device_info: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    attempts: Mapped[list["Attempt"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    stats: Mapped[Optional["GameStats"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )


class Puzzle(Base):
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Uppercase letters only, 3..7 long
    word: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    hint: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Ordering key for levels (ties broken by id)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    attempts: Mapped[list["Attempt"]] = relationship(
        back_populates="puzzle",
        cascade="all, delete-orphan",
    )


class Attempt(Base):
    __tablename__ = "gameplays"
    # One progress row per player per puzzle
    __table_args__ = (UniqueConstraint("user_id", "game_id", name="uq_gameplay_user_game"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    puzzle_id: Mapped[int] = mapped_column(
        "game_id", Integer, ForeignKey("games.id", ondelete="CASCADE"), index=True
    )
    user: Mapped[User] = relationship(back_populates="attempts")
    puzzle: Mapped[Puzzle] = relationship(back_populates="attempts")

    num_tries: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # JSON-encoded list of guesses, oldest first
    guess_sequence: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # created_at = first guess; completed_at = the winning guess
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


class GameStats(Base):
    __tablename__ = "game_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    user: Mapped[User] = relationship(back_populates="stats")

    games_played: Mapped[int] = mapped_column(Integer, default=0)
    games_won: Mapped[int] = mapped_column(Integer, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    max_streak: Mapped[int] = mapped_column(Integer, default=0)
    # {"3": 2, "5": 1} -> tries needed per win
    guess_distribution: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    last_played_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

"""
Admin console operations: puzzles, users, dashboard counts.

Deletes cascade through the ORM relationships and are committed once, so a
user (or puzzle) and its gameplays/stats disappear together or not at all.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from .engine import validate_word
from .errors import Conflict, NotFound, ValidationFailed
from .models import Puzzle as PuzzleORM, User as UserORM
from .repository import WordleRepository, normalize_username
from .results import action
from .schemas import AdminCountsOut, PuzzleOut, UserOut
from .security import hash_password

logger = logging.getLogger(__name__)


# --- Puzzles ---

@action("Failed to create game")
def create_puzzle(db: Session, word: str, hint: Optional[str] = None, active: bool = True) -> PuzzleOut:
    repo = WordleRepository(db)
    word = validate_word(word)
    if repo.get_puzzle_by_word(word) is not None:
        raise Conflict("Word already exists in the database")

    puzzle = repo.add_puzzle(PuzzleORM(word=word, hint=(hint or None), active=active))
    db.commit()
    logger.info("Created game %s", puzzle.id)
    return PuzzleOut.model_validate(puzzle)


@action("Failed to update game")
def toggle_puzzle(db: Session, puzzle_id: int) -> PuzzleOut:
    repo = WordleRepository(db)
    puzzle = repo.get_puzzle(puzzle_id)
    if puzzle is None:
        raise NotFound("Game not found")

    puzzle.active = not puzzle.active
    db.commit()
    logger.info("Game %s is now %s", puzzle.id, "active" if puzzle.active else "inactive")
    return PuzzleOut.model_validate(puzzle)


@action("Failed to delete game")
def delete_puzzle(db: Session, puzzle_id: int) -> int:
    repo = WordleRepository(db)
    puzzle = repo.get_puzzle(puzzle_id)
    if puzzle is None:
        raise NotFound("Game not found")

    repo.delete_puzzle(puzzle)
    db.commit()
    logger.info("Deleted game %s and its gameplays", puzzle_id)
    return puzzle_id


@action("Failed to get games")
def list_puzzles(db: Session) -> list[PuzzleOut]:
    return [PuzzleOut.model_validate(p) for p in WordleRepository(db).list_puzzles()]


# --- Users ---

@action("Failed to get users")
def list_users(db: Session) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in WordleRepository(db).list_users()]


@action("Failed to create user")
def create_user(db: Session, username: str, password: str, email: Optional[str] = None) -> UserOut:
    repo = WordleRepository(db)
    username = normalize_username(username)
    if not username or not password:
        raise ValidationFailed("Username and password are required")
    if repo.username_taken(username):
        raise Conflict("User already exists")
    email = email.strip().lower() if email else None
    if email and repo.get_user_by_email(email) is not None:
        raise Conflict("Email already taken")

    user = repo.add_user(UserORM(
        username=username,
        password_hash=hash_password(password),
        email=email,
        device_info=[],
    ))
    db.commit()
    logger.info("Admin created user %s (%s)", user.id, user.username)
    return UserOut.model_validate(user)


@action("Failed to delete user")
def delete_user(db: Session, user_id: int) -> int:
    repo = WordleRepository(db)
    user = repo.get_user(user_id)
    if user is None:
        raise NotFound("User not found")

    repo.delete_user(user)
    db.commit()
    logger.info("Deleted user %s with their gameplays and stats", user_id)
    return user_id


@action("Failed to get game stats")
def dashboard_counts(db: Session) -> AdminCountsOut:
    return AdminCountsOut(**WordleRepository(db).counts())

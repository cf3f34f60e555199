"""
Persistence gateway: typed accessors over users, games (puzzles),
gameplays (attempts), game_stats and admins.

Public methods are small predicate reads or single-row writes. Commits are
left to the service functions so one operation can stay one transaction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from .models import (
    User as UserORM,
    Puzzle as PuzzleORM,
    Attempt as AttemptORM,
    GameStats as StatsORM,
    Admin as AdminORM,
)


def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


class WordleRepository:
    def __init__(self, db: Session):
        self.db = db

    # --- Users ---

    def get_user(self, user_id: int) -> Optional[UserORM]:
        return self.db.get(UserORM, user_id)

    def get_user_by_username(self, username: str) -> Optional[UserORM]:
        return self.db.execute(
            select(UserORM).where(UserORM.username == normalize_username(username)).limit(1)
        ).scalar_one_or_none()

    def get_user_by_email(self, email: str) -> Optional[UserORM]:
        return self.db.execute(
            select(UserORM).where(UserORM.email == email.strip().lower()).limit(1)
        ).scalar_one_or_none()

    def find_user_for_login(self, username_or_email: str) -> Optional[UserORM]:
        key = normalize_username(username_or_email)
        return self.db.execute(
            select(UserORM).where(or_(UserORM.username == key, UserORM.email == key)).limit(1)
        ).scalars().first()

    def username_taken(self, username: str) -> bool:
        return self.get_user_by_username(username) is not None

    def add_user(self, user: UserORM) -> UserORM:
        """Insert a user together with its zeroed stats row."""
        user.stats = StatsORM(guess_distribution={})
        self.db.add(user)
        self.db.flush()
        return user

    def list_users(self) -> list[UserORM]:
        return list(self.db.execute(select(UserORM).order_by(UserORM.created_at.desc())).scalars())

    def delete_user(self, user: UserORM) -> None:
        # ORM cascade removes gameplays and game_stats in the same flush
        self.db.delete(user)

    # --- Puzzles ---

    def get_puzzle(self, puzzle_id: int) -> Optional[PuzzleORM]:
        return self.db.get(PuzzleORM, puzzle_id)

    def get_puzzle_by_word(self, word: str) -> Optional[PuzzleORM]:
        return self.db.execute(
            select(PuzzleORM).where(PuzzleORM.word == word.upper()).limit(1)
        ).scalar_one_or_none()

    def active_puzzles(self) -> list[PuzzleORM]:
        """Active puzzles in level order (oldest first, id breaks ties)."""
        return list(
            self.db.execute(
                select(PuzzleORM)
                .where(PuzzleORM.active.is_(True))
                .order_by(PuzzleORM.created_at.asc(), PuzzleORM.id.asc())
            ).scalars()
        )

    def count_active_puzzles(self) -> int:
        return self.db.execute(
            select(func.count(PuzzleORM.id)).where(PuzzleORM.active.is_(True))
        ).scalar_one()

    def list_puzzles(self) -> list[PuzzleORM]:
        return list(
            self.db.execute(
                select(PuzzleORM).order_by(PuzzleORM.created_at.desc(), PuzzleORM.id.desc())
            ).scalars()
        )

    def add_puzzle(self, puzzle: PuzzleORM) -> PuzzleORM:
        self.db.add(puzzle)
        self.db.flush()
        return puzzle

    def delete_puzzle(self, puzzle: PuzzleORM) -> None:
        self.db.delete(puzzle)

    # --- Attempts ---

    def get_attempt(self, user_id: int, puzzle_id: int) -> Optional[AttemptORM]:
        return self.db.execute(
            select(AttemptORM)
            .where(AttemptORM.user_id == user_id, AttemptORM.puzzle_id == puzzle_id)
            .limit(1)
        ).scalar_one_or_none()

    def completed_puzzle_ids(self, user_id: int) -> set[int]:
        return set(
            self.db.execute(
                select(AttemptORM.puzzle_id).where(
                    AttemptORM.user_id == user_id, AttemptORM.completed.is_(True)
                )
            ).scalars()
        )

    def played_puzzle_ids(self, user_id: int) -> set[int]:
        return set(
            self.db.execute(select(AttemptORM.puzzle_id).where(AttemptORM.user_id == user_id)).scalars()
        )

    def add_attempt(self, attempt: AttemptORM) -> AttemptORM:
        self.db.add(attempt)
        self.db.flush()
        return attempt

    def user_attempts(self, user_id: int) -> list[tuple[AttemptORM, PuzzleORM]]:
        rows = self.db.execute(
            select(AttemptORM, PuzzleORM)
            .join(PuzzleORM, AttemptORM.puzzle_id == PuzzleORM.id)
            .where(AttemptORM.user_id == user_id)
            .order_by(AttemptORM.created_at.desc(), AttemptORM.id.desc())
        ).all()
        return [(a, p) for a, p in rows]

    # --- Stats ---

    def get_or_create_stats(self, user_id: int) -> StatsORM:
        stats = self.db.execute(
            select(StatsORM).where(StatsORM.user_id == user_id).limit(1)
        ).scalar_one_or_none()
        if stats is None:
            stats = StatsORM(user_id=user_id, guess_distribution={})
            self.db.add(stats)
            self.db.flush()
        return stats

    # --- Admins ---

    def admin_exists(self) -> bool:
        return self.db.execute(select(AdminORM.id).limit(1)).first() is not None

    def get_admin_by_username(self, username: str) -> Optional[AdminORM]:
        return self.db.execute(
            select(AdminORM).where(AdminORM.username == normalize_username(username)).limit(1)
        ).scalar_one_or_none()

    def get_admin(self, admin_id: int) -> Optional[AdminORM]:
        return self.db.get(AdminORM, admin_id)

    def add_admin(self, admin: AdminORM) -> AdminORM:
        self.db.add(admin)
        self.db.flush()
        return admin

    # --- Counts for the admin dashboard ---

    def counts(self) -> dict[str, int]:
        def count(stmt) -> int:
            return self.db.execute(stmt).scalar_one()

        return {
            "total_users": count(select(func.count(UserORM.id))),
            "total_games": count(select(func.count(PuzzleORM.id))),
            "total_gameplays": count(select(func.count(AttemptORM.id))),
            "completed_gameplays": count(
                select(func.count(AttemptORM.id)).where(AttemptORM.completed.is_(True))
            ),
        }

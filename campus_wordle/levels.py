"""
Level resolver.

A puzzle's level is its 1-indexed position among ACTIVE puzzles ordered by
created_at (id breaks ties). It is never stored: deactivating a puzzle
renumbers everything after it on the next read.

A user's current level is one past the highest level they've completed,
capped at the number of active puzzles (0 when there are none).
"""

from __future__ import annotations

import random
from typing import Optional

from sqlalchemy.orm import Session

from .errors import NotFound
from .models import Puzzle as PuzzleORM
from .progress import build_board, to_attempt_out
from .repository import WordleRepository
from .results import action
from .schemas import LevelsOut, PuzzlePublic, ResolvedGameOut


def _current_level(repo: WordleRepository, user_id: int, puzzles: Optional[list[PuzzleORM]] = None) -> int:
    if puzzles is None:
        puzzles = repo.active_puzzles()
    completed_ids = repo.completed_puzzle_ids(user_id)

    max_completed = 0
    for ordinal, puzzle in enumerate(puzzles, start=1):
        if puzzle.id in completed_ids:
            max_completed = max(max_completed, ordinal)

    return min(max_completed + 1, len(puzzles))


def _completed_levels(repo: WordleRepository, user_id: int) -> list[int]:
    completed_ids = repo.completed_puzzle_ids(user_id)
    return [
        ordinal
        for ordinal, puzzle in enumerate(repo.active_puzzles(), start=1)
        if puzzle.id in completed_ids
    ]


def _puzzle_at(puzzles: list[PuzzleORM], level: int) -> Optional[PuzzleORM]:
    if 1 <= level <= len(puzzles):
        return puzzles[level - 1]
    return None


@action("Failed to get current level")
def current_level(db: Session, user_id: int) -> int:
    return _current_level(WordleRepository(db), user_id)


@action("Failed to get available levels")
def available_levels(db: Session) -> list[int]:
    return list(range(1, WordleRepository(db).count_active_puzzles() + 1))


@action("Failed to get completed levels")
def completed_levels(db: Session, user_id: int) -> list[int]:
    return _completed_levels(WordleRepository(db), user_id)


@action("Failed to get levels")
def level_overview(db: Session, user_id: int) -> LevelsOut:
    repo = WordleRepository(db)
    puzzles = repo.active_puzzles()
    return LevelsOut(
        current_level=_current_level(repo, user_id, puzzles),
        available_levels=list(range(1, len(puzzles) + 1)),
        completed_levels=_completed_levels(repo, user_id),
    )


@action("Failed to get game for user")
def resolve_game(db: Session, user_id: int, requested_level: Optional[int] = None) -> ResolvedGameOut:
    """
    Pick the puzzle to show for `requested_level` (default: the user's current level).

    Fallbacks when that level doesn't exist:
      1) the user's current level, if it's a different, valid level
      2) the first active puzzle (level 1)
      3) nothing: puzzle is None
    is_replay means the user already has a gameplay for the chosen puzzle,
    finished or not (this is also how an in-progress game survives a refresh).
    """
    repo = WordleRepository(db)
    puzzles = repo.active_puzzles()
    current = _current_level(repo, user_id, puzzles)
    target = requested_level or current

    puzzle = _puzzle_at(puzzles, target)
    actual = target
    if puzzle is None and target != current and _puzzle_at(puzzles, current) is not None:
        puzzle, actual = _puzzle_at(puzzles, current), current
    elif puzzle is None and puzzles:
        puzzle, actual = puzzles[0], 1

    if puzzle is None:
        return ResolvedGameOut(puzzle=None, is_replay=False, current_level=current, actual_level=actual)

    existing = repo.get_attempt(user_id, puzzle.id)
    return ResolvedGameOut(
        puzzle=PuzzlePublic(id=puzzle.id, hint=puzzle.hint, word_length=len(puzzle.word), level=actual),
        is_replay=existing is not None,
        current_level=current,
        actual_level=actual,
        existing_attempt=to_attempt_out(existing) if existing is not None else None,
        board=build_board(puzzle, existing),
    )


@action("Failed to get unplayed game")
def random_unplayed_puzzle(db: Session, user_id: int) -> PuzzlePublic:
    repo = WordleRepository(db)
    puzzles = repo.active_puzzles()
    played = repo.played_puzzle_ids(user_id)
    unplayed = [(level, p) for level, p in enumerate(puzzles, start=1) if p.id not in played]
    if not unplayed:
        raise NotFound("You've played every game")
    level, puzzle = random.choice(unplayed)
    return PuzzlePublic(id=puzzle.id, hint=puzzle.hint, word_length=len(puzzle.word), level=level)

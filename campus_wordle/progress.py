"""
Progress recorder + guess submission.

Public operations:
- record_progress(db, user_id, puzzle_id, guesses, completed, won) -> AttemptOut
- submit_guess(db, user_id, puzzle_id, guess) -> BoardOut
- board_for(db, user_id, puzzle_id) -> BoardOut

There is exactly one gameplay row per (user, puzzle). It's written after
EVERY guess, so reloading the page mid-game can't throw away a bad guess.
A gameplay is completed when the game ends (won, or out of guesses) and
is frozen from then on.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import config
from .engine import points_for, evaluate_guess, keyboard_states, is_win, normalize_word, LETTERS_ONLY
from .errors import NotFound, ValidationFailed, Conflict
from .models import Attempt as AttemptORM, Puzzle as PuzzleORM
from .notify_client import notify_progress
from .repository import WordleRepository
from .results import action
from .schemas import AttemptOut, BoardOut, GuessRow

logger = logging.getLogger(__name__)


# --- DTO builders ---

def decode_guesses(attempt: Optional[AttemptORM]) -> list[str]:
    if attempt is None or not attempt.guess_sequence:
        return []
    return list(json.loads(attempt.guess_sequence))


def to_attempt_out(attempt: AttemptORM) -> AttemptOut:
    return AttemptOut(
        id=attempt.id,
        user_id=attempt.user_id,
        puzzle_id=attempt.puzzle_id,
        num_tries=attempt.num_tries,
        points_earned=attempt.points_earned,
        guesses=decode_guesses(attempt),
        completed=attempt.completed,
        created_at=attempt.created_at,
        completed_at=attempt.completed_at,
    )


def build_board(puzzle: PuzzleORM, attempt: Optional[AttemptORM]) -> BoardOut:
    guesses = decode_guesses(attempt)
    finished = (attempt is not None and attempt.completed) or len(guesses) >= config.MAX_GUESSES
    if not finished:
        status = "playing"
    elif guesses and is_win(puzzle.word, guesses[-1]):
        status = "won"
    else:
        status = "lost"

    return BoardOut(
        puzzle_id=puzzle.id,
        word_length=len(puzzle.word),
        max_guesses=config.MAX_GUESSES,
        guesses=[GuessRow(word=g, states=evaluate_guess(puzzle.word, g)) for g in guesses],
        keyboard=keyboard_states(puzzle.word, guesses),
        status=status,
        guesses_left=max(config.MAX_GUESSES - len(guesses), 0),
        points_earned=attempt.points_earned if attempt is not None else 0,
        word=puzzle.word if status != "playing" else None,
    )


# --- Core upsert ---

def _apply(attempt: AttemptORM, num_tries: int, points: int, sequence: str, completed: bool) -> None:
    now = datetime.utcnow()
    attempt.num_tries = num_tries
    attempt.points_earned = points
    attempt.guess_sequence = sequence
    if completed and not attempt.completed:
        attempt.completed = True
        attempt.completed_at = now
    attempt.updated_at = now


def save_progress(
    repo: WordleRepository,
    user_id: int,
    puzzle_id: int,
    guesses: Sequence[str],
    completed: bool,
    won: bool,
) -> AttemptORM:
    """Update-or-insert the (user, puzzle) gameplay. Does not commit."""
    num_tries = len(guesses)
    points = points_for(num_tries) if won else 0
    sequence = json.dumps(list(guesses))

    attempt = repo.get_attempt(user_id, puzzle_id)
    if attempt is not None:
        if attempt.completed:
            # First completion is the one that counts
            logger.info("Gameplay %s already completed; leaving it as is", attempt.id)
            return attempt
        _apply(attempt, num_tries, points, sequence, completed)
        return attempt

    attempt = AttemptORM(user_id=user_id, puzzle_id=puzzle_id, guess_sequence="[]", completed=False)
    _apply(attempt, num_tries, points, sequence, completed)
    try:
        return repo.add_attempt(attempt)
    except IntegrityError:
        # Another request inserted this (user, puzzle) first; update that row instead
        repo.db.rollback()
        existing = repo.get_attempt(user_id, puzzle_id)
        if existing is None:
            raise
        if not existing.completed:
            _apply(existing, num_tries, points, sequence, completed)
        return existing


def _update_stats_on_end(repo: WordleRepository, user_id: int, won: bool, tries: int) -> None:
    """Best-effort counters; rankings never read these."""
    stats = repo.get_or_create_stats(user_id)
    stats.games_played += 1
    if won:
        stats.games_won += 1
        stats.current_streak += 1
        if stats.current_streak > stats.max_streak:
            stats.max_streak = stats.current_streak
        distribution = dict(stats.guess_distribution or {})
        distribution[str(tries)] = distribution.get(str(tries), 0) + 1
        stats.guess_distribution = distribution
    else:
        stats.current_streak = 0
    stats.last_played_at = datetime.utcnow()


# --- Public API ---

@action("Failed to save gameplay")
def record_progress(
    db: Session,
    user_id: int,
    puzzle_id: int,
    guesses: Sequence[str],
    completed: bool,
    won: bool,
) -> AttemptOut:
    if won and not guesses:
        raise ValidationFailed("A won game needs at least one guess")
    repo = WordleRepository(db)
    if repo.get_user(user_id) is None:
        raise NotFound("User not found")
    if repo.get_puzzle(puzzle_id) is None:
        raise NotFound("Game not found")
    attempt = save_progress(repo, user_id, puzzle_id, [normalize_word(g) for g in guesses], completed, won)
    db.commit()
    db.refresh(attempt)
    notify_progress(user_id, puzzle_id, attempt.completed)
    return to_attempt_out(attempt)


@action("Failed to submit guess")
def submit_guess(db: Session, user_id: int, puzzle_id: int, guess: str) -> BoardOut:
    repo = WordleRepository(db)

    if repo.get_user(user_id) is None:
        raise NotFound("User not found")
    puzzle = repo.get_puzzle(puzzle_id)
    if puzzle is None or not puzzle.active:
        raise NotFound("Game not found")

    guess = normalize_word(guess)
    if len(guess) != len(puzzle.word) or not LETTERS_ONLY.match(guess):
        raise ValidationFailed(f"Please enter a {len(puzzle.word)}-letter word")

    attempt = repo.get_attempt(user_id, puzzle.id)
    previous = decode_guesses(attempt)
    if attempt is not None and attempt.completed:
        raise Conflict("You already finished this puzzle.")
    if len(previous) >= config.MAX_GUESSES:
        raise Conflict("No guesses left for this puzzle.")

    guesses = previous + [guess]
    won = is_win(puzzle.word, guess)
    finished = won or len(guesses) >= config.MAX_GUESSES

    # A loss also ends the game: completed with 0 points
    attempt = save_progress(repo, user_id, puzzle.id, guesses, completed=finished, won=won)
    if finished:
        _update_stats_on_end(repo, user_id, won, len(guesses))
    db.commit()

    if won:
        logger.info("User %s solved game %s in %d tries", user_id, puzzle.id, len(guesses))
    notify_progress(user_id, puzzle.id, attempt.completed)

    return build_board(puzzle, attempt)


@action("Failed to load game")
def board_for(db: Session, user_id: int, puzzle_id: int) -> BoardOut:
    repo = WordleRepository(db)
    puzzle = repo.get_puzzle(puzzle_id)
    if puzzle is None:
        raise NotFound("Game not found")
    return build_board(puzzle, repo.get_attempt(user_id, puzzle.id))

"""
The @action boundary: database failures become a generic "error" Outcome
and leave the session usable for the next call.
"""

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from campus_wordle import levels, progress
from campus_wordle.models import Attempt
from campus_wordle.repository import WordleRepository


def test_database_error_becomes_generic_failure(db_session, make_user, make_puzzle, monkeypatch):
    user = make_user("alice")
    make_puzzle("CWRU")

    real_active_puzzles = WordleRepository.active_puzzles
    failures = {"left": 1}

    def flaky(self):
        if failures["left"]:
            failures["left"] -= 1
            raise SQLAlchemyError("connection lost")
        return real_active_puzzles(self)

    monkeypatch.setattr(WordleRepository, "active_puzzles", flaky)
    outcome = levels.current_level(db_session, user.id)

    assert outcome.success is False
    assert outcome.kind == "error"
    assert outcome.message == "Failed to get current level"
    assert outcome.value is None

    assert levels.current_level(db_session, user.id).value == 1


def test_failed_write_is_rolled_back(db_session, make_user, make_puzzle, monkeypatch):
    user = make_user("alice")
    puzzle = make_puzzle("CWRU")

    real_add_attempt = WordleRepository.add_attempt
    failures = {"left": 1}

    def add_then_fail_once(self, attempt):
        if failures["left"]:
            failures["left"] -= 1
            self.db.add(attempt)
            raise SQLAlchemyError("disk full")
        return real_add_attempt(self, attempt)

    monkeypatch.setattr(WordleRepository, "add_attempt", add_then_fail_once)
    outcome = progress.record_progress(db_session, user.id, puzzle.id, ["ABCD"], False, False)

    assert outcome.success is False
    assert outcome.kind == "error"
    assert outcome.message == "Failed to save gameplay"

    saved = progress.record_progress(db_session, user.id, puzzle.id, ["ABCD"], False, False)

    assert saved.success, saved.message
    assert saved.value.guesses == ["ABCD"]
    assert db_session.execute(select(func.count(Attempt.id))).scalar_one() == 1

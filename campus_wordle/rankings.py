"""
Ranking aggregator: read-only queries over gameplays joined with users.

Everything is recomputed from the gameplays table on each call; the
game_stats counters are never consulted here.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import select, func, case, distinct
from sqlalchemy.orm import Session

from . import config
from .errors import NotFound
from .models import Attempt as AttemptORM, User as UserORM, Puzzle as PuzzleORM
from .progress import to_attempt_out
from .repository import WordleRepository
from .results import action
from .schemas import (
    GameRankingOut, OverallRankingOut, UserStatsOut, RankPositionOut,
    PuzzleSummaryOut, HistoryEntryOut,
)


def _round1(value) -> float:
    # Half-up like SQL round(); avg() is a float (SQLite) or Decimal (MySQL/Postgres)
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _completed_totals():
    """Per-user totals over completed gameplays, best first."""
    total_points = func.sum(AttemptORM.points_earned).label("total_points")
    games_completed = func.count(AttemptORM.id).label("games_completed")
    return (
        select(
            AttemptORM.user_id,
            UserORM.username,
            UserORM.full_name,
            total_points,
            games_completed,
            func.avg(AttemptORM.points_earned).label("average_score"),
            func.max(AttemptORM.points_earned).label("best_score"),
        )
        .join(UserORM, AttemptORM.user_id == UserORM.id)
        .where(AttemptORM.completed.is_(True))
        .group_by(AttemptORM.user_id, UserORM.username, UserORM.full_name)
        .order_by(total_points.desc(), games_completed.desc(), AttemptORM.user_id.asc())
    )


@action("Failed to get game rankings")
def game_rankings(db: Session, puzzle_id: int, limit: int = 10) -> list[GameRankingOut]:
    """
    Completed gameplays for one puzzle.
    Order: most points, then fewest tries, then whoever started first.
    """
    rows = db.execute(
        select(
            AttemptORM.id,
            AttemptORM.user_id,
            UserORM.username,
            UserORM.full_name,
            AttemptORM.points_earned,
            AttemptORM.num_tries,
            AttemptORM.completed,
            AttemptORM.created_at,
        )
        .join(UserORM, AttemptORM.user_id == UserORM.id)
        .where(AttemptORM.puzzle_id == puzzle_id, AttemptORM.completed.is_(True))
        .order_by(
            AttemptORM.points_earned.desc(),
            AttemptORM.num_tries.asc(),
            AttemptORM.created_at.asc(),
            AttemptORM.id.asc(),
        )
        .limit(limit)
    ).all()
    return [GameRankingOut(**row._mapping) for row in rows]


@action("Failed to get overall rankings")
def overall_rankings(db: Session, limit: Optional[int] = None) -> list[OverallRankingOut]:
    stmt = _completed_totals()
    if limit:
        stmt = stmt.limit(limit)

    return [
        OverallRankingOut(
            user_id=row.user_id,
            username=row.username,
            full_name=row.full_name,
            total_points=int(row.total_points or 0),
            games_completed=int(row.games_completed),
            average_score=_round1(row.average_score),
            best_score=int(row.best_score or 0),
        )
        for row in db.execute(stmt).all()
    ]


@action("Failed to get user stats")
def user_stats(db: Session, user_id: int) -> UserStatsOut:
    row = db.execute(
        select(
            func.coalesce(func.sum(AttemptORM.points_earned), 0).label("total_points"),
            func.coalesce(
                func.sum(case((AttemptORM.completed.is_(True), 1), else_=0)), 0
            ).label("games_completed"),
            func.count(AttemptORM.id).label("games_played"),
            func.avg(AttemptORM.points_earned).label("average_score"),
            func.coalesce(func.max(AttemptORM.points_earned), 0).label("best_score"),
        ).where(AttemptORM.user_id == user_id)
    ).one()

    played = int(row.games_played)
    completed = int(row.games_completed)
    return UserStatsOut(
        total_points=int(row.total_points),
        games_completed=completed,
        games_played=played,
        average_score=_round1(row.average_score) if played else 0.0,
        best_score=int(row.best_score),
        win_rate=_round1(completed * 100.0 / played) if played else 0.0,
    )


@action("Failed to get user rank position")
def user_rank_position(db: Session, user_id: int) -> RankPositionOut:
    ranked = [row.user_id for row in db.execute(_completed_totals()).all()]
    position = ranked.index(user_id) + 1 if user_id in ranked else None
    return RankPositionOut(position=position, total_players=len(ranked))


@action("Failed to get game summaries")
def puzzle_summaries(db: Session, limit: int = 20) -> list[PuzzleSummaryOut]:
    """Per active puzzle stats for the rankings page; the word is never included."""
    rows = db.execute(
        select(
            PuzzleORM.id.label("game_id"),
            PuzzleORM.hint,
            PuzzleORM.created_at,
            func.max(AttemptORM.points_earned).label("top_score"),
            func.avg(AttemptORM.points_earned).label("average_score"),
            func.count(distinct(AttemptORM.user_id)).label("total_players"),
            func.coalesce(
                func.sum(case((AttemptORM.completed.is_(True), 1), else_=0)), 0
            ).label("completions"),
        )
        .outerjoin(AttemptORM, AttemptORM.puzzle_id == PuzzleORM.id)
        .where(PuzzleORM.active.is_(True))
        .group_by(PuzzleORM.id, PuzzleORM.hint, PuzzleORM.created_at)
        .order_by(PuzzleORM.created_at.desc(), PuzzleORM.id.desc())
        .limit(limit)
    ).all()

    return [
        PuzzleSummaryOut(
            game_id=row.game_id,
            hint=row.hint,
            created_at=row.created_at,
            top_score=row.top_score,
            average_score=_round1(row.average_score) if row.average_score is not None else None,
            total_players=int(row.total_players),
            completions=int(row.completions),
        )
        for row in rows
    ]


@action("Failed to get gameplay history")
def user_history(db: Session, user_id: int) -> list[HistoryEntryOut]:
    repo = WordleRepository(db)
    if repo.get_user(user_id) is None:
        raise NotFound("User not found")

    entries = []
    for attempt, puzzle in repo.user_attempts(user_id):
        out = to_attempt_out(attempt)
        finished = attempt.completed or out.num_tries >= config.MAX_GUESSES
        entries.append(
            HistoryEntryOut(
                attempt=out,
                puzzle_id=puzzle.id,
                hint=puzzle.hint,
                word=puzzle.word if finished else None,
            )
        )
    return entries

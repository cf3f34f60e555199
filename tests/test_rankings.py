"""
Ranking aggregator: totals and orderings recomputed from gameplays.
"""

from datetime import datetime, timedelta

from campus_wordle import rankings, progress


def _value(outcome):
    assert outcome.success, outcome.message
    return outcome.value


def test_overall_ranking_orders_by_total_points_first(make_user, make_puzzle, make_gameplay, db_session):
    a = make_user("user_a")
    b = make_user("user_b", full_name="@bee")
    p1, p2 = make_puzzle("ONE"), make_puzzle("TWO")

    make_gameplay(a, p1, points=90, tries=2)
    make_gameplay(a, p2, points=90, tries=2)
    make_gameplay(b, p1, points=190, tries=1)

    ranked = _value(rankings.overall_rankings(db_session))
    assert [r.username for r in ranked] == ["user_b", "user_a"]

    top, second = ranked
    assert top.total_points == 190
    assert top.games_completed == 1
    assert top.full_name == "@bee"
    assert second.total_points == 180
    assert second.games_completed == 2
    assert second.average_score == 90.0
    assert second.best_score == 90


def test_overall_ranking_ignores_unfinished_and_limits(make_user, make_puzzle, make_gameplay, db_session):
    a, b, c = make_user("a"), make_user("b"), make_user("c")
    p1 = make_puzzle("ONE")
    make_gameplay(a, p1, points=100, tries=1)
    make_gameplay(b, p1, points=80, tries=3)
    make_gameplay(c, p1, points=0, tries=4, completed=False)

    full = _value(rankings.overall_rankings(db_session))
    assert [r.username for r in full] == ["a", "b"]

    limited = _value(rankings.overall_rankings(db_session, 1))
    assert [r.username for r in limited] == ["a"]


def test_overall_ranking_tie_on_points_prefers_more_completions(make_user, make_puzzle, make_gameplay, db_session):
    a, b = make_user("a"), make_user("b")
    p1, p2 = make_puzzle("ONE"), make_puzzle("TWO")
    make_gameplay(a, p1, points=100, tries=1)
    make_gameplay(b, p1, points=50, tries=6)
    make_gameplay(b, p2, points=50, tries=6)

    ranked = _value(rankings.overall_rankings(db_session))
    assert [r.username for r in ranked] == ["b", "a"]


def test_game_ranking_tie_breaks(make_user, make_puzzle, make_gameplay, db_session):
    early, late, slow, top = make_user("early"), make_user("late"), make_user("slow"), make_user("top")
    puzzle = make_puzzle("CWRU")
    t0 = datetime(2025, 3, 1, 9, 0, 0)

    make_gameplay(late, puzzle, points=90, tries=2, created_at=t0 + timedelta(minutes=5))
    make_gameplay(slow, puzzle, points=90, tries=3, created_at=t0 - timedelta(minutes=5))
    make_gameplay(early, puzzle, points=90, tries=2, created_at=t0)
    make_gameplay(top, puzzle, points=100, tries=1, created_at=t0 + timedelta(hours=1))

    ranked = _value(rankings.game_rankings(db_session, puzzle.id))
    assert [r.username for r in ranked] == ["top", "early", "late", "slow"]

    limited = _value(rankings.game_rankings(db_session, puzzle.id, 2))
    assert [r.username for r in limited] == ["top", "early"]


def test_game_ranking_skips_unfinished(make_user, make_puzzle, make_gameplay, db_session):
    a, b = make_user("a"), make_user("b")
    puzzle = make_puzzle("CWRU")
    make_gameplay(a, puzzle, points=80, tries=3)
    make_gameplay(b, puzzle, points=0, tries=2, completed=False)

    ranked = _value(rankings.game_rankings(db_session, puzzle.id))
    assert [r.username for r in ranked] == ["a"]


def test_user_stats(make_user, make_puzzle, make_gameplay, db_session):
    user = make_user("alice")
    p1, p2, p3 = make_puzzle("ONE"), make_puzzle("TWO"), make_puzzle("SIX")
    make_gameplay(user, p1, points=100, tries=1)
    make_gameplay(user, p2, points=70, tries=4)
    make_gameplay(user, p3, points=0, tries=2, completed=False)

    stats = _value(rankings.user_stats(db_session, user.id))
    assert stats.total_points == 170
    assert stats.games_completed == 2
    assert stats.games_played == 3
    assert stats.best_score == 100
    assert stats.average_score == 56.7
    assert stats.win_rate == 66.7


def test_user_stats_with_no_games(make_user, db_session):
    user = make_user("alice")
    stats = _value(rankings.user_stats(db_session, user.id))
    assert stats.games_played == 0
    assert stats.win_rate == 0.0
    assert stats.average_score == 0.0
    assert stats.total_points == 0


def test_user_rank_position(make_user, make_puzzle, make_gameplay, db_session):
    a, b, nobody = make_user("a"), make_user("b"), make_user("nobody")
    p1, p2 = make_puzzle("ONE"), make_puzzle("TWO")
    make_gameplay(a, p1, points=50, tries=6)
    make_gameplay(b, p1, points=100, tries=1)
    make_gameplay(nobody, p2, points=0, tries=1, completed=False)

    assert _value(rankings.user_rank_position(db_session, b.id)).position == 1
    pos_a = _value(rankings.user_rank_position(db_session, a.id))
    assert pos_a.position == 2
    assert pos_a.total_players == 2

    pos_nobody = _value(rankings.user_rank_position(db_session, nobody.id))
    assert pos_nobody.position is None
    assert pos_nobody.total_players == 2


def test_puzzle_summaries_hide_the_word(make_user, make_puzzle, make_gameplay, db_session):
    a, b = make_user("a"), make_user("b")
    p1 = make_puzzle("CWRU", hint="school")
    p2 = make_puzzle("OHIO", hint="state")
    make_puzzle("GONE", active=False)
    make_gameplay(a, p1, points=100, tries=1)
    make_gameplay(b, p1, points=0, tries=3, completed=False)

    summaries = _value(rankings.puzzle_summaries(db_session))
    assert [s.game_id for s in summaries] == [p2.id, p1.id]  # newest first, inactive excluded

    cwru = summaries[1]
    assert cwru.top_score == 100
    assert cwru.total_players == 2
    assert cwru.completions == 1
    assert cwru.average_score == 50.0
    assert "word" not in cwru.model_dump()

    empty = summaries[0]
    assert empty.total_players == 0
    assert empty.completions == 0
    assert empty.top_score is None


def test_user_history_hides_word_until_finished(make_user, make_puzzle, db_session):
    user = make_user("alice")
    solved = make_puzzle("CWRU")
    open_ = make_puzzle("OHIO")

    progress.submit_guess(db_session, user.id, solved.id, "CWRU")
    progress.submit_guess(db_session, user.id, open_.id, "ABCD")

    history = _value(rankings.user_history(db_session, user.id))
    words = {entry.puzzle_id: entry.word for entry in history}
    assert words[solved.id] == "CWRU"
    assert words[open_.id] is None


def test_average_score_rounds_half_up(make_user, make_puzzle, make_gameplay, db_session):
    user = make_user("alice")
    words = ["ONE", "TWO", "SIX", "TEN", "RED", "BLUE", "GOLD", "PINK"]
    points = [100, 100, 90, 90, 80, 80, 60, 50]  # 650 / 8 = 81.25
    for word, score in zip(words, points):
        make_gameplay(user, make_puzzle(word), points=score, tries=1)

    (row,) = _value(rankings.overall_rankings(db_session))
    assert row.average_score == 81.3
    assert _value(rankings.user_stats(db_session, user.id)).average_score == 81.3

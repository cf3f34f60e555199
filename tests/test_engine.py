"""
Testing pure game logic.
"""

import pytest

from campus_wordle.engine import (
    points_for, validate_word, evaluate_guess, keyboard_states, is_win,
)
from campus_wordle.errors import ValidationFailed


def test_points_for_known_values():
    assert points_for(1) == 100
    assert points_for(2) == 90
    assert points_for(3) == 80
    assert points_for(6) == 50


def test_points_for_floor_beyond_game_bounds():
    assert points_for(10) == 10
    assert points_for(20) == 10


def test_points_never_increase_with_more_tries():
    scores = [points_for(n) for n in range(1, 15)]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.parametrize("word", ["AB", "ABCDEFGH", "AB12", "", "CW RU"])
def test_validate_word_rejects(word):
    with pytest.raises(ValidationFailed):
        validate_word(word)


def test_validate_word_messages():
    with pytest.raises(ValidationFailed) as short:
        validate_word("AB")
    assert "at least 3" in short.value.message

    with pytest.raises(ValidationFailed) as long_:
        validate_word("ABCDEFGH")
    assert "longer than 7" in long_.value.message


def test_validate_word_uppercases():
    assert validate_word(" cwru ") == "CWRU"
    assert validate_word("abc") == "ABC"
    assert validate_word("spartan") == "SPARTAN"


def test_evaluate_guess_basic():
    assert evaluate_guess("CWRU", "CRUX") == ["correct", "present", "present", "absent"]
    assert evaluate_guess("CWRU", "cwru") == ["correct"] * 4


def test_evaluate_guess_duplicate_letters():
    # WORLD has a single L, so only the first L in the guess is "present"
    assert evaluate_guess("WORLD", "LLAMA") == ["present", "absent", "absent", "absent", "absent"]
    # Exact match takes priority over an earlier duplicate
    assert evaluate_guess("ABBEY", "BBBBB") == ["absent", "correct", "correct", "absent", "absent"]


def test_evaluate_guess_length_mismatch():
    with pytest.raises(ValueError):
        evaluate_guess("CWRU", "CWR")


def test_keyboard_keeps_best_state():
    states = keyboard_states("CWRU", ["RCAB", "CWRX"])
    assert states["C"] == "correct"   # present first, then correct
    assert states["R"] == "correct"
    assert states["A"] == "absent"
    assert states["X"] == "absent"


def test_is_win_true_and_false():
    assert is_win("CWRU", "cwru") is True
    assert is_win("CWRU", "CWRX") is False

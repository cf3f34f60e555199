"""
Pure game logic (no HTTP, no storage).

- points_for: attempt count -> points (only called for a correct guess)
- normalize_word / validate_word: puzzle word rules (letters only, 3..7 long)
- evaluate_guess: per-letter feedback, Wordle style, duplicate-letter aware
- keyboard_states: best state seen so far for each letter
"""

import re
from typing import Dict, Iterable, List

from . import config
from .errors import ValidationFailed
from .types import LetterState

LETTERS_ONLY = re.compile(r"^[A-Za-z]+$")

# Higher wins when the same letter shows up with different states
_STATE_RANK = {"absent": 0, "present": 1, "correct": 2}


def points_for(num_tries: int) -> int:
    """
    100 for a first-try solve, minus 10 per extra try, never below 10.
      points_for(1) == 100, points_for(3) == 80, points_for(20) == 10
    """
    return max(100 - (num_tries - 1) * 10, 10)


def normalize_word(word: str) -> str:
    return (word or "").strip().upper()


def validate_word(word: str) -> str:
    """Return the uppercase word, or raise ValidationFailed with a readable message."""
    word = normalize_word(word)
    if len(word) < config.MIN_WORD_LENGTH:
        raise ValidationFailed(f"Word must be at least {config.MIN_WORD_LENGTH} letters long")
    if len(word) > config.MAX_WORD_LENGTH:
        raise ValidationFailed(f"Word cannot be longer than {config.MAX_WORD_LENGTH} letters")
    if not LETTERS_ONLY.match(word):
        raise ValidationFailed("Word can only contain letters")
    return word


def evaluate_guess(target: str, guess: str) -> List[LetterState]:
    """
    Example:
      target = "CWRU", guess = "CRUX"
      -> ["correct", "present", "present", "absent"]

    Exact matches are taken first; a repeated letter is only "present"
    as many times as it is still unmatched in the target.
    """
    target = target.upper()
    guess = guess.upper()
    if len(target) != len(guess):
        raise ValueError("Target and guess must be the same length.")

    result: List[LetterState] = ["absent"] * len(target)

    # First pass: exact positions, count what's left over in the target
    remaining: Dict[str, int] = {}
    for i, (t, g) in enumerate(zip(target, guess)):
        if t == g:
            result[i] = "correct"
        else:
            remaining[t] = remaining.get(t, 0) + 1

    # Second pass: right letter, wrong place
    for i, g in enumerate(guess):
        if result[i] == "correct":
            continue
        if remaining.get(g, 0) > 0:
            result[i] = "present"
            remaining[g] -= 1

    return result


def keyboard_states(target: str, guesses: Iterable[str]) -> Dict[str, LetterState]:
    states: Dict[str, LetterState] = {}
    for guess in guesses:
        for letter, state in zip(guess.upper(), evaluate_guess(target, guess)):
            previous = states.get(letter)
            if previous is None or _STATE_RANK[state] > _STATE_RANK[previous]:
                states[letter] = state
    return states


def is_win(target: str, guess: str) -> bool:
    return target.upper() == guess.upper()

"""
Labels for clarity.
"""

from typing import Literal

LetterState = Literal["correct", "present", "absent"]
FailureKind = Literal["validation", "unauthorized", "forbidden", "not_found", "conflict", "error"]

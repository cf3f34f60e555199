"""
Explicit validation & Pydantic models
- Request bodies are validated here before they reach the services.
- Response models are the DTOs the services hand back (DB -> API resp).
"""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .engine import LETTERS_ONLY


# ---------------- Requests ----------------

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str = Field(..., min_length=1)
    phone_number: Optional[str] = Field(None, max_length=32)


class LoginRequest(BaseModel):
    username_or_email: str = Field(..., min_length=1, description="Username or email, any case")
    password: str = Field(..., min_length=1)


class ClaimProfileRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=128, description="Display name / social handle")
    email: EmailStr


class PhoneRequest(BaseModel):
    phone_number: str = Field(..., min_length=3, max_length=32)


class GuessRequest(BaseModel):
    guess: str = Field(..., description="One word, same length as the puzzle's word")

    @field_validator("guess")
    @classmethod
    def letters_only(cls, value: str) -> str:
        """
        Only the charset is checked here; the length depends on the puzzle,
        so the service checks it against the stored word.
        """
        value = value.strip().upper()
        if not LETTERS_ONLY.match(value):
            raise ValueError("Guess can only contain letters.")
        return value

    model_config = {"json_schema_extra": {"examples": [{"guess": "CWRU"}]}}


class AdminCredentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)


class CreatePuzzleRequest(BaseModel):
    # Word rules (length, charset, duplicates) are enforced by the admin service
    word: str
    hint: Optional[str] = None
    active: bool = True


class CreateUserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None


# ---------------- Responses ----------------

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthOut(BaseModel):
    user: UserOut
    token: str = Field(..., description="Bearer token, valid for 7 days")


class AdminOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    created_at: Optional[datetime] = None


class AdminAuthOut(BaseModel):
    admin: AdminOut
    token: str


class PuzzleOut(BaseModel):
    """Admin view: includes the word."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    word: str
    hint: Optional[str] = None
    active: bool
    created_at: datetime


class PuzzlePublic(BaseModel):
    """Player view: never includes the word."""
    id: int
    hint: Optional[str] = None
    word_length: int
    level: int


class AttemptOut(BaseModel):
    id: int
    user_id: int
    puzzle_id: int
    num_tries: int
    points_earned: int
    guesses: List[str]
    completed: bool
    created_at: datetime
    completed_at: Optional[datetime] = None


class GuessRow(BaseModel):
    word: str
    states: List[Literal["correct", "present", "absent"]]


class BoardOut(BaseModel):
    puzzle_id: int
    word_length: int
    max_guesses: int
    guesses: List[GuessRow] = Field(default_factory=list)
    keyboard: Dict[str, Literal["correct", "present", "absent"]] = Field(default_factory=dict)
    status: Literal["playing", "won", "lost"]
    guesses_left: int
    points_earned: int = 0
    word: Optional[str] = Field(None, description="Only revealed once the game is over")


class ResolvedGameOut(BaseModel):
    puzzle: Optional[PuzzlePublic] = None
    is_replay: bool
    current_level: int
    actual_level: int
    existing_attempt: Optional[AttemptOut] = None
    board: Optional[BoardOut] = None


class LevelsOut(BaseModel):
    current_level: int
    available_levels: List[int]
    completed_levels: List[int]


class GameRankingOut(BaseModel):
    id: int
    user_id: int
    username: str
    full_name: Optional[str] = None
    points_earned: int
    num_tries: int
    completed: bool
    created_at: datetime


class OverallRankingOut(BaseModel):
    user_id: int
    username: str
    full_name: Optional[str] = None
    total_points: int
    games_completed: int
    average_score: float
    best_score: int


class UserStatsOut(BaseModel):
    total_points: int = 0
    games_completed: int = 0
    games_played: int = 0
    average_score: float = 0.0
    best_score: int = 0
    win_rate: float = 0.0


class RankPositionOut(BaseModel):
    position: Optional[int] = None
    total_players: int = 0


class PuzzleSummaryOut(BaseModel):
    game_id: int
    hint: Optional[str] = None
    created_at: datetime
    top_score: Optional[int] = None
    average_score: Optional[float] = None
    total_players: int = 0
    completions: int = 0


class HistoryEntryOut(BaseModel):
    attempt: AttemptOut
    puzzle_id: int
    hint: Optional[str] = None
    word: Optional[str] = Field(None, description="Hidden until the attempt is finished")


class AdminCountsOut(BaseModel):
    total_users: int
    total_games: int
    total_gameplays: int
    completed_gameplays: int


class AdminExistsOut(BaseModel):
    has_admin: bool

'''
Campus Wordle API

Players:
POST /auth/register              -> create account + token
POST /auth/login                 -> token (username or email)
POST /auth/guest                 -> anonymous account + token
GET  /auth/me                    -> who am I
POST /users/me/claim             -> attach display name + email to a guest
PUT  /users/me/phone             -> add phone number
GET  /users/me/stats             -> points / games / win rate
GET  /users/me/rank              -> position in the overall ranking
GET  /users/me/history           -> my gameplays

Game:
GET  /levels                     -> current, available and completed levels
GET  /game?level=N               -> puzzle for a level (with fallback) + board
GET  /games/random               -> a random puzzle I haven't played
GET  /games/{id}/board           -> rebuild the board after a refresh
POST /games/{id}/guess           -> submit a guess

Rankings:
GET  /rankings                   -> overall
GET  /rankings/games             -> per-puzzle summaries (no words)
GET  /rankings/games/{id}        -> per-puzzle leaderboard

Admin (bearer token with type=admin):
GET  /admin/exists, POST /admin/setup, POST /admin/login
GET/POST /admin/games, POST /admin/games/{id}/toggle, DELETE /admin/games/{id}
GET/POST /admin/users, DELETE /admin/users/{id}
GET  /admin/stats
'''

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Depends, Header, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import config
from . import accounts, admin, levels, progress, rankings
from .db import get_db                  # SQLAlchemy Session dependency
from .bootstrap_db import create_all    # dev-only: create tables
from .results import Outcome
from .schemas import (
    AdminAuthOut, AdminCountsOut, AdminCredentials, AdminExistsOut, AdminOut,
    AuthOut, BoardOut, ClaimProfileRequest, CreatePuzzleRequest, CreateUserRequest,
    GameRankingOut, GuessRequest, HistoryEntryOut, LevelsOut, LoginRequest,
    OverallRankingOut, PhoneRequest, PuzzleOut, PuzzlePublic, PuzzleSummaryOut,
    RankPositionOut, RegisterRequest, ResolvedGameOut, UserOut, UserStatsOut,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Campus Wordle API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Dev convenience: auto-create tables locally ---
if config.APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()


# Failure kind -> HTTP status
STATUS_FOR = {
    "validation": 400,
    "unauthorized": 401,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
    "error": 500,
}


def unwrap(outcome: Outcome):
    if not outcome.success:
        raise HTTPException(status_code=STATUS_FOR.get(outcome.kind, 500), detail=outcome.message)
    return outcome.value


bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> UserOut:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return unwrap(accounts.current_user(db, credentials.credentials))


def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> AdminOut:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return unwrap(accounts.verify_admin_token(db, credentials.credentials))


# ---------------- Auth ----------------

@app.post("/auth/register", response_model=AuthOut, status_code=201, summary="Create an account")
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> AuthOut:
    return unwrap(accounts.register(
        db, payload.username, payload.email, payload.password, payload.phone_number
    ))


@app.post("/auth/login", response_model=AuthOut, summary="Log in with username or email")
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthOut:
    return unwrap(accounts.login(db, payload.username_or_email, payload.password))


@app.post("/auth/guest", response_model=AuthOut, status_code=201, summary="Start playing as a guest")
def guest(
    user_agent: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> AuthOut:
    return unwrap(accounts.ensure_guest_identity(db, user_agent))


@app.get("/auth/me", response_model=UserOut)
def me(user: UserOut = Depends(get_current_user)) -> UserOut:
    return user


# ---------------- Profile ----------------

@app.post("/users/me/claim", response_model=UserOut, summary="Attach a display name and email")
def claim(
    payload: ClaimProfileRequest,
    user: UserOut = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserOut:
    return unwrap(accounts.claim_profile(db, user.id, payload.full_name, payload.email))


@app.put("/users/me/phone", response_model=UserOut)
def set_phone(
    payload: PhoneRequest,
    user: UserOut = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserOut:
    return unwrap(accounts.update_phone_number(db, user.id, payload.phone_number))


@app.get("/users/me/stats", response_model=UserStatsOut)
def my_stats(user: UserOut = Depends(get_current_user), db: Session = Depends(get_db)) -> UserStatsOut:
    return unwrap(rankings.user_stats(db, user.id))


@app.get("/users/me/rank", response_model=RankPositionOut)
def my_rank(user: UserOut = Depends(get_current_user), db: Session = Depends(get_db)) -> RankPositionOut:
    return unwrap(rankings.user_rank_position(db, user.id))


@app.get("/users/me/history", response_model=List[HistoryEntryOut])
def my_history(user: UserOut = Depends(get_current_user), db: Session = Depends(get_db)):
    return unwrap(rankings.user_history(db, user.id))


# ---------------- Game ----------------

@app.get("/levels", response_model=LevelsOut)
def get_levels(user: UserOut = Depends(get_current_user), db: Session = Depends(get_db)) -> LevelsOut:
    return unwrap(levels.level_overview(db, user.id))


@app.get("/game", response_model=ResolvedGameOut, summary="Puzzle for a level (default: my current level)")
def get_game(
    level: Optional[int] = Query(None, ge=1),
    user: UserOut = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ResolvedGameOut:
    return unwrap(levels.resolve_game(db, user.id, level))


@app.get("/games/random", response_model=PuzzlePublic)
def random_game(user: UserOut = Depends(get_current_user), db: Session = Depends(get_db)) -> PuzzlePublic:
    return unwrap(levels.random_unplayed_puzzle(db, user.id))


@app.get("/games/{game_id}/board", response_model=BoardOut)
def get_board(
    game_id: int,
    user: UserOut = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BoardOut:
    return unwrap(progress.board_for(db, user.id, game_id))


@app.post("/games/{game_id}/guess", response_model=BoardOut, summary="Submit a guess")
def submit_guess(
    game_id: int,
    payload: GuessRequest,
    user: UserOut = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BoardOut:
    # progress.submit_guess checks the length against the word and saves after every guess
    return unwrap(progress.submit_guess(db, user.id, game_id, payload.guess))


# ---------------- Rankings ----------------

@app.get("/rankings", response_model=List[OverallRankingOut])
def overall(limit: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    return unwrap(rankings.overall_rankings(db, limit))


@app.get("/rankings/games", response_model=List[PuzzleSummaryOut])
def game_summaries(limit: int = Query(20, ge=1), db: Session = Depends(get_db)):
    return unwrap(rankings.puzzle_summaries(db, limit))


@app.get("/rankings/games/{game_id}", response_model=List[GameRankingOut])
def game_leaderboard(game_id: int, limit: int = Query(10, ge=1), db: Session = Depends(get_db)):
    return unwrap(rankings.game_rankings(db, game_id, limit))


# ---------------- Admin ----------------

@app.get("/admin/exists", response_model=AdminExistsOut)
def admin_exists(db: Session = Depends(get_db)) -> AdminExistsOut:
    return AdminExistsOut(has_admin=unwrap(accounts.admin_exists(db)))


@app.post("/admin/setup", response_model=AdminOut, status_code=201, summary="Create the one admin account")
def admin_setup(payload: AdminCredentials, db: Session = Depends(get_db)) -> AdminOut:
    return unwrap(accounts.create_admin(db, payload.username, payload.password))


@app.post("/admin/login", response_model=AdminAuthOut)
def admin_login(payload: AdminCredentials, db: Session = Depends(get_db)) -> AdminAuthOut:
    return unwrap(accounts.login_admin(db, payload.username, payload.password))


@app.get("/admin/games", response_model=List[PuzzleOut])
def admin_list_games(_: AdminOut = Depends(get_current_admin), db: Session = Depends(get_db)):
    return unwrap(admin.list_puzzles(db))


@app.post("/admin/games", response_model=PuzzleOut, status_code=201)
def admin_create_game(
    payload: CreatePuzzleRequest,
    _: AdminOut = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> PuzzleOut:
    return unwrap(admin.create_puzzle(db, payload.word, payload.hint, payload.active))


@app.post("/admin/games/{game_id}/toggle", response_model=PuzzleOut)
def admin_toggle_game(
    game_id: int,
    _: AdminOut = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> PuzzleOut:
    return unwrap(admin.toggle_puzzle(db, game_id))


@app.delete("/admin/games/{game_id}")
def admin_delete_game(
    game_id: int,
    _: AdminOut = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> dict:
    unwrap(admin.delete_puzzle(db, game_id))
    return {"message": "Game deleted."}


@app.get("/admin/users", response_model=List[UserOut])
def admin_list_users(_: AdminOut = Depends(get_current_admin), db: Session = Depends(get_db)):
    return unwrap(admin.list_users(db))


@app.post("/admin/users", response_model=UserOut, status_code=201)
def admin_create_user(
    payload: CreateUserRequest,
    _: AdminOut = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> UserOut:
    return unwrap(admin.create_user(db, payload.username, payload.password, payload.email))


@app.delete("/admin/users/{user_id}")
def admin_delete_user(
    user_id: int,
    _: AdminOut = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> dict:
    unwrap(admin.delete_user(db, user_id))
    return {"message": "User deleted."}


@app.get("/admin/stats", response_model=AdminCountsOut)
def admin_stats(_: AdminOut = Depends(get_current_admin), db: Session = Depends(get_db)) -> AdminCountsOut:
    return unwrap(admin.dashboard_counts(db))

"""
Accounts: players and the admin login.

Public operations (all return an Outcome, see results.py):
- register / login / ensure_guest_identity -> AuthOut (user + bearer token)
- current_user(token) -> UserOut
- claim_profile / update_phone_number -> UserOut
- admin_exists / create_admin / login_admin / verify_admin_token

Usernames and emails are stored lowercase. Login failures all read
"Invalid credentials" to the caller; the actual reason goes to the log.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from . import config
from .errors import Conflict, Forbidden, NotFound, Unauthorized, ValidationFailed
from .models import User as UserORM, Admin as AdminORM
from .names import random_name, with_suffix
from .repository import WordleRepository, normalize_username
from .results import action
from .schemas import AdminAuthOut, AdminOut, AuthOut, UserOut
from .security import hash_password, verify_password, issue_token, verify_token

logger = logging.getLogger(__name__)


def _user_token(user: UserORM) -> str:
    return issue_token({
        "sub": user.id,
        "username": user.username,
        "email": user.email,
        "phone_number": user.phone_number,
        "type": "user",
    })


def _auth_out(user: UserORM) -> AuthOut:
    return AuthOut(user=UserOut.model_validate(user), token=_user_token(user))


def _subject(claims: dict) -> Optional[int]:
    """Numeric id from the token's `sub` claim, or None if it's missing or malformed."""
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None


def _require_user(repo: WordleRepository, user_id: int) -> UserORM:
    user = repo.get_user(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@action("Registration failed")
def register(
    db: Session,
    username: str,
    email: str,
    password: str,
    phone_number: Optional[str] = None,
) -> AuthOut:
    repo = WordleRepository(db)
    username = normalize_username(username)
    email = email.strip().lower()
    if not username:
        raise ValidationFailed("Username is required")
    if not password:
        raise ValidationFailed("Password is required")

    if repo.username_taken(username) or repo.get_user_by_email(email) is not None:
        raise Conflict("Username or email already exists")

    user = repo.add_user(UserORM(
        username=username,
        email=email,
        password_hash=hash_password(password),
        phone_number=phone_number or None,
        device_info=[],
    ))
    db.commit()
    logger.info("Registered user %s (%s)", user.id, user.username)
    return _auth_out(user)


@action("Login failed")
def login(db: Session, username_or_email: str, password: str) -> AuthOut:
    repo = WordleRepository(db)
    user = repo.find_user_for_login(username_or_email)

    if user is None:
        logger.warning("Login rejected for %r: user not found", username_or_email)
        raise Unauthorized("Invalid credentials")
    if not user.password_hash:
        logger.warning("Login rejected for user %s: no password set", user.id)
        raise Unauthorized("Invalid credentials")
    if not verify_password(user.password_hash, password):
        logger.warning("Login rejected for user %s: wrong password", user.id)
        raise Unauthorized("Invalid credentials")

    return _auth_out(user)


@action("Failed to create anonymous user")
def ensure_guest_identity(db: Session, user_agent: Optional[str] = None) -> AuthOut:
    """
    New guest with a readable random name (no email/password yet).
    Tries a few fresh names, then falls back to a numeric suffix.
    """
    repo = WordleRepository(db)

    username = random_name()
    for _ in range(config.GUEST_NAME_RETRIES):
        if not repo.username_taken(username):
            break
        username = random_name()
    else:
        username = with_suffix(username)
        if repo.username_taken(username):
            raise Conflict("Could not find a free guest name")

    user = repo.add_user(UserORM(
        username=username,
        device_info=[user_agent or "Unknown"],
    ))
    db.commit()
    logger.info("Created guest user %s (%s)", user.id, user.username)
    return _auth_out(user)


@action("Token verification failed")
def current_user(db: Session, token: str) -> UserOut:
    claims = verify_token(token) if token else None
    if not claims or claims.get("type", "user") != "user":
        raise Unauthorized("Invalid token")
    user_id = _subject(claims)
    if user_id is None:
        raise Unauthorized("Invalid token")

    # The user may have been deleted since the token was issued
    user = WordleRepository(db).get_user(user_id)
    if user is None:
        raise Unauthorized("User not found")
    return UserOut.model_validate(user)


@action("Failed to claim profile")
def claim_profile(db: Session, user_id: int, full_name: str, email: str) -> UserOut:
    repo = WordleRepository(db)
    user = _require_user(repo, user_id)
    email = email.strip().lower()

    other = repo.get_user_by_email(email)
    if other is not None and other.id != user.id:
        raise Conflict("Email already taken")

    # Keep the guest username, attach the contact details
    user.email = email
    user.full_name = full_name.strip()
    db.commit()
    return UserOut.model_validate(user)


@action("Failed to update phone number")
def update_phone_number(db: Session, user_id: int, phone_number: str) -> UserOut:
    repo = WordleRepository(db)
    user = _require_user(repo, user_id)
    user.phone_number = phone_number.strip()
    db.commit()
    return UserOut.model_validate(user)


# --- Admin identity ---

@action("Error checking admin existence")
def admin_exists(db: Session) -> bool:
    return WordleRepository(db).admin_exists()


@action("Failed to create admin")
def create_admin(db: Session, username: str, password: str) -> AdminOut:
    repo = WordleRepository(db)
    # Only one admin account, ever
    if repo.admin_exists():
        raise Conflict("Admin already exists")
    username = normalize_username(username)
    if not username or not password:
        raise ValidationFailed("Username and password are required")

    admin = repo.add_admin(AdminORM(username=username, password_hash=hash_password(password)))
    db.commit()
    logger.info("Created admin %s", admin.username)
    return AdminOut.model_validate(admin)


@action("Login failed")
def login_admin(db: Session, username: str, password: str) -> AdminAuthOut:
    admin = WordleRepository(db).get_admin_by_username(username)
    if admin is None or not verify_password(admin.password_hash, password):
        logger.warning("Admin login rejected for %r", username)
        raise Unauthorized("Invalid credentials")

    token = issue_token({"sub": admin.id, "username": admin.username, "type": "admin"})
    return AdminAuthOut(admin=AdminOut.model_validate(admin), token=token)


@action("Token verification failed")
def verify_admin_token(db: Session, token: str) -> AdminOut:
    claims = verify_token(token) if token else None
    if not claims:
        raise Unauthorized("Invalid admin token")
    if claims.get("type") != "admin":
        raise Forbidden("Admin access required")

    admin_id = _subject(claims)
    admin = WordleRepository(db).get_admin(admin_id) if admin_id is not None else None
    if admin is None:
        raise Unauthorized("Invalid admin token")
    return AdminOut.model_validate(admin)

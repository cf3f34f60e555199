"""
Password hashing and bearer tokens.

- hash_password / verify_password: werkzeug's salted, slow hashes
- issue_token / verify_token: signed JWT (HS256) that expires after TOKEN_TTL_DAYS
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from werkzeug.security import generate_password_hash, check_password_hash

from . import config

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def issue_token(claims: Dict[str, Any]) -> str:
    """
    Claims used by the app:
      sub          -> user or admin id (as a string)
      username     -> lowercase username
      email, phone_number (optional)
      type         -> "user" | "admin"
    """
    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["sub"] = str(payload["sub"])
    payload["iat"] = now
    payload["exp"] = now + timedelta(days=config.TOKEN_TTL_DAYS)
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Decoded claims, or None for a bad/expired token."""
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        logger.info("Token verification failed: %s", exc)
        return None

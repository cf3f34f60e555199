"""
Settings for the Campus Wordle service, read from the environment.

Same approach as db.py: load a local .env if present (dev convenience),
then pull everything else with os.getenv and a sane default.
DATABASE_URL is handled in db.py because it has no default.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# "local" auto-creates tables on startup; tests set "test"
APP_ENV = os.getenv("APP_ENV", "local")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Bearer tokens (HS256)
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = "HS256"
TOKEN_TTL_DAYS = int(os.getenv("TOKEN_TTL_DAYS", "7"))

# Game rules
MAX_GUESSES = int(os.getenv("MAX_GUESSES", "6"))
MIN_WORD_LENGTH = 3
MAX_WORD_LENGTH = 7

# Guest usernames: how many random names to try before adding a numeric suffix
GUEST_NAME_RETRIES = 5

# Optional endpoint pinged after every saved attempt; empty disables it
PROGRESS_WEBHOOK_URL = os.getenv("PROGRESS_WEBHOOK_URL", "")
WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "3.0"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

"""
- HTTP call with clear fallback
After a gameplay is saved we ping an external endpoint (PROGRESS_WEBHOOK_URL),
e.g. to flip a light on the event booth. If anything goes wrong (no internet,
timeout, bad response) we log it and carry on: the saved attempt never depends on it.
"""

import logging

import requests

from . import config

logger = logging.getLogger(__name__)


def notify_progress(user_id: int, puzzle_id: int, completed: bool) -> bool:
    """Returns True when the endpoint accepted the ping, False otherwise (or when disabled)."""
    url = config.PROGRESS_WEBHOOK_URL
    if not url:
        return False

    payload = {
        "user_id": user_id,
        "game_id": puzzle_id,
        "completed": completed,
    }

    try:
        response = requests.post(url, json=payload, timeout=config.WEBHOOK_TIMEOUT_SECONDS)
        # If the response was not 2xx, this will raise an error
        response.raise_for_status()
        return True
    except requests.RequestException as exc:
        logger.warning("Progress webhook failed: %s", exc)
        return False

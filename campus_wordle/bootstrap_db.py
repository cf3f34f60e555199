"""
Dev convenience: create tables if they don't exist.
Call this at startup in local/dev only; also used by `python -m campus_wordle.bootstrap_db`.
"""

from .db import engine, Base
from . import models  # noqa: F401  (registers the tables on Base.metadata)


def create_all():
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    create_all()

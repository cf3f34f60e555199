"""
Operation boundary.

Every public service function is wrapped with @action("generic message"):
- domain errors (errors.py) -> Outcome(success=False, message=<their text>, kind=<their kind>)
- anything else (DB down, bugs) -> logged, session rolled back, generic message
- success -> Outcome(success=True, value=<return value>)

Routes look at Outcome.kind to pick an HTTP status.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy.orm import Session

from .errors import WordleError
from .types import FailureKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    success: bool
    value: Optional[T] = None
    message: Optional[str] = None
    kind: Optional[FailureKind] = None

    @classmethod
    def ok(cls, value: T) -> "Outcome[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, message: str, kind: FailureKind = "error") -> "Outcome[T]":
        return cls(success=False, message=message, kind=kind)


def _rollback(args: tuple) -> None:
    # The session is always the first positional argument of a service function
    if args and isinstance(args[0], Session):
        try:
            args[0].rollback()
        except Exception:
            logger.exception("Rollback failed")


def action(generic_message: str) -> Callable[[Callable[..., T]], Callable[..., Outcome[T]]]:
    def decorate(fn: Callable[..., T]) -> Callable[..., Outcome[T]]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Outcome[T]:
            try:
                return Outcome.ok(fn(*args, **kwargs))
            except WordleError as err:
                _rollback(args)
                logger.info("%s rejected: %s", fn.__name__, err.message)
                return Outcome.fail(err.message, err.kind)
            except Exception:
                _rollback(args)
                logger.exception("Error in %s", fn.__name__)
                return Outcome.fail(generic_message, "error")

        return wrapper

    return decorate

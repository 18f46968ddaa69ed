"""Identifier and clock capabilities.

Components that mint ids or timestamps take them as injected callables so
tests can substitute deterministic sources.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable


IdFactory = Callable[[], str]
Clock = Callable[[], datetime]


def new_id() -> str:
    """Generate a random unique identifier."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class SequentialIds:
    """Deterministic id factory producing ``prefix_1``, ``prefix_2``, ..."""

    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = 0

    def __call__(self) -> str:
        self._counter += 1
        return f"{self._prefix}_{self._counter}"

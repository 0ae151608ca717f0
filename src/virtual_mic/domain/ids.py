from __future__ import annotations

import secrets
import string
from threading import Lock

# URL- and display-safe alphabet (same character set as nanoid).
SESSION_ID_ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_session_id(length: int = 8) -> str:
    """Return a random public session token of ``length`` characters."""

    if length < 1:
        raise ValueError("Session id length must be positive")
    return "".join(secrets.choice(SESSION_ID_ALPHABET) for _ in range(length))


class QuestionIdSequence:
    """Process-lifetime counter for question ids.

    Ids are unique across all sessions and never reused, even after a
    question is deleted.
    """

    def __init__(self, start: int = 1) -> None:
        self._next = start
        self._lock = Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

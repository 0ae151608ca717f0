from __future__ import annotations


class RegistryValidationError(ValueError):
    """Raised when a create/update payload is malformed.

    Absence of a record is not an error; repositories return None for that.
    """


class InvalidStatusTransition(RegistryValidationError):
    def __init__(self, question_id: int, current: str, target: str) -> None:
        self.question_id = question_id
        self.current = current
        self.target = target
        super().__init__(f"Question {question_id} cannot move from '{current}' to '{target}'")


class SessionClosedError(Exception):
    """Raised when a question is submitted to a session the host has ended."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} is no longer accepting questions")

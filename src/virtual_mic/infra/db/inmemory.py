from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.virtual_mic.domain.errors import InvalidStatusTransition, RegistryValidationError
from src.virtual_mic.domain.ids import QuestionIdSequence
from src.virtual_mic.domain.models.question import (
    QUESTION_IMMUTABLE_FIELDS,
    Question,
    QuestionStatus,
    is_allowed_transition,
)
from src.virtual_mic.domain.models.seminar_session import SESSION_IMMUTABLE_FIELDS, SeminarSession
from src.virtual_mic.infra.db.repositories import QuestionRepository, SessionRepository

logger = logging.getLogger("virtual_mic.registry")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _build(model_cls: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise RegistryValidationError(str(exc)) from exc


def _merge(current: ModelT, updates: Mapping[str, Any], immutable: FrozenSet[str]) -> ModelT:
    """Shallow-merge ``updates`` into ``current`` and re-validate the result.

    Keys are attribute names (snake_case). Fields not mentioned are untouched.
    """

    model_cls = type(current)
    unknown = set(updates) - set(model_cls.model_fields)
    if unknown:
        raise RegistryValidationError(f"Unknown field(s) for {model_cls.__name__}: {sorted(unknown)}")

    existing = current.model_dump()
    changed_immutable = sorted(k for k in updates if k in immutable and updates[k] != existing[k])
    if changed_immutable:
        raise RegistryValidationError(f"Field(s) cannot be changed after creation: {changed_immutable}")

    return _build(model_cls, {**existing, **updates})


class InMemorySessionRepository(SessionRepository):
    """Process-local session registry keyed by the public session id."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SeminarSession] = {}
        self._lock = Lock()

    def create(self, *, host_name: str, id: str, is_active: bool = True) -> SeminarSession:
        if not id:
            raise RegistryValidationError("Session id is required")
        if not host_name or not host_name.strip():
            raise RegistryValidationError("Host name is required")

        session = _build(
            SeminarSession,
            {"id": id, "host_name": host_name, "is_active": is_active, "participant_count": 0},
        )
        with self._lock:
            if id in self._sessions:
                raise RegistryValidationError(f"Session id {id!r} is already in use")
            self._sessions[id] = session
        logger.debug("Created session %s", id)
        return session

    def get(self, session_id: str) -> Optional[SeminarSession]:
        return self._sessions.get(session_id)

    def update(self, session_id: str, updates: Mapping[str, Any]) -> Optional[SeminarSession]:
        if isinstance(updates.get("host_name"), str):
            host_name = updates["host_name"].strip()
            if not host_name:
                raise RegistryValidationError("Host name is required")
            updates = {**updates, "host_name": host_name}

        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            updated = _merge(session, updates, SESSION_IMMUTABLE_FIELDS)
            self._sessions[session_id] = updated
            return updated

    def list_all(self) -> List[SeminarSession]:
        return list(self._sessions.values())

    def increment_participant_count(self, session_id: str) -> Optional[SeminarSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            updated = session.model_copy(update={"participant_count": session.participant_count + 1})
            self._sessions[session_id] = updated
            return updated


class InMemoryQuestionRepository(QuestionRepository):
    """Process-local question registry.

    Question ids come from a sequence shared by all sessions. The queue
    position (``order``) is per session and appended at max + 1 on creation.
    """

    def __init__(
        self,
        *,
        id_sequence: Optional[QuestionIdSequence] = None,
        default_participant_name: str = "Anonymous",
        strict_status_transitions: bool = False,
    ) -> None:
        self._questions: Dict[int, Question] = {}
        self._ids = id_sequence or QuestionIdSequence()
        self._default_participant_name = default_participant_name
        self._strict_status_transitions = strict_status_transitions
        self._lock = Lock()

    def create(
        self,
        *,
        session_id: str,
        audio_filename: str,
        duration: int,
        participant_name: Optional[str] = None,
    ) -> Question:
        if not session_id:
            raise RegistryValidationError("Session id is required")
        if not audio_filename:
            raise RegistryValidationError("Audio filename is required")
        if duration is None or duration < 0:
            raise RegistryValidationError("Duration must be a non-negative number of seconds")

        name = participant_name.strip() if participant_name else ""

        # The max-order scan and the insert must not interleave with another
        # create for the same session.
        with self._lock:
            orders = [q.order for q in self._questions.values() if q.session_id == session_id]
            question = _build(
                Question,
                {
                    "id": self._ids.next(),
                    "session_id": session_id,
                    "participant_name": name or self._default_participant_name,
                    "audio_filename": audio_filename,
                    "duration": duration,
                    "status": QuestionStatus.QUEUED,
                    "order": max(orders) + 1 if orders else 1,
                },
            )
            self._questions[question.id] = question
        logger.debug("Queued question %s in session %s at order %s", question.id, session_id, question.order)
        return question

    def get(self, question_id: int) -> Optional[Question]:
        return self._questions.get(question_id)

    def list_by_session(self, session_id: str) -> List[Question]:
        questions = [q for q in list(self._questions.values()) if q.session_id == session_id]
        return sorted(questions, key=lambda q: (q.order, q.id))

    def update(self, question_id: int, updates: Mapping[str, Any]) -> Optional[Question]:
        with self._lock:
            question = self._questions.get(question_id)
            if question is None:
                return None
            updated = _merge(question, updates, QUESTION_IMMUTABLE_FIELDS)
            if self._strict_status_transitions and not is_allowed_transition(question.status, updated.status):
                raise InvalidStatusTransition(question_id, question.status.value, updated.status.value)
            self._questions[question_id] = updated
            return updated

    def delete(self, question_id: int) -> None:
        with self._lock:
            self._questions.pop(question_id, None)

    def update_order(self, session_id: str, orders: Iterable[Tuple[int, int]]) -> None:
        with self._lock:
            for question_id, order in orders:
                question = self._questions.get(question_id)
                if question is None or question.session_id != session_id:
                    continue
                self._questions[question_id] = _build(Question, {**question.model_dump(), "order": order})

    def count(self) -> int:
        return len(self._questions)

    def list_audio_filenames(self) -> Set[str]:
        return {q.audio_filename for q in list(self._questions.values())}

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Mapping, Optional, Set, Tuple

from src.virtual_mic.domain.models.question import Question
from src.virtual_mic.domain.models.seminar_session import SeminarSession


class SessionRepository(ABC):
    @abstractmethod
    def create(self, *, host_name: str, id: str, is_active: bool = True) -> SeminarSession:
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> Optional[SeminarSession]:
        raise NotImplementedError

    @abstractmethod
    def update(self, session_id: str, updates: Mapping[str, Any]) -> Optional[SeminarSession]:
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> List[SeminarSession]:
        raise NotImplementedError

    @abstractmethod
    def increment_participant_count(self, session_id: str) -> Optional[SeminarSession]:
        raise NotImplementedError


class QuestionRepository(ABC):
    @abstractmethod
    def create(
        self,
        *,
        session_id: str,
        audio_filename: str,
        duration: int,
        participant_name: Optional[str] = None,
    ) -> Question:
        raise NotImplementedError

    @abstractmethod
    def get(self, question_id: int) -> Optional[Question]:
        raise NotImplementedError

    @abstractmethod
    def list_by_session(self, session_id: str) -> List[Question]:
        raise NotImplementedError

    @abstractmethod
    def update(self, question_id: int, updates: Mapping[str, Any]) -> Optional[Question]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, question_id: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_order(self, session_id: str, orders: Iterable[Tuple[int, int]]) -> None:
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def list_audio_filenames(self) -> Set[str]:
        raise NotImplementedError

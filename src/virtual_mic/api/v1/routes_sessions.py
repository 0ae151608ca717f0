from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.virtual_mic.config import Settings
from src.virtual_mic.dependencies import get_question_repository, get_session_repository, get_settings
from src.virtual_mic.domain.ids import generate_session_id
from src.virtual_mic.domain.models.question import Question
from src.virtual_mic.domain.models.seminar_session import SeminarSession
from src.virtual_mic.infra.db.repositories import QuestionRepository, SessionRepository
from src.virtual_mic.services.audit.service import audit_service

router = APIRouter(prefix="/sessions", tags=["sessions"])

# Collisions are astronomically unlikely at 8 characters; this only bounds the
# loop if someone configures a very short token length.
_MAX_ID_ATTEMPTS = 10


class CreateSessionRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    host_name: str = Field(min_length=1)
    is_active: bool = True


class UpdateSessionRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    host_name: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
    participant_count: Optional[int] = Field(default=None, ge=0)


@router.post("/", response_model=SeminarSession, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: CreateSessionRequest,
    sessions: SessionRepository = Depends(get_session_repository),
    settings: Settings = Depends(get_settings),
) -> SeminarSession:
    host_name = payload.host_name.strip()
    if not host_name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Host name is required")

    for _ in range(_MAX_ID_ATTEMPTS):
        session_id = generate_session_id(settings.session_id_length)
        if sessions.get(session_id) is None:
            break
    else:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not allocate a unique session id",
        )

    session = sessions.create(host_name=host_name, id=session_id, is_active=payload.is_active)

    audit_service.log_event(action="create_session", resource_type="session", resource_id=session.id)

    return session


@router.get("/", response_model=List[SeminarSession])
async def list_sessions(sessions: SessionRepository = Depends(get_session_repository)) -> List[SeminarSession]:
    return sessions.list_all()


@router.get("/{session_id}", response_model=SeminarSession)
async def get_session(
    session_id: str,
    sessions: SessionRepository = Depends(get_session_repository),
) -> SeminarSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.patch("/{session_id}", response_model=SeminarSession)
async def update_session(
    session_id: str,
    payload: UpdateSessionRequest,
    sessions: SessionRepository = Depends(get_session_repository),
) -> SeminarSession:
    updates = payload.model_dump(exclude_unset=True)
    session = sessions.update(session_id, updates)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    audit_service.log_event(
        action="update_session",
        resource_type="session",
        resource_id=session_id,
        extra={"fields": sorted(updates)},
    )

    return session


@router.get("/{session_id}/questions", response_model=List[Question])
async def list_session_questions(
    session_id: str,
    questions: QuestionRepository = Depends(get_question_repository),
) -> List[Question]:
    """Return the session's queue, in playback order."""

    return questions.list_by_session(session_id)

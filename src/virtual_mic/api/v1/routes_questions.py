from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.virtual_mic.config import Settings
from src.virtual_mic.dependencies import get_question_repository, get_question_service, get_settings
from src.virtual_mic.domain.errors import SessionClosedError
from src.virtual_mic.domain.models.question import Question, QuestionStatus
from src.virtual_mic.infra.db.repositories import QuestionRepository
from src.virtual_mic.services.audit.service import audit_service
from src.virtual_mic.services.questions.service import QuestionService, audio_filename_for_upload

router = APIRouter(prefix="/questions", tags=["questions"])


class UpdateQuestionRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    status: Optional[QuestionStatus] = None
    order: Optional[int] = None
    participant_name: Optional[str] = None


class QuestionOrder(BaseModel):
    id: int
    order: int


class ReorderQuestionsRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str = Field(min_length=1)
    question_orders: List[QuestionOrder]


class SuccessResponse(BaseModel):
    success: bool = True


@router.post("/", response_model=Question, status_code=status.HTTP_201_CREATED)
async def submit_question(
    audio: UploadFile = File(...),
    session_id: str = Form(..., alias="sessionId"),
    participant_name: Optional[str] = Form(None, alias="participantName"),
    duration: int = Form(0, ge=0),
    service: QuestionService = Depends(get_question_service),
    settings: Settings = Depends(get_settings),
) -> Question:
    """Accept a recorded question from a participant and queue it.

    The recording is stored first; the question is appended to the end of
    the session queue and the session's participant count is bumped.
    """

    if not audio.content_type or not audio.content_type.startswith("audio/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type; expected audio/*.",
        )

    content = await audio.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Uploaded file too large.",
        )

    try:
        question = service.submit_question(
            session_id=session_id,
            content=content,
            filename=audio_filename_for_upload(audio.filename, audio.content_type),
            duration=duration,
            participant_name=participant_name,
        )
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    except SessionClosedError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Session has ended")

    audit_service.log_event(
        action="submit_question",
        resource_type="question",
        resource_id=str(question.id),
        extra={"session_id": session_id, "size_bytes": len(content), "duration": duration},
    )

    return question


@router.post("/reorder", response_model=SuccessResponse)
async def reorder_questions(
    payload: ReorderQuestionsRequest,
    questions: QuestionRepository = Depends(get_question_repository),
) -> SuccessResponse:
    """Bulk-assign queue positions. Pairs for other sessions are ignored."""

    questions.update_order(payload.session_id, [(item.id, item.order) for item in payload.question_orders])

    audit_service.log_event(
        action="reorder_questions",
        resource_type="session",
        resource_id=payload.session_id,
        extra={"count": len(payload.question_orders)},
    )

    return SuccessResponse()


@router.get("/{question_id}", response_model=Question)
async def get_question(
    question_id: int,
    questions: QuestionRepository = Depends(get_question_repository),
) -> Question:
    question = questions.get(question_id)
    if question is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    return question


@router.patch("/{question_id}", response_model=Question)
async def update_question(
    question_id: int,
    payload: UpdateQuestionRequest,
    questions: QuestionRepository = Depends(get_question_repository),
) -> Question:
    updates = payload.model_dump(exclude_unset=True)
    question = questions.update(question_id, updates)
    if question is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")

    audit_service.log_event(
        action="update_question",
        resource_type="question",
        resource_id=str(question_id),
        extra={"fields": sorted(updates), "status": question.status.value},
    )

    return question


@router.delete("/{question_id}", response_model=SuccessResponse)
async def delete_question(
    question_id: int,
    service: QuestionService = Depends(get_question_service),
) -> SuccessResponse:
    deleted = service.delete_question(question_id)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")

    audit_service.log_event(
        action="delete_question",
        resource_type="question",
        resource_id=str(question_id),
        extra={"session_id": deleted.session_id},
    )

    return SuccessResponse()

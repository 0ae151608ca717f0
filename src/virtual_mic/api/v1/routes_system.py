from fastapi import APIRouter, Depends

from src.virtual_mic.dependencies import get_question_service
from src.virtual_mic.services.audit.service import audit_service
from src.virtual_mic.services.questions.service import QuestionService

router = APIRouter(prefix="", tags=["system"])


@router.get("/health")
async def health_check_v1() -> dict:
    """API v1 health endpoint."""
    return {"status": "ok", "version": "v1"}


@router.post("/system/audio/sweep")
async def sweep_audio_v1(service: QuestionService = Depends(get_question_service)) -> dict:
    """Delete stored recordings that no longer belong to any question.

    Recovers space after a question deletion whose blob removal failed, or an
    upload whose question was never created.
    """

    deleted = service.sweep_orphaned_audio()

    audit_service.log_event(action="sweep_audio", resource_type="audio", extra={"deleted": len(deleted)})

    return {"deleted": deleted}

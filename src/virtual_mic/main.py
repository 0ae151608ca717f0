from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.virtual_mic.api.v1.routes_audio import router as audio_router_v1
from src.virtual_mic.api.v1.routes_questions import router as questions_router_v1
from src.virtual_mic.api.v1.routes_sessions import router as sessions_router_v1
from src.virtual_mic.api.v1.routes_system import router as system_router_v1
from src.virtual_mic.config import Settings, settings as default_settings
from src.virtual_mic.domain.errors import InvalidStatusTransition, RegistryValidationError
from src.virtual_mic.infra.db.inmemory import InMemoryQuestionRepository, InMemorySessionRepository
from src.virtual_mic.infra.db.repositories import QuestionRepository, SessionRepository
from src.virtual_mic.infra.storage.audio import AudioStorageBackend, LocalAudioStorageBackend
from src.virtual_mic.services.questions.service import QuestionService


def _configure_logging(level: str) -> None:
    for name in ("audit", "virtual_mic"):
        logging.getLogger(name).setLevel(level.upper())


async def _registry_validation_handler(request: Request, exc: RegistryValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def _invalid_transition_handler(request: Request, exc: InvalidStatusTransition) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    *,
    session_repository: Optional[SessionRepository] = None,
    question_repository: Optional[QuestionRepository] = None,
    audio_storage: Optional[AudioStorageBackend] = None,
) -> FastAPI:
    """Build the API with its own session/question registries and audio store.

    Anything not passed in is created from ``settings``. State is held on
    ``app.state`` and lives exactly as long as the app object.
    """

    settings = settings or default_settings
    _configure_logging(settings.log_level)

    app = FastAPI(title="Virtual Mic Seminar Q&A API")

    sessions = session_repository or InMemorySessionRepository()
    questions = question_repository or InMemoryQuestionRepository(
        default_participant_name=settings.default_participant_name,
        strict_status_transitions=settings.strict_status_transitions,
    )
    storage = audio_storage or LocalAudioStorageBackend(settings.audio_upload_dir)

    app.state.settings = settings
    app.state.session_repository = sessions
    app.state.question_repository = questions
    app.state.audio_storage = storage
    app.state.question_service = QuestionService(sessions=sessions, questions=questions, audio_storage=storage)

    app.add_exception_handler(InvalidStatusTransition, _invalid_transition_handler)
    app.add_exception_handler(RegistryValidationError, _registry_validation_handler)

    # Participants join from phones on arbitrary origins; tighten via
    # CORS_ALLOW_ORIGINS where the frontend is hosted separately.
    allow_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()] or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["system"])
    async def health_check() -> dict:
        """Basic liveness probe for the API root."""
        return {"status": "ok"}

    # Versioned API routers
    app.include_router(system_router_v1, prefix="/api/v1")
    app.include_router(sessions_router_v1, prefix="/api/v1")
    app.include_router(questions_router_v1, prefix="/api/v1")
    app.include_router(audio_router_v1, prefix="/api/v1")

    return app


app = create_app()

from __future__ import annotations

from fastapi import Request

from src.virtual_mic.config import Settings
from src.virtual_mic.infra.db.repositories import QuestionRepository, SessionRepository
from src.virtual_mic.infra.storage.audio import AudioStorageBackend
from src.virtual_mic.services.questions.service import QuestionService


# The registries and the audio store are created by ``create_app`` and live on
# ``app.state`` for the lifetime of the application, so every app instance
# (and every test) gets its own isolated stores.


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_repository(request: Request) -> SessionRepository:
    return request.app.state.session_repository


def get_question_repository(request: Request) -> QuestionRepository:
    return request.app.state.question_repository


def get_audio_storage(request: Request) -> AudioStorageBackend:
    return request.app.state.audio_storage


def get_question_service(request: Request) -> QuestionService:
    return request.app.state.question_service

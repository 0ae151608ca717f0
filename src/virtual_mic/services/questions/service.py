from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from src.virtual_mic.domain.errors import SessionClosedError
from src.virtual_mic.domain.models.question import Question
from src.virtual_mic.infra.db.repositories import QuestionRepository, SessionRepository
from src.virtual_mic.infra.storage.audio import AudioStorageBackend

logger = logging.getLogger("virtual_mic.questions")

# Used when the upload has neither a filename extension nor a recognised
# content type. Browser MediaRecorder output is WebM in practice.
_DEFAULT_AUDIO_SUFFIX = "webm"

_SUFFIX_BY_CONTENT_TYPE = {
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mpeg": "mp3",
    "audio/mp4": "m4a",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}


def audio_filename_for_upload(original_name: Optional[str], content_type: Optional[str]) -> str:
    """Build a fresh, path-safe storage filename for an uploaded recording."""

    suffix = (Path(original_name).suffix if original_name else "").lstrip(".").lower()
    if not suffix.isalnum():
        suffix = ""
    if not suffix and content_type:
        suffix = _SUFFIX_BY_CONTENT_TYPE.get(content_type.split(";")[0].strip().lower(), "")
    return f"{uuid4().hex}.{suffix or _DEFAULT_AUDIO_SUFFIX}"


class QuestionService:
    """Coordinates the question registry with the audio store.

    Record and blob operations are two independent steps. Between them the
    system can briefly hold a blob without a question (harmless, cleaned up
    by :meth:`sweep_orphaned_audio`) or a question whose blob is gone (the
    audio endpoint answers 404 for it).
    """

    def __init__(
        self,
        *,
        sessions: SessionRepository,
        questions: QuestionRepository,
        audio_storage: AudioStorageBackend,
    ) -> None:
        self._sessions = sessions
        self._questions = questions
        self._audio_storage = audio_storage

    def submit_question(
        self,
        *,
        session_id: str,
        content: bytes,
        filename: str,
        duration: int,
        participant_name: Optional[str] = None,
    ) -> Question:
        session = self._sessions.get(session_id)
        if session is None:
            raise LookupError(f"Session {session_id} not found")
        if not session.is_active:
            raise SessionClosedError(session_id)

        stored = self._audio_storage.save_file(content, filename=filename)
        try:
            question = self._questions.create(
                session_id=session_id,
                audio_filename=stored,
                duration=duration,
                participant_name=participant_name,
            )
        except Exception:
            self._audio_storage.delete_file(stored)
            raise

        self._sessions.increment_participant_count(session_id)
        return question

    def delete_question(self, question_id: int) -> Optional[Question]:
        """Delete a question and its recording. Returns None if it did not exist."""

        question = self._questions.get(question_id)
        if question is None:
            return None

        try:
            self._audio_storage.delete_file(question.audio_filename)
        except OSError:
            logger.warning(
                "Could not delete audio %s for question %s; leaving it for the sweep",
                question.audio_filename,
                question_id,
                exc_info=True,
            )

        self._questions.delete(question_id)
        return question

    def sweep_orphaned_audio(self) -> List[str]:
        """Delete stored recordings that no question references any more."""

        referenced = self._questions.list_audio_filenames()
        deleted: List[str] = []
        for filename in sorted(self._audio_storage.list_files() - referenced):
            try:
                self._audio_storage.delete_file(filename)
            except OSError:
                logger.warning("Could not delete orphaned audio %s", filename, exc_info=True)
                continue
            deleted.append(filename)
        if deleted:
            logger.info("Swept %d orphaned audio file(s)", len(deleted))
        return deleted

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class QuestionStatus(str, Enum):
    QUEUED = "queued"
    PLAYING = "playing"
    PLAYED = "played"
    SKIPPED = "skipped"


# Allowed status changes when strict transitions are enabled. Re-setting the
# current status is always accepted and is not listed here.
QUESTION_STATUS_TRANSITIONS: Dict[QuestionStatus, FrozenSet[QuestionStatus]] = {
    QuestionStatus.QUEUED: frozenset({QuestionStatus.PLAYING, QuestionStatus.SKIPPED}),
    QuestionStatus.PLAYING: frozenset({QuestionStatus.PLAYED, QuestionStatus.SKIPPED, QuestionStatus.QUEUED}),
    QuestionStatus.PLAYED: frozenset(),
    QuestionStatus.SKIPPED: frozenset({QuestionStatus.QUEUED}),
}


def is_allowed_transition(current: QuestionStatus, target: QuestionStatus) -> bool:
    if current == target:
        return True
    return target in QUESTION_STATUS_TRANSITIONS[current]


class Question(BaseModel):
    """A recorded audio question waiting in (or already through) a session queue."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int = Field(ge=0)
    session_id: str = Field(min_length=1)
    participant_name: str = "Anonymous"
    # Reference to the blob in the audio storage backend.
    audio_filename: str = Field(min_length=1)
    duration: int = Field(ge=0)  # seconds, as reported by the uploading client
    status: QuestionStatus = QuestionStatus.QUEUED
    order: int


QUESTION_IMMUTABLE_FIELDS = frozenset({"id", "session_id", "audio_filename", "duration"})

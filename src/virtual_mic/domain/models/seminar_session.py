from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SeminarSession(BaseModel):
    """One seminar / Q&A event that participants submit questions to.

    The id is the short public token embedded in the participant join link.
    ``is_active`` is flipped to False when the host ends the session; the
    request layer refuses new submissions after that.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    host_name: str = Field(min_length=1)
    is_active: bool = True
    # Incremented once per accepted question; not deduplicated by participant.
    participant_count: int = Field(default=0, ge=0)


# Fields that may never change after creation.
SESSION_IMMUTABLE_FIELDS = frozenset({"id"})

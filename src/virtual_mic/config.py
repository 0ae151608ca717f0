from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Settings:
    """Centralized application settings.

    This keeps environment-variable handling in one place so other modules can
    depend on strongly-typed attributes instead of calling os.getenv
    directly.
    """

    # Directory where uploaded question recordings are stored.
    audio_upload_dir: Path = field(default_factory=lambda: Path(os.getenv("AUDIO_UPLOAD_DIR", "uploads")))

    # Request size limit for a single recording (in bytes).
    max_upload_bytes: int = field(
        default_factory=lambda: int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    )

    # Length of the random token used as the public session id (shown in the
    # join link / QR code).
    session_id_length: int = field(default_factory=lambda: int(os.getenv("SESSION_ID_LENGTH", "8")))

    # Label stored when a participant submits without a name.
    default_participant_name: str = field(
        default_factory=lambda: os.getenv("DEFAULT_PARTICIPANT_NAME", "Anonymous")
    )

    # When true, question status changes must follow the playback transition
    # table (queued -> playing -> played, etc.). Off by default so hosts can
    # re-queue skipped or played questions.
    strict_status_transitions: bool = field(
        default_factory=lambda: os.getenv("STRICT_STATUS_TRANSITIONS", "false").lower() == "true"
    )

    # CORS configuration: comma-separated origins. Default is "*" (allow all),
    # since participants join from arbitrary devices on the seminar network.
    cors_allow_origins: str = field(default_factory=lambda: os.getenv("CORS_ALLOW_ORIGINS", "*"))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


settings = Settings()

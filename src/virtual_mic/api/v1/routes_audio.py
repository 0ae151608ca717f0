from __future__ import annotations

import mimetypes
import re
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status

from src.virtual_mic.dependencies import get_audio_storage
from src.virtual_mic.infra.storage.audio import AudioStorageBackend

router = APIRouter(prefix="/audio", tags=["audio"])

_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")

# mimetypes does not know every container browsers record into.
_AUDIO_MEDIA_TYPES = {
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
}


def _media_type_for(filename: str) -> str:
    suffix = ("." + filename.rsplit(".", 1)[-1].lower()) if "." in filename else ""
    return _AUDIO_MEDIA_TYPES.get(suffix) or mimetypes.guess_type(filename)[0] or "application/octet-stream"


def parse_range_header(header: Optional[str], size: int) -> Optional[Tuple[int, int]]:
    """Resolve a single ``bytes=`` range against a file of ``size`` bytes.

    Returns an inclusive ``(start, end)`` pair, or None when the header is
    absent or not something we honour (multi-range, other units), in which
    case the whole file is served. Raises ValueError for a syntactically
    valid range that cannot be satisfied.
    """

    if not header:
        return None
    match = _RANGE_RE.match(header.strip())
    if match is None:
        return None

    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        # Suffix range: the last N bytes.
        length = int(last)
        if length == 0 or size == 0:
            raise ValueError("Unsatisfiable range")
        return max(size - length, 0), size - 1

    start = int(first)
    end = int(last) if last else size - 1
    if start >= size or end < start:
        raise ValueError("Unsatisfiable range")
    return start, min(end, size - 1)


@router.get("/{filename}")
async def get_audio(
    filename: str,
    range_header: Optional[str] = Header(None, alias="Range"),
    audio_storage: AudioStorageBackend = Depends(get_audio_storage),
) -> Response:
    """Serve a stored recording, honouring single byte-range requests."""

    try:
        found = audio_storage.exists(filename)
    except ValueError:
        found = False
    if not found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Audio file not found")

    size = audio_storage.size(filename)
    media_type = _media_type_for(filename)

    try:
        byte_range = parse_range_header(range_header, size)
    except ValueError:
        return Response(
            status_code=status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
            headers={"Content-Range": f"bytes */{size}"},
        )

    if byte_range is None:
        return Response(
            content=audio_storage.read_range(filename),
            media_type=media_type,
            headers={"Accept-Ranges": "bytes"},
        )

    start, end = byte_range
    return Response(
        content=audio_storage.read_range(filename, start, end),
        status_code=status.HTTP_206_PARTIAL_CONTENT,
        media_type=media_type,
        headers={"Accept-Ranges": "bytes", "Content-Range": f"bytes {start}-{end}/{size}"},
    )

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Set

from src.virtual_mic.config import settings


class AudioStorageBackend(ABC):
    """Write-once blob store for question recordings, addressed by filename."""

    @abstractmethod
    def save_file(self, content: bytes, *, filename: str) -> str:
        """Persist audio bytes and return the filename reference."""

    @abstractmethod
    def exists(self, filename: str) -> bool:
        ...

    @abstractmethod
    def size(self, filename: str) -> int:
        """Size of a stored file in bytes. Raises FileNotFoundError if absent."""

    @abstractmethod
    def read_range(self, filename: str, start: int = 0, end: Optional[int] = None) -> bytes:
        """Return bytes ``start..end`` inclusive (to EOF when ``end`` is None).

        Used for progressive playback via HTTP Range requests.
        """

    @abstractmethod
    def delete_file(self, filename: str) -> None:
        """Best-effort deletion of a previously saved file."""

    @abstractmethod
    def list_files(self) -> Set[str]:
        ...


def _check_filename(filename: str) -> str:
    if not filename or "/" in filename or "\\" in filename or filename in {".", ".."}:
        raise ValueError(f"Invalid audio filename: {filename!r}")
    return filename


class LocalAudioStorageBackend(AudioStorageBackend):
    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base: Path = Path(base_dir) if base_dir is not None else settings.audio_upload_dir
        self._base.mkdir(parents=True, exist_ok=True)

    def _path(self, filename: str) -> Path:
        return self._base / _check_filename(filename)

    def save_file(self, content: bytes, *, filename: str) -> str:
        self._base.mkdir(parents=True, exist_ok=True)
        dest_path = self._path(filename)
        # "xb" keeps the store write-once.
        with dest_path.open("xb") as f:
            f.write(content)
        return filename

    def exists(self, filename: str) -> bool:
        return self._path(filename).is_file()

    def size(self, filename: str) -> int:
        return self._path(filename).stat().st_size

    def read_range(self, filename: str, start: int = 0, end: Optional[int] = None) -> bytes:
        path = self._path(filename)
        with path.open("rb") as f:
            f.seek(start)
            if end is None:
                return f.read()
            return f.read(max(end - start + 1, 0))

    def delete_file(self, filename: str) -> None:
        path = self._path(filename)
        if path.exists():
            path.unlink()

    def list_files(self) -> Set[str]:
        return {p.name for p in self._base.iterdir() if p.is_file()}


class InMemoryAudioStorageBackend(AudioStorageBackend):
    """Dict-backed store for tests and throwaway local runs."""

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}
        self._lock = Lock()

    def save_file(self, content: bytes, *, filename: str) -> str:
        _check_filename(filename)
        with self._lock:
            if filename in self._blobs:
                raise FileExistsError(filename)
            self._blobs[filename] = bytes(content)
        return filename

    def exists(self, filename: str) -> bool:
        return filename in self._blobs

    def size(self, filename: str) -> int:
        try:
            return len(self._blobs[filename])
        except KeyError:
            raise FileNotFoundError(filename) from None

    def read_range(self, filename: str, start: int = 0, end: Optional[int] = None) -> bytes:
        try:
            data = self._blobs[filename]
        except KeyError:
            raise FileNotFoundError(filename) from None
        return data[start:] if end is None else data[start : end + 1]

    def delete_file(self, filename: str) -> None:
        with self._lock:
            self._blobs.pop(filename, None)

    def list_files(self) -> Set[str]:
        return set(self._blobs)

import pytest
from httpx import ASGITransport, AsyncClient

from src.virtual_mic.config import Settings
from src.virtual_mic.infra.storage.audio import InMemoryAudioStorageBackend
from src.virtual_mic.main import create_app


@pytest.fixture
def test_settings(tmp_path):
    return Settings(audio_upload_dir=tmp_path / "uploads", max_upload_bytes=1024)


@pytest.fixture
def audio_storage():
    return InMemoryAudioStorageBackend()


@pytest.fixture
def app(test_settings, audio_storage):
    """A fresh app per test so registries never leak between tests."""
    return create_app(test_settings, audio_storage=audio_storage)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_session(client):
    async def _make_session(host_name="Dr. A", **extra):
        response = await client.post("/api/v1/sessions/", json={"hostName": host_name, **extra})
        assert response.status_code == 201
        return response.json()

    return _make_session


@pytest.fixture
def post_question(client):
    async def _post_question(session_id, *, duration=5, name=None, content=b"fake-audio", content_type="audio/webm"):
        data = {"sessionId": session_id, "duration": str(duration)}
        if name is not None:
            data["participantName"] = name
        return await client.post(
            "/api/v1/questions/",
            files={"audio": ("question.webm", content, content_type)},
            data=data,
        )

    return _post_question

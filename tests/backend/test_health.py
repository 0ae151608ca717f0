from fastapi import status

from src.virtual_mic.main import create_app


async def test_root_health_check(client):
    response = await client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


async def test_v1_health_check(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "version": "v1"}


async def test_apps_do_not_share_registries(app, client, make_session):
    await make_session()
    other = create_app(app.state.settings, audio_storage=app.state.audio_storage)

    assert len(app.state.session_repository.list_all()) == 1
    assert other.state.session_repository.list_all() == []

from fastapi import status
from httpx import ASGITransport, AsyncClient

from src.virtual_mic.config import Settings
from src.virtual_mic.infra.storage.audio import InMemoryAudioStorageBackend
from src.virtual_mic.main import create_app


async def test_submit_question_queues_and_counts_participant(client, make_session, post_question, audio_storage):
    session = await make_session()

    response = await post_question(session["id"], duration=5, name="Ada")
    assert response.status_code == status.HTTP_201_CREATED

    question = response.json()
    assert question["id"] >= 1
    assert question["sessionId"] == session["id"]
    assert question["participantName"] == "Ada"
    assert question["duration"] == 5
    assert question["status"] == "queued"
    assert question["order"] == 1
    assert question["audioFilename"].endswith(".webm")
    assert audio_storage.read_range(question["audioFilename"]) == b"fake-audio"

    refreshed = await client.get(f"/api/v1/sessions/{session['id']}")
    assert refreshed.json()["participantCount"] == 1


async def test_submit_question_defaults_to_anonymous(make_session, post_question):
    session = await make_session()
    response = await post_question(session["id"])
    assert response.json()["participantName"] == "Anonymous"


async def test_submit_question_rejects_non_audio(make_session, post_question, audio_storage):
    session = await make_session()
    response = await post_question(session["id"], content_type="text/plain")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert audio_storage.list_files() == set()


async def test_submit_question_rejects_oversized_upload(make_session, post_question, audio_storage):
    session = await make_session()
    # test_settings caps uploads at 1 KiB.
    response = await post_question(session["id"], content=b"x" * 2048)
    assert response.status_code == 413
    assert audio_storage.list_files() == set()


async def test_submit_question_to_unknown_session(post_question, audio_storage):
    response = await post_question("missing")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert audio_storage.list_files() == set()


async def test_submit_question_to_ended_session(client, make_session, post_question, audio_storage):
    session = await make_session()
    await client.patch(f"/api/v1/sessions/{session['id']}", json={"isActive": False})

    response = await post_question(session["id"])
    assert response.status_code == status.HTTP_409_CONFLICT
    assert audio_storage.list_files() == set()

    refreshed = await client.get(f"/api/v1/sessions/{session['id']}")
    assert refreshed.json()["participantCount"] == 0


async def test_queue_lists_in_order_and_reorders(client, make_session, post_question):
    session = await make_session()
    ids = []
    for duration in (5, 8, 3):
        ids.append((await post_question(session["id"], duration=duration)).json()["id"])

    queue = (await client.get(f"/api/v1/sessions/{session['id']}/questions")).json()
    assert [(q["id"], q["order"], q["duration"]) for q in queue] == list(zip(ids, [1, 2, 3], [5, 8, 3]))

    reorder = await client.post(
        "/api/v1/questions/reorder",
        json={"sessionId": session["id"], "questionOrders": [{"id": ids[1], "order": 0}]},
    )
    assert reorder.status_code == status.HTTP_200_OK
    assert reorder.json() == {"success": True}

    queue = (await client.get(f"/api/v1/sessions/{session['id']}/questions")).json()
    assert [q["id"] for q in queue] == [ids[1], ids[0], ids[2]]


async def test_reorder_ignores_questions_from_other_sessions(client, make_session, post_question):
    first = await make_session("Dr. A")
    second = await make_session("Dr. B")
    theirs = (await post_question(second["id"])).json()

    await client.post(
        "/api/v1/questions/reorder",
        json={"sessionId": first["id"], "questionOrders": [{"id": theirs["id"], "order": 42}]},
    )

    fetched = await client.get(f"/api/v1/questions/{theirs['id']}")
    assert fetched.json()["order"] == theirs["order"]


async def test_update_question_status(client, make_session, post_question):
    session = await make_session()
    question = (await post_question(session["id"])).json()

    playing = await client.patch(f"/api/v1/questions/{question['id']}", json={"status": "playing"})
    assert playing.status_code == status.HTTP_200_OK
    assert playing.json() == {**question, "status": "playing"}

    bad_status = await client.patch(f"/api/v1/questions/{question['id']}", json={"status": "paused"})
    assert bad_status.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    immutable = await client.patch(f"/api/v1/questions/{question['id']}", json={"duration": 1})
    assert immutable.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    missing = await client.patch("/api/v1/questions/9999", json={"status": "played"})
    assert missing.status_code == status.HTTP_404_NOT_FOUND


async def test_get_question(client, make_session, post_question):
    session = await make_session()
    question = (await post_question(session["id"])).json()

    response = await client.get(f"/api/v1/questions/{question['id']}")
    assert response.json() == question

    missing = await client.get("/api/v1/questions/9999")
    assert missing.status_code == status.HTTP_404_NOT_FOUND


async def test_delete_question_removes_record_and_audio(client, make_session, post_question, audio_storage):
    session = await make_session()
    first = (await post_question(session["id"])).json()
    second = (await post_question(session["id"])).json()

    response = await client.delete(f"/api/v1/questions/{first['id']}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True}
    assert not audio_storage.exists(first["audioFilename"])
    assert audio_storage.exists(second["audioFilename"])

    queue = (await client.get(f"/api/v1/sessions/{session['id']}/questions")).json()
    assert [q["id"] for q in queue] == [second["id"]]

    again = await client.delete(f"/api/v1/questions/{first['id']}")
    assert again.status_code == status.HTTP_404_NOT_FOUND


async def test_strict_transitions_return_conflict(tmp_path):
    app = create_app(
        Settings(audio_upload_dir=tmp_path, strict_status_transitions=True),
        audio_storage=InMemoryAudioStorageBackend(),
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        session = (await ac.post("/api/v1/sessions/", json={"hostName": "Dr. A"})).json()
        question = (
            await ac.post(
                "/api/v1/questions/",
                files={"audio": ("q.ogg", b"audio", "audio/ogg")},
                data={"sessionId": session["id"], "duration": "4"},
            )
        ).json()

        jump = await ac.patch(f"/api/v1/questions/{question['id']}", json={"status": "played"})
        assert jump.status_code == status.HTTP_409_CONFLICT

        play = await ac.patch(f"/api/v1/questions/{question['id']}", json={"status": "playing"})
        assert play.status_code == status.HTTP_200_OK

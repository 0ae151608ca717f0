from fastapi import status


async def test_create_session_returns_defaults(client):
    response = await client.post("/api/v1/sessions/", json={"hostName": "Dr. A"})
    assert response.status_code == status.HTTP_201_CREATED

    session = response.json()
    assert len(session["id"]) == 8
    assert session["hostName"] == "Dr. A"
    assert session["isActive"] is True
    assert session["participantCount"] == 0


async def test_create_session_requires_host_name(client):
    missing = await client.post("/api/v1/sessions/", json={})
    assert missing.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    blank = await client.post("/api/v1/sessions/", json={"hostName": "   "})
    assert blank.status_code == status.HTTP_400_BAD_REQUEST


async def test_create_session_ignores_client_supplied_counters(client):
    response = await client.post("/api/v1/sessions/", json={"hostName": "Dr. A", "participantCount": 7})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


async def test_get_session(client, make_session):
    session = await make_session()

    response = await client.get(f"/api/v1/sessions/{session['id']}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == session

    missing = await client.get("/api/v1/sessions/nope")
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json() == {"detail": "Session not found"}


async def test_end_session_leaves_other_fields_unchanged(client, make_session):
    session = await make_session()

    response = await client.patch(f"/api/v1/sessions/{session['id']}", json={"isActive": False})
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {**session, "isActive": False}

    fetched = await client.get(f"/api/v1/sessions/{session['id']}")
    assert fetched.json()["isActive"] is False


async def test_update_session_errors(client, make_session):
    session = await make_session()

    missing = await client.patch("/api/v1/sessions/nope", json={"isActive": False})
    assert missing.status_code == status.HTTP_404_NOT_FOUND

    unknown_field = await client.patch(f"/api/v1/sessions/{session['id']}", json={"id": "other"})
    assert unknown_field.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    null_host = await client.patch(f"/api/v1/sessions/{session['id']}", json={"hostName": None})
    assert null_host.status_code == status.HTTP_400_BAD_REQUEST

    blank_host = await client.patch(f"/api/v1/sessions/{session['id']}", json={"hostName": "   "})
    assert blank_host.status_code == status.HTTP_400_BAD_REQUEST

    fetched = await client.get(f"/api/v1/sessions/{session['id']}")
    assert fetched.json() == session


async def test_list_sessions(client, make_session):
    first = await make_session("Dr. A")
    second = await make_session("Dr. B")

    response = await client.get("/api/v1/sessions/")
    assert response.status_code == status.HTTP_200_OK
    assert {s["id"] for s in response.json()} == {first["id"], second["id"]}


async def test_session_queue_is_empty_for_unknown_session(client):
    response = await client.get("/api/v1/sessions/unknown/questions")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []

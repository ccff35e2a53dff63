# /tests/test_routers.py

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from app.main import app
from app.models.classroom_model import ClassroomSettingsUpdate
from app.services import classroom_service
from app.services.faults import StorageFault
from app.services.storage_service import StorageService, get_storage_service
from app.services.storage_helpers.memory_store import MemoryKeyValueStore


class FailingStore(MemoryKeyValueStore):
    def write(self, key, value):
        raise StorageFault("disk full")


@pytest.fixture
def db():
    return StorageService(MemoryKeyValueStore())


@pytest.fixture
def client(db):
    app.dependency_overrides[get_storage_service] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def teacher(client):
    response = client.post("/api/auth/teacher", json={"teacherName": "Ms. Lee"})
    assert response.status_code == 200
    return response.json()


def test_health_check(client):
    assert client.get("/").json()["status"] == "Classroom AI Backend is running!"


# --- Auth ---

def test_teacher_then_student_login(client, teacher):
    code = teacher["classroom"]["code"]
    assert teacher["user"]["role"] == "TEACHER"
    assert teacher["classroom"]["apiKey"] == ""

    response = client.post("/api/auth/student", json={"studentId": "42", "classCode": code.lower()})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["classCode"] == code
    assert "apiKey" not in body["classroom"]
    assert body["classroom"]["hasApiKey"] is False


def test_student_login_with_bad_code(client):
    response = client.post("/api/auth/student", json={"studentId": "42", "classCode": "NOPE00"})
    assert response.status_code == 400
    assert "Invalid Class Code" in response.json()["detail"]


def test_last_user_and_logout(client, teacher):
    assert client.get("/api/auth/last").json()["user"]["name"] == "Ms. Lee"
    assert client.post("/api/auth/logout").status_code == 204
    assert client.get("/api/auth/last").status_code == 404


# --- Classrooms ---

def test_classroom_lookup_and_settings(client, teacher):
    code = teacher["classroom"]["code"]
    assert client.get(f"/api/classrooms/{code.lower()}").json()["code"] == code
    assert client.get("/api/classrooms/ZZZZZZ").status_code == 404

    response = client.put(f"/api/classrooms/{code}/settings", json={"apiKey": "key-1"})
    assert response.status_code == 200
    assert response.json()["apiKey"] == "key-1"
    assert client.get(f"/api/classrooms/{code}").json()["hasApiKey"] is True


def test_settings_of_unknown_classroom(client):
    response = client.put("/api/classrooms/ZZZZZZ/settings", json={"apiKey": "key-1"})
    assert response.status_code == 404


# --- Sessions ---

def test_session_lifecycle(client, teacher, db):
    code = teacher["classroom"]["code"]
    classroom_service.update_settings(db, code, ClassroomSettingsUpdate(api_key="key-1"))

    created = client.post("/api/sessions", json={"userId": "42", "classCode": code})
    assert created.status_code == 201
    session_id = created.json()["id"]

    with patch("app.services.gemini_service.converse", new=AsyncMock(return_value="Four.")):
        sent = client.post(f"/api/sessions/{session_id}/messages", json={"text": "2+2?"})
    assert sent.status_code == 200
    messages = sent.json()["messages"]
    assert [m["role"] for m in messages] == ["user", "model"]
    assert sent.json()["title"] == "2+2?"

    feedback = client.put(
        f"/api/sessions/{session_id}/messages/{messages[1]['id']}/feedback",
        json={"feedback": "Well done"},
    )
    assert feedback.json()["messages"][1]["feedback"] == "Well done"

    assert [s["id"] for s in client.get("/api/sessions", params={"user_id": "42"}).json()] == [session_id]
    assert len(client.get(f"/api/classrooms/{code}/sessions").json()) == 1
    assert client.get(f"/api/classrooms/{code}/summary").json()["messageCount"] == 2

    assert client.delete(f"/api/sessions/{session_id}").status_code == 204
    assert client.delete(f"/api/sessions/{session_id}").status_code == 204
    assert client.get(f"/api/sessions/{session_id}").status_code == 404


def test_storage_failure_is_a_blocking_error():
    app.dependency_overrides[get_storage_service] = lambda: StorageService(FailingStore())
    try:
        response = TestClient(app).post("/api/sessions", json={"userId": "42"})
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 503


# --- WebSocket ---

def test_websocket_pushes_config_updates_and_replies(client, teacher, db):
    code = teacher["classroom"]["code"]
    session_id = client.post("/api/sessions", json={"userId": "42", "classCode": code}).json()["id"]

    with client.websocket_connect(f"/api/sessions/ws/{session_id}") as websocket:
        classroom_service.update_settings(db, code, ClassroomSettingsUpdate(api_key="fresh-key"))
        websocket.send_json({"type": "focus"})
        update = websocket.receive_json()
        assert update["type"] == "config_updated"
        assert update["payload"]["hasApiKey"] is True

        with patch("app.services.gemini_service.converse", new=AsyncMock(return_value="Hello!")) as converse:
            websocket.send_json({"type": "user_message", "payload": {"text": "Hi"}})
            frame = websocket.receive_json()

    assert frame["type"] == "session"
    assert frame["payload"]["messages"][-1]["text"] == "Hello!"
    assert converse.await_args.args[3] == "fresh-key"


@pytest.mark.parametrize("raw", [
    '{"type": "user_message", "payload": null}',
    '["user_message"]',
    '{"type": "user_message", "payload": {"text": 42}}',
    'not json at all',
])
def test_websocket_malformed_frame_gets_error_and_keeps_connection(client, teacher, db, raw):
    code = teacher["classroom"]["code"]
    classroom_service.update_settings(db, code, ClassroomSettingsUpdate(api_key="key-123"))
    session_id = client.post("/api/sessions", json={"userId": "42", "classCode": code}).json()["id"]

    with client.websocket_connect(f"/api/sessions/ws/{session_id}") as websocket:
        websocket.send_text(raw)
        error = websocket.receive_json()

        with patch("app.services.gemini_service.converse", new=AsyncMock(return_value="Still here")):
            websocket.send_json({"type": "user_message", "payload": {"text": "Hi"}})
            frame = websocket.receive_json()

    assert error == {"type": "error", "payload": {"message": "Malformed message."}}
    assert frame["type"] == "session"
    assert frame["payload"]["messages"][-1]["text"] == "Still here"

# /tests/test_storage_service.py

import json
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.database import Base
from app.db import base  # noqa: F401  (registers the kv table)
from app.models.classroom_model import Classroom
from app.models.session_model import ChatSession, Message
from app.services.faults import StorageFault
from app.services.storage_service import StorageService, STORAGE_KEYS
from app.services.storage_helpers.memory_store import MemoryKeyValueStore
from app.services.storage_helpers.file_store import FileKeyValueStore
from app.services.storage_helpers.sql_store import SQLKeyValueStore


# --- Fixtures ---

@pytest.fixture
def sql_session():
    """An in-memory SQLite database with the kv table, fresh for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(bind=engine)()
    yield db
    db.close()


@pytest.fixture(params=["memory", "file", "sql"])
def store(request, tmp_path, sql_session):
    if request.param == "memory":
        return MemoryKeyValueStore()
    if request.param == "file":
        return FileKeyValueStore(str(tmp_path / "data"))
    return SQLKeyValueStore(sql_session)


@pytest.fixture
def classroom():
    return Classroom(
        code="A1B2C3",
        teacher_name="Ms. Lee",
        api_key="",
        system_instruction="Be kind.",
        created_at=1700000000000,
    )


# --- Backend contract ---

def test_read_missing_key_returns_none(store):
    assert store.read("nothing_here") is None


def test_write_replaces_whole_value(store):
    store.write("k", "first")
    store.write("k", "second")
    assert store.read("k") == "second"


def test_delete_is_a_noop_for_missing_key(store):
    store.delete("never_written")
    store.write("k", "v")
    store.delete("k")
    assert store.read("k") is None


def test_file_store_leaves_no_temp_files(tmp_path):
    data_dir = tmp_path / "data"
    file_store = FileKeyValueStore(str(data_dir))
    file_store.write("classroom_ai_sessions", "[]")
    assert [p.name for p in data_dir.iterdir()] == ["classroom_ai_sessions.json"]


# --- Collections ---

def test_collection_round_trip_uses_camel_case(store, classroom):
    service = StorageService(store)
    service.save_collection(STORAGE_KEYS["CLASSROOMS"], [classroom])

    raw = json.loads(store.read(STORAGE_KEYS["CLASSROOMS"]))
    assert raw == [{
        "code": "A1B2C3",
        "teacherName": "Ms. Lee",
        "apiKey": "",
        "systemInstruction": "Be kind.",
        "createdAt": 1700000000000,
    }]
    assert service.load_collection(STORAGE_KEYS["CLASSROOMS"], Classroom) == [classroom]


def test_absent_optional_fields_are_omitted(store):
    service = StorageService(store)
    session = ChatSession(
        id="1", user_id="42", title="New Chat", created_at=1, model_id="gemini-2.5-flash",
        messages=[Message(id="m1", role="user", text="hi", timestamp=2)],
    )
    service.save_collection(STORAGE_KEYS["SESSIONS"], [session])

    raw = json.loads(store.read(STORAGE_KEYS["SESSIONS"]))[0]
    assert "classCode" not in raw
    assert raw["messages"][0] == {"id": "m1", "role": "user", "text": "hi", "timestamp": 2}


def test_reads_blob_written_by_original_client():
    blob = json.dumps([{
        "id": "1718000000000", "userId": "s-7", "title": "Fractions", "createdAt": 1718000000000,
        "modelId": "gemini-2.5-flash", "classCode": "XYZ123",
        "messages": [{"id": "1", "role": "model", "text": "Hello", "timestamp": 1718000000001, "feedback": "Good"}],
    }])
    service = StorageService(MemoryKeyValueStore({STORAGE_KEYS["SESSIONS"]: blob}))
    sessions = service.load_collection(STORAGE_KEYS["SESSIONS"], ChatSession)
    assert sessions[0].user_id == "s-7"
    assert sessions[0].class_code == "XYZ123"
    assert sessions[0].messages[0].feedback == "Good"


def test_empty_store_reads_as_empty_collection(store):
    assert StorageService(store).load_collection(STORAGE_KEYS["CLASSROOMS"], Classroom) == []


@pytest.mark.parametrize("blob", ["{not json", '{"code": "A"}', '[{"code": "A"}]'])
def test_corrupted_collection_raises_storage_fault(blob):
    service = StorageService(MemoryKeyValueStore({STORAGE_KEYS["CLASSROOMS"]: blob}))
    with pytest.raises(StorageFault):
        service.load_collection(STORAGE_KEYS["CLASSROOMS"], Classroom)


def test_file_store_wraps_os_errors(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    with pytest.raises(StorageFault):
        FileKeyValueStore(str(blocker / "data"))

# /classroom-ai-backend/app/services/storage_service.py

"""
The Persistent Store facade. Every other service reads and writes whole
collections through this module and never touches a backend directly.

Collections are JSON arrays of camelCase records, one blob per key. The store
gives no atomicity across keys and no protection against a concurrent writer:
a save is always "read the whole collection, change it, write it all back",
and the last writer wins.
"""

import os
import json
import logging
from typing import List, Optional, Type, TypeVar, Generator
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from fastapi import Depends

from app.db.database import get_db
from .faults import StorageFault
from .storage_helpers.base_store import KeyValueStore
from .storage_helpers.sql_store import SQLKeyValueStore
from .storage_helpers.file_store import FileKeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "SESSIONS": "classroom_ai_sessions",
    "CLASSROOMS": "classroom_ai_classrooms",
    "LAST_USER": "classroom_ai_last_user",
}

DATA_DIR = os.getenv("DATA_DIR", "app/data")

# Determine which backend to use based on an environment variable
USE_SQL_STORE = os.getenv("USE_SQL_STORE", "false").lower() == "true"

M = TypeVar("M", bound=BaseModel)


class StorageService:
    def __init__(self, store: KeyValueStore):
        self.store = store

    # --- Raw blob access ---
    def _read_json(self, key: str):
        raw = self.store.read(key)
        if raw is None or raw == "":
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Stored value for %s is not valid JSON: %s", key, e)
            raise StorageFault(f"Stored value for '{key}' is corrupted.") from e

    def _write_json(self, key: str, data) -> None:
        self.store.write(key, json.dumps(data, ensure_ascii=False))

    # --- Collections ---
    def load_collection(self, key: str, model: Type[M]) -> List[M]:
        """Reads the full collection stored under `key`, in stored order."""
        data = self._read_json(key)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StorageFault(f"Stored value for '{key}' is not a collection.")
        try:
            return [model.model_validate(item) for item in data]
        except ValidationError as e:
            logger.error("Stored collection %s does not match %s: %s", key, model.__name__, e)
            raise StorageFault(f"Stored collection '{key}' is corrupted.") from e

    def save_collection(self, key: str, records: List[BaseModel]) -> None:
        """Replaces the whole collection stored under `key`."""
        self._write_json(key, [r.to_record() for r in records])
        logger.debug("Wrote %d records to %s", len(records), key)

    # --- Single records ---
    def load_record(self, key: str, model: Type[M]) -> Optional[M]:
        data = self._read_json(key)
        if data is None:
            return None
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise StorageFault(f"Stored record '{key}' is corrupted.") from e

    def save_record(self, key: str, record: BaseModel) -> None:
        self._write_json(key, record.to_record())

    def delete_key(self, key: str) -> None:
        self.store.delete(key)


# --- DEPENDENCY PROVIDER ---
def get_storage_service(db: Session = Depends(get_db)) -> Generator[StorageService, None, None]:
    """
    FastAPI dependency that provides a StorageService instance, backed by
    the SQL table when USE_SQL_STORE is true and by local files otherwise.
    """
    if USE_SQL_STORE:
        yield StorageService(SQLKeyValueStore(db))
    else:
        yield StorageService(FileKeyValueStore(DATA_DIR))

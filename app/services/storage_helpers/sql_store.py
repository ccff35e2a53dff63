# /classroom-ai-backend/app/services/storage_helpers/sql_store.py

"""
SQL flavour of the Persistent Store. Each key is a single row of the
`kv_entries` table; a write is an upsert of the whole blob followed by a commit.
"""

import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models.kv_models import KVEntry
from ..faults import StorageFault

logger = logging.getLogger(__name__)


class SQLKeyValueStore:
    def __init__(self, db_session: Session):
        self.db = db_session

    def read(self, key: str) -> Optional[str]:
        try:
            entry = self.db.query(KVEntry).filter(KVEntry.key == key).first()
        except SQLAlchemyError as e:
            logger.error("Failed to read key %s: %s", key, e)
            raise StorageFault(f"Failed to read '{key}': {e}") from e
        return entry.value if entry else None

    def write(self, key: str, value: str) -> None:
        try:
            entry = self.db.query(KVEntry).filter(KVEntry.key == key).first()
            if entry:
                entry.value = value
            else:
                self.db.add(KVEntry(key=key, value=value))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to write key %s: %s", key, e)
            raise StorageFault(f"Failed to write '{key}': {e}") from e

    def delete(self, key: str) -> None:
        try:
            self.db.query(KVEntry).filter(KVEntry.key == key).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageFault(f"Failed to delete '{key}': {e}") from e

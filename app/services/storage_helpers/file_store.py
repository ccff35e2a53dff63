# /classroom-ai-backend/app/services/storage_helpers/file_store.py

"""
File-backed store for local development: one UTF-8 file per key inside a
data directory. Writes land in a temporary file first and are moved into place
with `os.replace`, so a concurrent reader sees either the old or the new blob.
"""

import os
import tempfile
import logging
from typing import Optional

from ..faults import StorageFault

logger = logging.getLogger(__name__)


class FileKeyValueStore:
    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        try:
            os.makedirs(self.data_dir, exist_ok=True)
        except OSError as e:
            raise StorageFault(f"Cannot create data directory {data_dir}: {e}") from e

    def _path(self, key: str) -> str:
        return os.path.join(self.data_dir, f"{key}.json")

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            logger.error("Failed to read key %s from %s: %s", key, path, e)
            raise StorageFault(f"Failed to read '{key}': {e}") from e

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.data_dir, suffix=".tmp", delete=False
            ) as temp_file:
                temp_file.write(value)
                temp_path = temp_file.name
            os.replace(temp_path, path)
        except OSError as e:
            logger.error("Failed to write key %s to %s: %s", key, path, e)
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)
            raise StorageFault(f"Failed to write '{key}': {e}") from e

    def delete(self, key: str) -> None:
        try:
            os.unlink(self._path(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageFault(f"Failed to delete '{key}': {e}") from e

# /classroom-ai-backend/app/services/storage_helpers/memory_store.py

from typing import Dict, Optional


class MemoryKeyValueStore:
    """Process-local store. Used by the test-suite and for throwaway runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

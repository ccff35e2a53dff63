# /classroom-ai-backend/app/services/storage_helpers/base_store.py

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """
    The durable key-value contract every backend honours.

    A `write` replaces the whole value for its key. There is no transaction
    spanning two keys, so callers must treat each collection as committed on
    its own and re-read before every read-modify-write cycle.
    """

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

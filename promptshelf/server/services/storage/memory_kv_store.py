import threading
from typing import Optional

from promptshelf.server.services.storage.kv_store_base import BaseKeyValueStore


class InMemoryKeyValueStore(BaseKeyValueStore):
    """
    Key-value store kept in process memory, used by tests and by PROMPTSHELF_STORAGE=memory
    """

    def __init__(self, profile_id: str = "memory", initial: Optional[dict] = None):
        super().__init__(profile_id)
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

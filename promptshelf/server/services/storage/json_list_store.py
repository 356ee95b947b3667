import json
import logging

from promptshelf.server.services.storage.kv_store_base import BaseKeyValueStore
from promptshelf.server.services.storage.error import StorageError

logger = logging.getLogger(__name__)


class JsonListStore:
    """
    A json array persisted under one key of a key-value store

    Reads and writes never raise: unreadable or malformed state reads as an
    empty list, failed writes are logged and dropped.
    """

    storage_key: str = ""

    def __init__(self, kv_store: BaseKeyValueStore):
        self.kv_store = kv_store

    def _read_list(self) -> list:
        try:
            stored = self.kv_store.get(self.storage_key)
            if not stored:
                return []
            parsed = json.loads(stored)
        except (StorageError, ValueError) as e:
            logger.error("Error reading %s from storage: %s", self.storage_key, e)
            return []
        if not isinstance(parsed, list):
            logger.error("Stored %s is not a list, ignoring it", self.storage_key)
            return []
        return parsed

    def _write_list(self, items: list) -> bool:
        try:
            self.kv_store.set(self.storage_key, json.dumps(items))
        except (StorageError, TypeError, ValueError) as e:
            logger.error("Error writing %s to storage: %s", self.storage_key, e)
            return False
        return True

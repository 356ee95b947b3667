from typing import Optional

from promptshelf.server import LOCAL_STORAGE_PATH, PROMPTSHELF_STORAGE
from promptshelf.server.services.gateway.prompt_gateway import PromptGateway
from promptshelf.server.services.storage.api_key_store import ApiKeyStore
from promptshelf.server.services.storage.kv_store_base import BaseKeyValueStore
from promptshelf.server.services.storage.local_json_kv_store import (
    LocalJsonKeyValueStore,
)
from promptshelf.server.services.storage.memory_kv_store import InMemoryKeyValueStore
from promptshelf.server.services.storage.saved_prompt_store import SavedPromptIdStore
from promptshelf_commons.config_schema import (
    StorageBackend,
    StorageConfig,
    StorageConfigLocal,
    StorageConfigMemory,
)


def default_storage_config() -> StorageConfig:
    """Storage configuration selected by PROMPTSHELF_STORAGE."""
    if PROMPTSHELF_STORAGE == StorageBackend.MEMORY:
        return StorageConfigMemory()
    return StorageConfigLocal(dir_path=LOCAL_STORAGE_PATH)


def create_kv_store(
    profile_id: str, storage_config: Optional[StorageConfig] = None
) -> BaseKeyValueStore:
    storage_config = storage_config or default_storage_config()
    if isinstance(storage_config, StorageConfigMemory):
        return InMemoryKeyValueStore(profile_id=profile_id)
    return LocalJsonKeyValueStore(profile_id=profile_id, config=storage_config)


class RequestContext:
    """Everything a dashboard request of one browser profile needs."""

    def __init__(
        self,
        profile_id: str,
        gateway: Optional[PromptGateway] = None,
        storage_config: Optional[StorageConfig] = None,
        kv_store: Optional[BaseKeyValueStore] = None,
    ):
        self.profile_id = str(profile_id)
        self.gateway = gateway or PromptGateway()
        self.kv_store = kv_store or create_kv_store(self.profile_id, storage_config)
        self.saved_prompts = SavedPromptIdStore(self.kv_store)
        self.api_keys = ApiKeyStore(self.kv_store)

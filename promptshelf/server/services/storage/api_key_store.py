import logging

from pydantic import ValidationError

from promptshelf.server.services.storage.json_list_store import JsonListStore
from promptshelf_commons.api_schema.dashboard_schema import ApiKey

logger = logging.getLogger(__name__)

SAVED_API_KEYS_KEY = "saved_api_keys"


class ApiKeyStore(JsonListStore):
    """
    Placeholder api keys of a browser profile, unique by name
    """

    storage_key = SAVED_API_KEYS_KEY

    def list(self) -> list[ApiKey]:
        api_keys = []
        for item in self._read_list():
            try:
                api_keys.append(ApiKey.model_validate(item))
            except ValidationError as e:
                logger.error("Skipping malformed api key record: %s", e)
        return api_keys

    def add(self, api_key: ApiKey) -> bool:
        """
        Store a new api key unless one with the same name exists.

        Args:
            api_key (ApiKey): The key to store

        Returns:
            bool: True if the key was stored
        """
        existing_keys = self.list()
        if any(existing.name == api_key.name for existing in existing_keys):
            logger.warning("API key with name %s already exists", api_key.name)
            return False
        existing_keys.append(api_key)
        return self._write_list(
            [existing.model_dump(by_alias=True) for existing in existing_keys]
        )

    def remove(self, api_key_id: str) -> None:
        remaining_keys = [
            existing.model_dump(by_alias=True)
            for existing in self.list()
            if existing.id != api_key_id
        ]
        self._write_list(remaining_keys)

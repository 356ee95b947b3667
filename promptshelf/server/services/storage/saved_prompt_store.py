import logging

from promptshelf.server.services.storage.json_list_store import JsonListStore

logger = logging.getLogger(__name__)

SAVED_PROMPT_IDS_KEY = "saved_prompt_ids"


class SavedPromptIdStore(JsonListStore):
    """
    Ids of the prompts a browser profile created or chose to keep

    This list is the only notion of prompt ownership: the hosted service does
    not know who created which prompt. Ids are unique and keep insertion order.
    """

    storage_key = SAVED_PROMPT_IDS_KEY

    def list(self) -> list[str]:
        ids: list[str] = []
        for item in self._read_list():
            # tolerate duplicates or junk written by older versions
            if isinstance(item, str) and item not in ids:
                ids.append(item)
        return ids

    def add(self, prompt_id: str) -> None:
        existing_ids = self.list()
        if prompt_id in existing_ids:
            return
        existing_ids.append(prompt_id)
        if self._write_list(existing_ids):
            logger.info("Saved prompt id %s", prompt_id)

    def remove(self, prompt_id: str) -> None:
        remaining_ids = [
            existing_id for existing_id in self.list() if existing_id != prompt_id
        ]
        self._write_list(remaining_ids)

    def __contains__(self, prompt_id: str) -> bool:
        return prompt_id in self.list()

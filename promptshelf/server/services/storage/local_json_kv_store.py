import json
import os
import logging
import re
import threading
import promptshelf.data as data
from typing import Optional

from promptshelf.server.services.storage.kv_store_base import BaseKeyValueStore
from promptshelf.server.services.storage.error import StorageError
from promptshelf_commons.config_schema import StorageConfigLocal
from promptshelf.server import LOCAL_STORAGE_PATH


logger = logging.getLogger(__name__)

_PROFILE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class LocalJsonKeyValueStore(BaseKeyValueStore):
    """
    Key-value store that keeps one json file per browser profile

    Writes are read-modify-write under a process-wide lock. Two processes
    writing the same profile race and the last writer wins.
    """

    # Class-level lock for atomic operations across all instances
    _lock = threading.Lock()

    def __init__(
        self,
        profile_id: str,
        base_dir: Optional[str] = None,
        config: Optional[StorageConfigLocal] = None,
    ):
        if not _PROFILE_ID_PATTERN.match(profile_id or ""):
            err_msg = f"Local Json Storage received an invalid profile id {profile_id!r}"
            logger.error(err_msg)
            raise StorageError(err_msg)

        if config:
            base_dir = config.dir_path
            if not base_dir:
                err_msg = "Local Json Storage received empty directory"
                logger.error(err_msg)
                raise StorageError(err_msg)
            if not os.path.isabs(base_dir):
                err_msg = f"Local Json Storage received a non absolute path {base_dir}"
                logger.error(err_msg)
                raise StorageError(err_msg)

        if base_dir is None:
            base_dir = LOCAL_STORAGE_PATH or os.path.dirname(data.__file__)
        try:
            os.makedirs(base_dir, exist_ok=True)
        except OSError:
            err_msg = f"Local Json Storage cannot create directory at {base_dir}"
            logger.error(err_msg)
            raise StorageError(err_msg)
        if not os.path.isdir(base_dir):
            err_msg = f"Local Json Storage specified an invalid directory at {base_dir}"
            logger.error(err_msg)
            raise StorageError(err_msg)

        super().__init__(profile_id)
        self.base_dir = base_dir
        self.file_path = os.path.join(base_dir, f"local_storage_{profile_id}.json")
        logger.info(
            "Local Json Storage for profile %s uses file %s", profile_id, self.file_path
        )

    def _load(self) -> dict:
        if not os.path.exists(self.file_path):
            return {}
        try:
            with open(self.file_path, encoding="utf-8") as file:
                values = json.load(file)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {self.file_path}: {e}")
        if not isinstance(values, dict):
            raise StorageError(f"Unexpected content in {self.file_path}")
        return values

    def _save(self, values: dict) -> None:
        try:
            with open(self.file_path, "w", encoding="utf-8") as file:
                json.dump(values, file)
        except OSError as e:
            raise StorageError(f"Cannot write {self.file_path}: {e}")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._load().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError("Stored value is not a string", key=key)
        return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                values = self._load()
            except StorageError as e:
                logger.warning("Resetting unreadable profile storage: %s", e)
                values = {}
            values[key] = value
            self._save(values)

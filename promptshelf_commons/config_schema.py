from enum import Enum
from pydantic import BaseModel


class StorageBackend(str, Enum):
    """Backend used for the per-profile "local storage" of the dashboard.

    - LOCAL: one json file per browser profile on disk
    - MEMORY: process memory, lost on restart
    """

    LOCAL = "local"
    MEMORY = "memory"


class StorageConfigLocal(BaseModel):
    dir_path: str


class StorageConfigMemory(BaseModel):
    pass


StorageConfig = StorageConfigLocal | StorageConfigMemory


class PaginationConfig(BaseModel):
    # page size of the /prompts listing
    page_size: int = 12
    # default limit of /api/prompts when the caller omits it
    api_default_limit: int = 20

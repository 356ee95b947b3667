import os
import promptshelf.data as data
import logging
import sys
from dotenv import load_dotenv

from promptshelf_commons.config_schema import PaginationConfig, StorageBackend

# Load environment variables from .env file
load_dotenv()

# Hosted prompt storage service

PROMPT_STORAGE_API_URL = os.environ.get("PROMPT_STORAGE_API_URL", "").strip()
# The hosted service accepts any key for now
PROMPT_STORAGE_API_KEY = os.environ.get("PROMPT_STORAGE_API_KEY", "empty").strip()
PROMPT_STORAGE_TIMEOUT_SECONDS = int(
    os.environ.get("PROMPT_STORAGE_TIMEOUT_SECONDS", "30")
)

# Browser profile storage (the dashboard's "local storage")

LOCAL_STORAGE_PATH = os.environ.get(
    "LOCAL_STORAGE_PATH", os.path.dirname(data.__file__)
).strip() or os.path.dirname(data.__file__)

_storage_backend = os.environ.get("PROMPTSHELF_STORAGE", "local").strip().lower()
PROMPTSHELF_STORAGE = (
    StorageBackend.MEMORY
    if _storage_backend == StorageBackend.MEMORY.value
    else StorageBackend.LOCAL
)

PROFILE_COOKIE_NAME = "promptshelf_profile"

# Pagination

PAGINATION = PaginationConfig(
    page_size=int(os.environ.get("PROMPTS_PAGE_SIZE", "12")),
    api_default_limit=int(os.environ.get("API_PROMPTS_DEFAULT_LIMIT", "20")),
)

# Logging

DEBUG_LOG_TO_CONSOLE = os.environ.get("DEBUG_LOG_TO_CONSOLE", "").strip().lower()
root_logger = logging.getLogger()

if DEBUG_LOG_TO_CONSOLE and DEBUG_LOG_TO_CONSOLE not in ("false", "0", "no"):
    # Enable verbose logging to console
    if not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)
else:
    # Default to WARNING level when DEBUG_LOG_TO_CONSOLE is not set or is false
    root_logger.setLevel(logging.WARNING)

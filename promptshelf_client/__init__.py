from importlib.metadata import version, PackageNotFoundError

__app_name__ = "promptshelf"

try:
    __version__ = version(__app_name__)
except PackageNotFoundError:
    # Package is not installed (e.g., running from source without installing)
    __version__ = "0.0.0-dev"


from .client import PromptStorageClient
from .errors import (
    PromptStorageError,
    APIConnectionError,
    APIStatusError,
    PromptNotFoundError,
)
from promptshelf_commons.api_schema.prompt_schema import (
    Prompt,
    PromptMetadata,
    PromptListParams,
    PromptRetrieveParams,
    PromptContentParams,
    PromptCreateParams,
    PromptUpdateMetadataParams,
    PromptUpdateParams,
)


__all__ = [
    "PromptStorageClient",
    "PromptStorageError",
    "APIConnectionError",
    "APIStatusError",
    "PromptNotFoundError",
    "Prompt",
    "PromptMetadata",
    "PromptListParams",
    "PromptRetrieveParams",
    "PromptContentParams",
    "PromptCreateParams",
    "PromptUpdateMetadataParams",
    "PromptUpdateParams",
]

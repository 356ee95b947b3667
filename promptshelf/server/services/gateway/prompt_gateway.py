"""
Async access to the hosted prompt storage service for the web site
"""

import asyncio
import logging
from typing import Optional

from promptshelf_client import PromptStorageClient
from promptshelf_commons.api_schema.prompt_schema import (
    Prompt,
    PromptCreateParams,
    PromptListParams,
    PromptRetrieveParams,
    PromptUpdateMetadataParams,
)
from promptshelf.server import (
    PROMPT_STORAGE_API_KEY,
    PROMPT_STORAGE_API_URL,
    PROMPT_STORAGE_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class PromptGateway:
    """Thin async facade over PromptStorageClient.

    Errors raised by the client (PromptStorageError and subclasses) propagate
    unchanged; nothing here retries.
    """

    def __init__(self, client: Optional[PromptStorageClient] = None):
        self.client = client or PromptStorageClient(
            api_key=PROMPT_STORAGE_API_KEY,
            url_endpoint=PROMPT_STORAGE_API_URL,
            timeout=PROMPT_STORAGE_TIMEOUT_SECONDS,
        )

    async def list_prompts(
        self, offset: int = 0, limit: int = 20, category: Optional[str] = None
    ) -> list[Prompt]:
        """List one page of prompts.

        Args:
            offset (int): Number of prompts to skip
            limit (int): Page size
            category (Optional[str]): Category filter

        Returns:
            list[Prompt]: At most `limit` prompts, empty once the data is exhausted
        """
        params = PromptListParams(offset=offset, limit=limit, category=category or None)
        logger.info("Fetching prompts with params: %s", params.model_dump())
        prompts = await self.client.alist_prompts(params)
        if prompts:
            logger.info(
                "Retrieved %d prompts, first prompt: %s...",
                len(prompts),
                prompts[0].content[:50],
            )
        else:
            logger.info("Retrieved 0 prompts")
        return prompts

    async def retrieve(self, prompt_id: str, metadata: bool = True) -> Prompt:
        """Retrieve a prompt, raising PromptNotFoundError for unknown ids."""
        return await self.client.aretrieve_prompt(
            prompt_id, PromptRetrieveParams(metadata=metadata)
        )

    async def retrieve_many(self, prompt_ids: list[str]) -> list[Prompt]:
        """Retrieve several prompts concurrently.

        All or nothing: if any retrieval fails, the first failure is raised and
        no partial list is returned.

        Args:
            prompt_ids (list[str]): Ids to resolve

        Returns:
            list[Prompt]: Prompts in the order of prompt_ids
        """
        if not prompt_ids:
            return []
        prompts = await asyncio.gather(
            *(self.retrieve(prompt_id) for prompt_id in prompt_ids)
        )
        logger.info("Successfully fetched %d prompts", len(prompts))
        return list(prompts)

    async def create(self, params: PromptCreateParams) -> str:
        """Create a prompt and return the id assigned by the service."""
        prompt_id = await self.client.acreate_prompt(params)
        logger.info("Created prompt %s", prompt_id)
        return prompt_id

    async def update_metadata(self, params: PromptUpdateMetadataParams) -> None:
        logger.info("Updating metadata for prompt %s", params.id)
        await self.client.aupdate_prompt_metadata(params)

    async def delete(self, prompt_id: str) -> None:
        await self.client.adelete_prompt(prompt_id)

    async def list_categories(self) -> list[str]:
        return await self.client.alist_categories()

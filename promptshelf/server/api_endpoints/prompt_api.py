"""
Read prompts from the hosted service for the public pages and the json api
"""

import logging
from typing import Optional

from promptshelf_client.errors import PromptStorageError
from promptshelf_commons.api_schema.prompt_schema import Prompt
from promptshelf.server.services.gateway.prompt_gateway import PromptGateway

logger = logging.getLogger(__name__)


class InvalidQueryError(ValueError):
    """A query parameter could not be parsed."""


def parse_non_negative_int(raw: Optional[str], default: int, name: str) -> int:
    """Parse an optional integer query parameter.

    Args:
        raw (Optional[str]): Raw query value, None or empty when absent
        default (int): Value used when the parameter is absent
        name (str): Parameter name for the error message

    Returns:
        int: Parsed value

    Raises:
        InvalidQueryError: If the value is not a non-negative integer
    """
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise InvalidQueryError(f"{name} must be an integer")
    if value < 0:
        raise InvalidQueryError(f"{name} must not be negative")
    return value


def parse_prompt_ids(ids_param: str) -> list[str]:
    """Split a comma separated id list, dropping blanks."""
    return [prompt_id.strip() for prompt_id in ids_param.split(",") if prompt_id.strip()]


# ==============================
# List prompts
# ==============================


async def list_prompts(
    gateway: PromptGateway,
    offset: int,
    limit: int,
    category: Optional[str] = None,
) -> list[Prompt]:
    """List one page of prompts

    Args:
        gateway (PromptGateway): Gateway to the hosted service
        offset (int): Number of prompts to skip
        limit (int): Page size
        category (Optional[str]): Category filter, ignored when empty

    Returns:
        list[Prompt]: The page, empty once the data is exhausted
    """
    return await gateway.list_prompts(
        offset=offset, limit=limit, category=category or None
    )


async def get_prompts_by_ids(
    gateway: PromptGateway, prompt_ids: list[str]
) -> list[Prompt]:
    """Resolve a list of ids, failing as a whole if any id fails

    Args:
        gateway (PromptGateway): Gateway to the hosted service
        prompt_ids (list[str]): Ids to resolve

    Returns:
        list[Prompt]: Prompts in the order of prompt_ids
    """
    logger.info("Fetching prompts by ids: %s", prompt_ids)
    return await gateway.retrieve_many(prompt_ids)


async def get_prompt(gateway: PromptGateway, prompt_id: str) -> Prompt:
    """Get one prompt with its metadata, raising PromptNotFoundError if unknown"""
    return await gateway.retrieve(prompt_id, metadata=True)


async def list_categories(gateway: PromptGateway) -> list[str]:
    """Categories for the listing filter; an unreachable endpoint yields none"""
    try:
        return await gateway.list_categories()
    except PromptStorageError as e:
        logger.warning("Failed to load prompt categories: %s", e)
        return []

"""
Create, edit and forget prompts and placeholder api keys of one browser profile
"""

import logging
from typing import Optional

from promptshelf_client.errors import PromptStorageError
from promptshelf_commons.api_schema.dashboard_schema import (
    ApiKey,
    CreatePromptForm,
    CreatePromptResponse,
    EditPromptForm,
    GenerateApiKeyForm,
    GenerateApiKeyResponse,
)
from promptshelf_commons.api_schema.prompt_schema import Prompt
from promptshelf.server.api_endpoints.precondition_checks import (
    build_create_params,
    build_update_params,
    validate_create_prompt_form,
    validate_edit_prompt_form,
    validate_generate_api_key_form,
)
from promptshelf.server.api_endpoints.request_context import RequestContext
from promptshelf.server.services.api_keys.key_generator import (
    generate_placeholder_api_key,
)

logger = logging.getLogger(__name__)

# ==============================
# Saved prompts
# ==============================


async def get_saved_prompts(
    context: RequestContext,
) -> tuple[list[Prompt], Optional[str]]:
    """Resolve the saved prompt ids of a profile

    Args:
        context (RequestContext): The profile's context

    Returns:
        tuple[list[Prompt], Optional[str]]: The prompts, or an empty list and an error message if any lookup failed
    """
    prompt_ids = context.saved_prompts.list()
    try:
        return await context.gateway.retrieve_many(prompt_ids), None
    except PromptStorageError as e:
        logger.error("Error fetching saved prompts %s: %s", prompt_ids, e)
        return [], "Failed to fetch prompts"


def forget_saved_prompt(context: RequestContext, prompt_id: str) -> None:
    """Remove a prompt from "My Prompts"; the hosted record is left untouched"""
    context.saved_prompts.remove(prompt_id)


async def create_prompt(
    context: RequestContext, form: CreatePromptForm
) -> CreatePromptResponse:
    """Validate the form, create the prompt and remember its id

    Args:
        context (RequestContext): The profile's context
        form (CreatePromptForm): The submitted form

    Returns:
        CreatePromptResponse: The new prompt id, or field errors when validation failed

    Raises:
        PromptStorageError: If the hosted service rejected the creation
    """
    is_valid, errors = validate_create_prompt_form(form)
    if not is_valid:
        logger.info("Create prompt form rejected: %s", errors)
        return CreatePromptResponse(success=False, errors=errors)

    prompt_id = await context.gateway.create(build_create_params(form))
    context.saved_prompts.add(prompt_id)
    return CreatePromptResponse(success=True, prompt_id=prompt_id)


async def update_prompt(
    context: RequestContext, prompt_id: str, form: EditPromptForm
) -> CreatePromptResponse:
    """Validate the edit form and update the prompt metadata

    Raises:
        PromptStorageError: If the hosted service rejected the update
    """
    is_valid, errors = validate_edit_prompt_form(form)
    if not is_valid:
        return CreatePromptResponse(success=False, prompt_id=prompt_id, errors=errors)

    await context.gateway.update_metadata(build_update_params(prompt_id, form))
    return CreatePromptResponse(success=True, prompt_id=prompt_id)


# ==============================
# Api keys
# ==============================


def list_api_keys(context: RequestContext) -> list[ApiKey]:
    return context.api_keys.list()


def generate_api_key(
    context: RequestContext, form: GenerateApiKeyForm
) -> GenerateApiKeyResponse:
    """Generate a placeholder api key and store it in the profile

    Args:
        context (RequestContext): The profile's context
        form (GenerateApiKeyForm): The submitted form

    Returns:
        GenerateApiKeyResponse: The stored key, or a message when nothing was stored
    """
    is_valid, msg = validate_generate_api_key_form(form)
    if not is_valid:
        return GenerateApiKeyResponse(success=False, msg=msg)

    api_key = generate_placeholder_api_key(form.name)
    if any(existing.name == api_key.name for existing in context.api_keys.list()):
        return GenerateApiKeyResponse(
            success=False, msg=f"API key named {api_key.name} already exists"
        )
    if not context.api_keys.add(api_key):
        return GenerateApiKeyResponse(success=False, msg="Failed to save API key")
    return GenerateApiKeyResponse(success=True, api_key=api_key)


def delete_api_key(context: RequestContext, api_key_id: str) -> None:
    context.api_keys.remove(api_key_id)

import re

from promptshelf_commons.api_schema.dashboard_schema import (
    MAX_PROMPT_TAGS,
    PROMPT_CATEGORIES,
    CreatePromptForm,
    EditPromptForm,
    GenerateApiKeyForm,
)
from promptshelf_commons.api_schema.prompt_schema import (
    PromptCreateParams,
    PromptUpdateMetadataParams,
)

TAG_PATTERN = re.compile(r"^[a-zA-Z0-9\s-]+$")

FieldErrors = dict[str, list[str]]


def split_tags(raw_tags: list[str]) -> list[str]:
    """
    Normalize tag input: each submitted value may hold several comma separated tags

    Args:
        raw_tags (list[str]): Values of the repeated `tags` form field

    Returns:
        list[str]: Stripped, non-empty tags in submission order
    """
    tags = []
    for raw_tag in raw_tags:
        for tag in raw_tag.split(","):
            tag = tag.strip()
            if tag:
                tags.append(tag)
    return tags


def _validate_metadata_fields(
    title: str, description: str, category: str, tags: list[str]
) -> FieldErrors:
    errors: FieldErrors = {}
    if not title.strip():
        errors.setdefault("title", []).append("Title is required")
    if not description.strip():
        errors.setdefault("description", []).append("Description is required")
    if not category:
        errors.setdefault("category", []).append("Category is required")
    elif category not in PROMPT_CATEGORIES:
        errors.setdefault("category", []).append(
            f"Category must be one of: {', '.join(PROMPT_CATEGORIES)}"
        )
    if len(tags) > MAX_PROMPT_TAGS:
        errors.setdefault("tags", []).append(
            f"Maximum of {MAX_PROMPT_TAGS} tags allowed"
        )
    if any(not TAG_PATTERN.match(tag) for tag in tags):
        errors.setdefault("tags", []).append(
            "Tags can only contain letters, numbers, spaces, and hyphens"
        )
    return errors


def validate_create_prompt_form(form: CreatePromptForm) -> tuple[bool, FieldErrors]:
    """
    Validate the create prompt form before anything is sent to the service

    Args:
        form (CreatePromptForm): The submitted form

    Returns:
        tuple[bool, FieldErrors]: Whether the form is valid and the messages per field
    """
    errors = _validate_metadata_fields(
        form.title, form.description, form.category, form.tags
    )
    if not form.content.strip():
        errors.setdefault("content", []).append("Prompt content is required")
    return len(errors) == 0, errors


def validate_edit_prompt_form(form: EditPromptForm) -> tuple[bool, FieldErrors]:
    """
    Validate the edit metadata form

    Args:
        form (EditPromptForm): The submitted form

    Returns:
        tuple[bool, FieldErrors]: Whether the form is valid and the messages per field
    """
    errors = _validate_metadata_fields(
        form.title, form.description, form.category, form.tags
    )
    return len(errors) == 0, errors


def validate_generate_api_key_form(form: GenerateApiKeyForm) -> tuple[bool, str]:
    if not form.name.strip():
        return False, "Please enter a name for the API key"
    return True, ""


def build_create_params(form: CreatePromptForm) -> PromptCreateParams:
    """Map a validated create form onto the service's create parameters."""
    return PromptCreateParams(
        content=form.content,
        name=form.title.strip(),
        description=form.description.strip(),
        category=form.category,
        branched=False,
        parent=None,
        tags=form.tags if len(form.tags) > 0 else None,
    )


def build_update_params(prompt_id: str, form: EditPromptForm) -> PromptUpdateMetadataParams:
    return PromptUpdateMetadataParams(
        id=prompt_id,
        name=form.title.strip(),
        description=form.description.strip(),
        category=form.category,
        tags=form.tags,
    )

import asyncio

import pytest

from promptshelf_client.errors import APIStatusError, PromptNotFoundError
from promptshelf_commons.api_schema.dashboard_schema import (
    CreatePromptForm,
    EditPromptForm,
    GenerateApiKeyForm,
)
from promptshelf.server.api_endpoints import dashboard_api
from promptshelf.server.api_endpoints.request_context import RequestContext
from promptshelf.server.services.storage.memory_kv_store import InMemoryKeyValueStore
from promptshelf.tests.factories import make_prompt


@pytest.fixture
def context(mock_gateway):
    return RequestContext(
        profile_id="test", gateway=mock_gateway, kv_store=InMemoryKeyValueStore()
    )


def _create_form(**overrides) -> CreatePromptForm:
    values = {
        "title": "Title",
        "description": "Description",
        "category": "python",
        "content": "Prompt body",
    }
    values.update(overrides)
    return CreatePromptForm(**values)


def test_get_saved_prompts_resolves_saved_ids(context, mock_gateway):
    context.saved_prompts.add("a")
    context.saved_prompts.add("b")
    mock_gateway.retrieve_many.return_value = [make_prompt("a"), make_prompt("b")]

    prompts, error = asyncio.run(dashboard_api.get_saved_prompts(context))

    mock_gateway.retrieve_many.assert_awaited_once_with(["a", "b"])
    assert [prompt.id for prompt in prompts] == ["a", "b"]
    assert error is None


def test_get_saved_prompts_reports_batch_failure(context, mock_gateway):
    context.saved_prompts.add("gone")
    mock_gateway.retrieve_many.side_effect = PromptNotFoundError("gone")

    prompts, error = asyncio.run(dashboard_api.get_saved_prompts(context))

    assert prompts == []
    assert error == "Failed to fetch prompts"


def test_create_prompt_saves_new_id(context, mock_gateway):
    mock_gateway.create.return_value = "new-id"

    response = asyncio.run(dashboard_api.create_prompt(context, _create_form()))

    assert response.success is True
    assert response.prompt_id == "new-id"
    assert context.saved_prompts.list() == ["new-id"]
    params = mock_gateway.create.await_args.args[0]
    assert params.name == "Title"
    assert params.branched is False


def test_invalid_create_form_makes_no_request(context, mock_gateway):
    response = asyncio.run(
        dashboard_api.create_prompt(context, _create_form(content=""))
    )

    assert response.success is False
    assert "content" in response.errors
    mock_gateway.create.assert_not_awaited()
    assert context.saved_prompts.list() == []


def test_failed_create_saves_nothing(context, mock_gateway):
    mock_gateway.create.side_effect = APIStatusError(400, "Bad Request")

    with pytest.raises(APIStatusError):
        asyncio.run(dashboard_api.create_prompt(context, _create_form()))
    assert context.saved_prompts.list() == []


def test_update_prompt(context, mock_gateway):
    form = EditPromptForm(title="New", description="d", category="go", tags=["x"])

    response = asyncio.run(dashboard_api.update_prompt(context, "abc", form))

    assert response.success is True
    params = mock_gateway.update_metadata.await_args.args[0]
    assert params.id == "abc"
    assert params.name == "New"


def test_forget_saved_prompt(context):
    context.saved_prompts.add("a")
    context.saved_prompts.add("b")

    dashboard_api.forget_saved_prompt(context, "a")

    assert context.saved_prompts.list() == ["b"]


def test_generate_api_key(context):
    response = dashboard_api.generate_api_key(context, GenerateApiKeyForm(name="prod"))

    assert response.success is True
    assert response.api_key.name == "prod"
    assert [api_key.name for api_key in dashboard_api.list_api_keys(context)] == ["prod"]


def test_generate_api_key_twice_with_same_name(context):
    dashboard_api.generate_api_key(context, GenerateApiKeyForm(name="prod"))

    response = dashboard_api.generate_api_key(context, GenerateApiKeyForm(name="prod"))

    assert response.success is False
    assert response.msg == "API key named prod already exists"
    assert len(dashboard_api.list_api_keys(context)) == 1


def test_generate_api_key_requires_name(context):
    response = dashboard_api.generate_api_key(context, GenerateApiKeyForm(name=""))

    assert response.success is False
    assert response.msg == "Please enter a name for the API key"
    assert dashboard_api.list_api_keys(context) == []


def test_delete_api_key(context):
    created = dashboard_api.generate_api_key(
        context, GenerateApiKeyForm(name="prod")
    ).api_key

    dashboard_api.delete_api_key(context, created.id)

    assert dashboard_api.list_api_keys(context) == []

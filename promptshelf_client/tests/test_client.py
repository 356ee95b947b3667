"""Tests for PromptStorageClient request building and error mapping."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from promptshelf_client.client import DEFAULT_BACKEND_URL, PromptStorageClient
from promptshelf_client.errors import (
    APIConnectionError,
    APIStatusError,
    PromptNotFoundError,
    PromptStorageError,
)
from promptshelf_commons.api_schema.prompt_schema import (
    PromptCreateParams,
    PromptUpdateMetadataParams,
    PromptUpdateParams,
)

PROMPT_PAYLOAD = {
    "id": "abc",
    "content": "You are a helpful assistant",
    "version": 1,
    "parent": "abc",
    "branched": False,
    "archived": False,
    "created_at": 1700000000,
    "metadata": {
        "name": "helper",
        "description": "a helper",
        "category": "python",
        "tags": ["assistant"],
    },
}


def _response(status_code=200, text="", content_type="application/json", reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.text = text
    response.headers = {"content-type": content_type}
    return response


@pytest.fixture
def mock_session():
    with patch("promptshelf_client.client.requests.Session") as mock_session_class:
        session = MagicMock()
        mock_session_class.return_value = session
        yield session


def test_base_url_resolution(monkeypatch):
    monkeypatch.delenv("PROMPT_STORAGE_API_URL", raising=False)
    assert PromptStorageClient().base_url == DEFAULT_BACKEND_URL

    monkeypatch.setenv("PROMPT_STORAGE_API_URL", "http://localhost:8080")
    assert PromptStorageClient().base_url == "http://localhost:8080"
    assert (
        PromptStorageClient(url_endpoint="http://example.test").base_url
        == "http://example.test"
    )


def test_auth_header_only_with_api_key():
    assert PromptStorageClient(api_key="sk_1")._get_auth_headers() == {
        "Authorization": "Bearer sk_1"
    }
    assert PromptStorageClient()._get_auth_headers() == {}


def test_list_prompts_sends_pagination_query(mock_session):
    mock_session.request.return_value = _response(text=json.dumps([PROMPT_PAYLOAD]))
    client = PromptStorageClient(api_key="k", url_endpoint="http://svc")

    prompts = client.list_prompts(offset=12, limit=12, category="python")

    args, kwargs = mock_session.request.call_args
    assert args == ("GET", "http://svc/prompts")
    assert kwargs["params"] == {"offset": 12, "limit": 12, "category": "python"}
    assert kwargs["headers"] == {"Authorization": "Bearer k"}
    assert len(prompts) == 1
    assert prompts[0].display_name == "helper"


def test_list_prompts_omits_empty_category(mock_session):
    mock_session.request.return_value = _response(text="[]")
    client = PromptStorageClient(url_endpoint="http://svc")

    assert client.list_prompts() == []
    _, kwargs = mock_session.request.call_args
    assert kwargs["params"] == {"offset": 0, "limit": 20}


def test_retrieve_prompt_quotes_id_and_sends_metadata_flag(mock_session):
    mock_session.request.return_value = _response(text=json.dumps(PROMPT_PAYLOAD))
    client = PromptStorageClient(url_endpoint="http://svc")

    prompt = client.retrieve_prompt("a/b", metadata=False)

    args, kwargs = mock_session.request.call_args
    assert args == ("GET", "http://svc/prompt/a%2Fb")
    assert kwargs["params"] == {"metadata": "false"}
    assert prompt.id == "abc"
    assert prompt.has_parent is False


def test_retrieve_prompt_content_returns_text(mock_session):
    mock_session.request.return_value = _response(
        text="raw content", content_type="text/plain"
    )
    client = PromptStorageClient(url_endpoint="http://svc")

    assert client.retrieve_prompt_content("abc", latest=True) == "raw content"
    _, kwargs = mock_session.request.call_args
    assert kwargs["params"] == {"latest": "true"}


def test_404_maps_to_prompt_not_found(mock_session):
    mock_session.request.return_value = _response(
        status_code=404, text="Prompt not found", reason="Not Found"
    )
    client = PromptStorageClient(url_endpoint="http://svc")

    with pytest.raises(PromptNotFoundError) as exc_info:
        client.retrieve_prompt("missing")
    assert exc_info.value.prompt_id == "missing"
    assert exc_info.value.status_code == 404


def test_other_status_maps_to_api_status_error(mock_session):
    mock_session.request.return_value = _response(
        status_code=500, text="boom", reason="Internal Server Error"
    )
    client = PromptStorageClient(url_endpoint="http://svc")

    with pytest.raises(APIStatusError) as exc_info:
        client.list_prompts()
    assert not isinstance(exc_info.value, PromptNotFoundError)
    assert exc_info.value.status_code == 500
    assert exc_info.value.body == "boom"


def test_transport_failure_maps_to_connection_error(mock_session):
    mock_session.request.side_effect = requests.ConnectionError("refused")
    client = PromptStorageClient(url_endpoint="http://svc")

    with pytest.raises(APIConnectionError):
        client.list_prompts()
    with pytest.raises(PromptStorageError):
        client.list_prompts()


def test_create_prompt_posts_without_none_fields(mock_session):
    mock_session.request.return_value = _response(
        status_code=201, text="new-id\n", content_type="text/plain"
    )
    client = PromptStorageClient(url_endpoint="http://svc")

    prompt_id = client.create_prompt(
        PromptCreateParams(content="hi", name="rust", tags=["rust"])
    )

    args, kwargs = mock_session.request.call_args
    assert args == ("POST", "http://svc/prompt")
    assert kwargs["json"] == {"content": "hi", "name": "rust", "tags": ["rust"]}
    assert prompt_id == "new-id"


def test_update_prompt_metadata_puts_metadata(mock_session):
    mock_session.request.return_value = _response(
        text="abc", content_type="text/plain"
    )
    client = PromptStorageClient(url_endpoint="http://svc")

    result = client.update_prompt_metadata(
        PromptUpdateMetadataParams(id="abc", name="renamed", tags=["x"])
    )

    args, kwargs = mock_session.request.call_args
    assert args == ("PUT", "http://svc/prompt/metadata")
    assert kwargs["json"]["id"] == "abc"
    assert kwargs["json"]["name"] == "renamed"
    assert result == "abc"


def test_update_prompt_puts_new_content(mock_session):
    mock_session.request.return_value = _response(
        text="abc", content_type="text/plain"
    )
    client = PromptStorageClient(url_endpoint="http://svc")

    result = client.update_prompt(PromptUpdateParams(id="abc", content="v2"))

    args, kwargs = mock_session.request.call_args
    assert args == ("PUT", "http://svc/prompt")
    assert kwargs["json"] == {"id": "abc", "content": "v2"}
    assert result == "abc"


def test_update_prompt_unknown_id(mock_session):
    mock_session.request.return_value = _response(
        status_code=404, text="Prompt not found", reason="Not Found"
    )
    client = PromptStorageClient(url_endpoint="http://svc")

    with pytest.raises(PromptNotFoundError):
        client.update_prompt(id="gone", content="v2")


def test_delete_prompt(mock_session):
    mock_session.request.return_value = _response(text="", content_type="text/plain")
    client = PromptStorageClient(url_endpoint="http://svc")

    client.delete_prompt("abc")

    args, _ = mock_session.request.call_args
    assert args == ("DELETE", "http://svc/prompt/abc")


def test_error_str_includes_type():
    assert str(APIConnectionError("down")) == "APIConnectionError: down"

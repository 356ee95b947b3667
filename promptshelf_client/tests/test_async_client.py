"""Tests for the aiohttp side of PromptStorageClient against a local service."""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from promptshelf_client.client import PromptStorageClient
from promptshelf_client.errors import (
    APIConnectionError,
    APIStatusError,
    PromptNotFoundError,
)
from promptshelf_commons.api_schema.prompt_schema import (
    PromptCreateParams,
    PromptUpdateMetadataParams,
    PromptUpdateParams,
)


def _payload(prompt_id: str) -> dict:
    return {
        "id": prompt_id,
        "content": "You are a helpful assistant",
        "version": 1,
        "parent": prompt_id,
        "branched": False,
        "archived": False,
        "created_at": 1700000000,
        "metadata": {
            "name": "helper",
            "description": "a helper",
            "category": "rust",
            "tags": ["assistant"],
        },
    }


def _build_app(calls: list, known_ids=("a",), fail_listing=False) -> web.Application:
    async def list_prompts(request):
        calls.append(("GET /prompts", dict(request.query), request.headers.get("Authorization")))
        if fail_listing:
            return web.Response(status=500, text="boom")
        return web.json_response([_payload("a")])

    async def list_categories(request):
        calls.append(("GET /prompt/categories", None, None))
        return web.json_response(["python", "rust"])

    async def retrieve(request):
        prompt_id = request.match_info["id"]
        calls.append(("GET /prompt", dict(request.query), prompt_id))
        if prompt_id not in known_ids:
            return web.Response(status=404, text="Prompt not found")
        return web.json_response(_payload(prompt_id))

    async def delete(request):
        prompt_id = request.match_info["id"]
        calls.append(("DELETE /prompt", None, prompt_id))
        if prompt_id not in known_ids:
            return web.Response(status=404, text="Prompt not found")
        return web.Response(text="Deleted")

    async def create(request):
        calls.append(("POST /prompt", await request.json(), None))
        return web.Response(status=201, text="newid")

    async def update(request):
        body = await request.json()
        calls.append(("PUT /prompt", body, None))
        if body["id"] not in known_ids:
            return web.Response(status=404, text="Prompt not found")
        return web.Response(text=body["id"])

    async def update_metadata(request):
        body = await request.json()
        calls.append(("PUT /prompt/metadata", body, None))
        return web.Response(text=body["id"])

    app = web.Application()
    app.router.add_get("/prompts", list_prompts)
    app.router.add_get("/prompt/categories", list_categories)
    app.router.add_put("/prompt/metadata", update_metadata)
    app.router.add_get("/prompt/{id}", retrieve)
    app.router.add_delete("/prompt/{id}", delete)
    app.router.add_post("/prompt", create)
    app.router.add_put("/prompt", update)
    return app


def _run_against(app: web.Application, scenario):
    """Start a local service, run the scenario with a client pointed at it, stop the service."""

    async def run():
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            client = PromptStorageClient(
                api_key="sk_test", url_endpoint=str(server.make_url("/"))
            )
            return await scenario(client)
        finally:
            await server.close()

    return asyncio.run(run())


def test_alist_prompts_sends_query_and_auth():
    calls = []

    async def scenario(client):
        return await client.alist_prompts(offset=3, limit=5, category="rust")

    prompts = _run_against(_build_app(calls), scenario)

    assert [prompt.id for prompt in prompts] == ["a"]
    assert calls == [
        (
            "GET /prompts",
            {"offset": "3", "limit": "5", "category": "rust"},
            "Bearer sk_test",
        )
    ]


def test_aretrieve_prompt_and_metadata_flag():
    calls = []

    async def scenario(client):
        return await client.aretrieve_prompt("a", metadata=False)

    prompt = _run_against(_build_app(calls), scenario)

    assert prompt.id == "a"
    assert calls == [("GET /prompt", {"metadata": "false"}, "a")]


def test_aretrieve_unknown_prompt_raises_not_found():
    async def scenario(client):
        with pytest.raises(PromptNotFoundError) as exc_info:
            await client.aretrieve_prompt("b")
        return exc_info.value

    error = _run_against(_build_app([]), scenario)

    assert error.prompt_id == "b"
    assert error.status_code == 404


def test_server_error_raises_status_error():
    async def scenario(client):
        with pytest.raises(APIStatusError) as exc_info:
            await client.alist_prompts()
        return exc_info.value

    error = _run_against(_build_app([], fail_listing=True), scenario)

    assert not isinstance(error, PromptNotFoundError)
    assert error.status_code == 500
    assert error.body == "boom"


def test_write_routes():
    calls = []

    async def scenario(client):
        new_id = await client.acreate_prompt(
            PromptCreateParams(content="hi", name="rust", tags=["rust"])
        )
        updated_id = await client.aupdate_prompt(
            PromptUpdateParams(id="a", content="v2")
        )
        renamed_id = await client.aupdate_prompt_metadata(
            PromptUpdateMetadataParams(id="a", name="renamed")
        )
        await client.adelete_prompt("a")
        return new_id, updated_id, renamed_id

    assert _run_against(_build_app(calls), scenario) == ("newid", "a", "a")
    assert [call[0] for call in calls] == [
        "POST /prompt",
        "PUT /prompt",
        "PUT /prompt/metadata",
        "DELETE /prompt",
    ]
    assert calls[0][1] == {"content": "hi", "name": "rust", "tags": ["rust"]}
    assert calls[1][1] == {"id": "a", "content": "v2"}


def test_adelete_unknown_prompt_raises_not_found():
    async def scenario(client):
        with pytest.raises(PromptNotFoundError):
            await client.adelete_prompt("b")

    _run_against(_build_app([]), scenario)


def test_alist_categories_is_cached():
    calls = []

    async def scenario(client):
        first = await client.alist_categories()
        second = await client.alist_categories()
        refreshed = await client.alist_categories(force_refresh=True)
        return first, second, refreshed

    first, second, refreshed = _run_against(_build_app(calls), scenario)

    assert first == second == refreshed == ["python", "rust"]
    assert len(calls) == 2


def test_unreachable_service_raises_connection_error():
    async def run():
        server = test_utils.TestServer(web.Application())
        await server.start_server()
        url = str(server.make_url("/"))
        await server.close()

        client = PromptStorageClient(url_endpoint=url, timeout=5)
        with pytest.raises(APIConnectionError):
            await client.alist_prompts()

    asyncio.run(run())

import asyncio
import json
import logging
import os
from typing import Any, Optional, TypeVar, Union
from urllib.parse import quote, urljoin

import aiohttp
import requests
from dotenv import load_dotenv

from promptshelf_commons.api_schema.prompt_schema import (
    Prompt,
    PromptContentParams,
    PromptCreateParams,
    PromptListParams,
    PromptRetrieveParams,
    PromptUpdateMetadataParams,
    PromptUpdateParams,
)
from .cache import InMemoryCache
from .errors import (
    APIConnectionError,
    APIStatusError,
    PromptNotFoundError,
)

# Load environment variables from .env file
load_dotenv()

DEFAULT_BACKEND_URL = "https://api.cruzluna.dev"

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _query_flag(value: bool) -> str:
    return "true" if value else "false"


class PromptStorageClient:
    """Client for the hosted prompt storage REST API."""

    def __init__(self, api_key: str = "", url_endpoint: str = "", timeout: int = 30):
        """Initialize the prompt storage client.

        Args:
            api_key (str): API key sent as a bearer token, if any
            url_endpoint (str): Base URL for the API. Falls back to PROMPT_STORAGE_API_URL, then the hosted service
            timeout (int): Default request timeout in seconds (default 30)
        """
        self.api_key = api_key
        self.base_url = (
            url_endpoint
            or os.environ.get("PROMPT_STORAGE_API_URL", "").strip()
            or DEFAULT_BACKEND_URL
        )
        self.timeout = timeout
        self.session = requests.Session()
        self._cache = InMemoryCache()

    def _get_auth_headers(self) -> dict:
        """Get authentication headers for API requests.

        Returns:
            dict: Headers with authorization, empty when no api key is set
        """
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    def _build_request(
        self,
        request: Optional[Union[T, dict]],
        model_class: type[T],
        **kwargs,
    ) -> T:
        """Build request object from request param or kwargs.

        Args:
            request: Optional request object or dict
            model_class: The request class to instantiate
            **kwargs: Field values to use if request is None

        Returns:
            An instance of model_class
        """
        if isinstance(request, dict):
            return model_class(**request)
        if request is not None:
            return request
        filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
        return model_class(**filtered_kwargs)

    def _url(self, endpoint: str) -> str:
        return urljoin(self.base_url.rstrip("/") + "/", endpoint.lstrip("/"))

    @staticmethod
    def _decode_body(content_type: str, text: str) -> Any:
        """Decode a response body.

        Create and update endpoints answer with the bare prompt id as text,
        everything else answers with JSON.
        """
        if "application/json" in (content_type or ""):
            return json.loads(text) if text else None
        return text

    @staticmethod
    def _check_status(
        status_code: int,
        reason: str,
        body: str,
        prompt_id: Optional[str] = None,
    ) -> None:
        if status_code < 400:
            return
        if status_code == 404 and prompt_id is not None:
            raise PromptNotFoundError(prompt_id, body=body)
        raise APIStatusError(status_code, reason or "Request failed", body=body)

    def _make_request(
        self,
        method: str,
        endpoint: str,
        headers: Optional[dict] = None,
        prompt_id: Optional[str] = None,
        **kwargs,
    ) -> Any:
        """Make an HTTP request to the API.

        Args:
            method (str): HTTP method (GET, POST, PUT, DELETE)
            endpoint (str): API endpoint
            headers (dict, optional): Additional headers to include in the request
            prompt_id (str, optional): Prompt addressed by the request, turns a 404 into PromptNotFoundError
            **kwargs: Additional arguments to pass to requests

        Returns:
            Any: Decoded response body
        """
        url = self._url(endpoint)
        request_headers = self._get_auth_headers()
        if headers:
            request_headers.update(headers)

        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(
                method, url, headers=request_headers, **kwargs
            )
        except requests.RequestException as e:
            logger.error("Request %s %s failed: %s", method, url, e)
            raise APIConnectionError(f"{method} {url} failed: {e}") from e

        self._check_status(
            response.status_code, response.reason, response.text, prompt_id
        )
        return self._decode_body(
            response.headers.get("content-type", ""), response.text
        )

    async def _make_async_request(
        self,
        method: str,
        endpoint: str,
        headers: Optional[dict] = None,
        prompt_id: Optional[str] = None,
        **kwargs,
    ) -> Any:
        """Make an async HTTP request to the API."""
        url = self._url(endpoint)
        request_headers = self._get_auth_headers()
        if headers:
            request_headers.update(headers)

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as async_session:
                async with async_session.request(
                    method, url, headers=request_headers, **kwargs
                ) as response:
                    text = await response.text()
                    status_code = response.status
                    reason = response.reason
                    content_type = response.headers.get("content-type", "")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Request %s %s failed: %s", method, url, e)
            raise APIConnectionError(f"{method} {url} failed: {e}") from e

        self._check_status(status_code, reason, text, prompt_id)
        return self._decode_body(content_type, text)

    # ==============================
    # Read prompts
    # ==============================

    @staticmethod
    def _list_query(request: PromptListParams) -> dict:
        query = {"offset": request.offset, "limit": request.limit}
        if request.category:
            query["category"] = request.category
        return query

    def list_prompts(
        self,
        request: Optional[Union[PromptListParams, dict]] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        category: Optional[str] = None,
    ) -> list[Prompt]:
        """List prompts page by page.

        An empty list means there is nothing left at this offset; the service
        does not report a total count.

        Args:
            request (Optional[Union[PromptListParams, dict]]): The list parameters
            offset (Optional[int]): Number of prompts to skip
            limit (Optional[int]): Maximum number of prompts to return
            category (Optional[str]): Only return prompts of this category

        Returns:
            list[Prompt]: At most `limit` prompts starting at `offset`
        """
        request = self._build_request(
            request, PromptListParams, offset=offset, limit=limit, category=category
        )
        response = self._make_request(
            "GET", "/prompts", params=self._list_query(request)
        )
        return [Prompt(**item) for item in response or []]

    async def alist_prompts(
        self,
        request: Optional[Union[PromptListParams, dict]] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        category: Optional[str] = None,
    ) -> list[Prompt]:
        """Async variant of list_prompts."""
        request = self._build_request(
            request, PromptListParams, offset=offset, limit=limit, category=category
        )
        response = await self._make_async_request(
            "GET", "/prompts", params=self._list_query(request)
        )
        return [Prompt(**item) for item in response or []]

    def retrieve_prompt(
        self,
        prompt_id: str,
        request: Optional[Union[PromptRetrieveParams, dict]] = None,
        metadata: Optional[bool] = None,
    ) -> Prompt:
        """Retrieve a single prompt.

        Args:
            prompt_id (str): The prompt id
            request (Optional[Union[PromptRetrieveParams, dict]]): Retrieve options
            metadata (Optional[bool]): Whether to include metadata. Defaults to True

        Returns:
            Prompt: The prompt

        Raises:
            PromptNotFoundError: If the service does not know the id
        """
        request = self._build_request(
            request, PromptRetrieveParams, metadata=metadata
        )
        response = self._make_request(
            "GET",
            f"/prompt/{quote(prompt_id, safe='')}",
            prompt_id=prompt_id,
            params={"metadata": _query_flag(request.metadata)},
        )
        return Prompt(**response)

    async def aretrieve_prompt(
        self,
        prompt_id: str,
        request: Optional[Union[PromptRetrieveParams, dict]] = None,
        metadata: Optional[bool] = None,
    ) -> Prompt:
        """Async variant of retrieve_prompt."""
        request = self._build_request(
            request, PromptRetrieveParams, metadata=metadata
        )
        response = await self._make_async_request(
            "GET",
            f"/prompt/{quote(prompt_id, safe='')}",
            prompt_id=prompt_id,
            params={"metadata": _query_flag(request.metadata)},
        )
        return Prompt(**response)

    def retrieve_prompt_content(
        self,
        prompt_id: str,
        request: Optional[Union[PromptContentParams, dict]] = None,
        latest: Optional[bool] = None,
    ) -> str:
        """Retrieve only the content of a prompt.

        Args:
            prompt_id (str): The prompt id
            request (Optional[Union[PromptContentParams, dict]]): Content options
            latest (Optional[bool]): Resolve to the latest version of the prompt lineage

        Returns:
            str: The prompt content
        """
        request = self._build_request(request, PromptContentParams, latest=latest)
        response = self._make_request(
            "GET",
            f"/prompt/{quote(prompt_id, safe='')}/content",
            prompt_id=prompt_id,
            params={"latest": _query_flag(request.latest)},
        )
        return str(response)

    def list_categories(self, force_refresh: bool = False) -> list[str]:
        """List the distinct prompt categories known to the service.

        Results are cached for the lifetime of the client cache TTL.

        Args:
            force_refresh (bool): Bypass the cache

        Returns:
            list[str]: Category names
        """
        if not force_refresh:
            cached = self._cache.get("list_categories")
            if cached is not None:
                return list(cached)
        response = self._make_request("GET", "/prompt/categories")
        categories = [str(category) for category in response or []]
        self._cache.set("list_categories", categories)
        return list(categories)

    async def alist_categories(self, force_refresh: bool = False) -> list[str]:
        """Async variant of list_categories, sharing the same cache."""
        if not force_refresh:
            cached = self._cache.get("list_categories")
            if cached is not None:
                return list(cached)
        response = await self._make_async_request("GET", "/prompt/categories")
        categories = [str(category) for category in response or []]
        self._cache.set("list_categories", categories)
        return list(categories)

    # ==============================
    # Write prompts
    # ==============================

    def create_prompt(
        self,
        request: Optional[Union[PromptCreateParams, dict]] = None,
        **kwargs,
    ) -> str:
        """Create a prompt, or a new version of one by passing its parent id.

        Args:
            request (Optional[Union[PromptCreateParams, dict]]): The prompt to create
            **kwargs: PromptCreateParams fields, used when request is None

        Returns:
            str: Id assigned by the service
        """
        request = self._build_request(request, PromptCreateParams, **kwargs)
        response = self._make_request(
            "POST", "/prompt", json=request.model_dump(exclude_none=True)
        )
        self._cache.invalidate("list_categories")
        return str(response).strip()

    async def acreate_prompt(
        self,
        request: Optional[Union[PromptCreateParams, dict]] = None,
        **kwargs,
    ) -> str:
        """Async variant of create_prompt."""
        request = self._build_request(request, PromptCreateParams, **kwargs)
        response = await self._make_async_request(
            "POST", "/prompt", json=request.model_dump(exclude_none=True)
        )
        self._cache.invalidate("list_categories")
        return str(response).strip()

    def update_prompt(
        self,
        request: Optional[Union[PromptUpdateParams, dict]] = None,
        **kwargs,
    ) -> str:
        """Replace the content of a prompt.

        Args:
            request (Optional[Union[PromptUpdateParams, dict]]): The prompt id and its new content
            **kwargs: PromptUpdateParams fields, used when request is None

        Returns:
            str: Id of the updated prompt

        Raises:
            PromptNotFoundError: If the service does not know the id
        """
        request = self._build_request(request, PromptUpdateParams, **kwargs)
        response = self._make_request(
            "PUT", "/prompt", prompt_id=request.id, json=request.model_dump()
        )
        return str(response or request.id).strip()

    async def aupdate_prompt(
        self,
        request: Optional[Union[PromptUpdateParams, dict]] = None,
        **kwargs,
    ) -> str:
        """Async variant of update_prompt."""
        request = self._build_request(request, PromptUpdateParams, **kwargs)
        response = await self._make_async_request(
            "PUT", "/prompt", prompt_id=request.id, json=request.model_dump()
        )
        return str(response or request.id).strip()

    def update_prompt_metadata(
        self,
        request: Optional[Union[PromptUpdateMetadataParams, dict]] = None,
        **kwargs,
    ) -> str:
        """Update the name, description, category and tags of a prompt.

        Args:
            request (Optional[Union[PromptUpdateMetadataParams, dict]]): The new metadata
            **kwargs: PromptUpdateMetadataParams fields, used when request is None

        Returns:
            str: Id of the updated prompt
        """
        request = self._build_request(request, PromptUpdateMetadataParams, **kwargs)
        response = self._make_request(
            "PUT",
            "/prompt/metadata",
            prompt_id=request.id,
            json=request.model_dump(),
        )
        self._cache.invalidate("list_categories")
        return str(response or request.id).strip()

    async def aupdate_prompt_metadata(
        self,
        request: Optional[Union[PromptUpdateMetadataParams, dict]] = None,
        **kwargs,
    ) -> str:
        """Async variant of update_prompt_metadata."""
        request = self._build_request(request, PromptUpdateMetadataParams, **kwargs)
        response = await self._make_async_request(
            "PUT",
            "/prompt/metadata",
            prompt_id=request.id,
            json=request.model_dump(),
        )
        self._cache.invalidate("list_categories")
        return str(response or request.id).strip()

    def delete_prompt(self, prompt_id: str) -> None:
        """Delete a prompt.

        Raises:
            PromptNotFoundError: If the service does not know the id
        """
        self._make_request(
            "DELETE", f"/prompt/{quote(prompt_id, safe='')}", prompt_id=prompt_id
        )

    async def adelete_prompt(self, prompt_id: str) -> None:
        """Async variant of delete_prompt."""
        await self._make_async_request(
            "DELETE", f"/prompt/{quote(prompt_id, safe='')}", prompt_id=prompt_id
        )

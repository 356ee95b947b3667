"""Tests for the in-memory cache functionality."""

import threading
import time
from unittest.mock import MagicMock, patch

from promptshelf_client.cache import InMemoryCache
from promptshelf_client.client import PromptStorageClient
from promptshelf_commons.api_schema.prompt_schema import PromptListParams


def _json_response(payload: str) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.reason = "OK"
    response.text = payload
    response.headers = {"content-type": "application/json"}
    return response


class TestInMemoryCache:
    """Test cases for InMemoryCache class."""

    def test_basic_set_and_get(self):
        cache = InMemoryCache()
        cache.set("test_method", "test_value", param1="value1", param2="value2")

        assert cache.get("test_method", param1="value1", param2="value2") == "test_value"

    def test_cache_miss(self):
        cache = InMemoryCache()

        assert cache.get("test_method", param1="value1") is None

    def test_cache_with_different_params(self):
        """Test that different parameters create different cache entries."""
        cache = InMemoryCache()
        cache.set("test_method", "value1", param="a")
        cache.set("test_method", "value2", param="b")

        assert cache.get("test_method", param="a") == "value1"
        assert cache.get("test_method", param="b") == "value2"

    def test_cache_with_pydantic_params(self):
        """Equal models map to the same entry."""
        cache = InMemoryCache()
        cache.set("list_prompts", ["p1"], request=PromptListParams(offset=0, limit=5))

        assert cache.get("list_prompts", request=PromptListParams(offset=0, limit=5)) == [
            "p1"
        ]
        assert cache.get("list_prompts", request=PromptListParams(offset=5, limit=5)) is None

    def test_cache_expiration(self):
        """Test that cache entries expire after TTL."""
        cache = InMemoryCache(ttl_seconds=1)
        cache.set("test_method", "test_value", param="value")
        assert cache.get("test_method", param="value") == "test_value"

        time.sleep(1.1)

        assert cache.get("test_method", param="value") is None

    def test_invalidate_by_method(self):
        cache = InMemoryCache()
        cache.set("list_categories", ["rust"])
        cache.set("other_method", "kept")

        assert cache.invalidate("list_categories") == 1
        assert cache.get("list_categories") is None
        assert cache.get("other_method") == "kept"

    def test_invalidate_everything(self):
        cache = InMemoryCache()
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.invalidate() == 2
        assert cache.get("a") is None

    def test_thread_safety(self):
        """Test that cache is thread-safe."""
        cache = InMemoryCache()
        results = []
        errors = []

        def set_and_get(thread_id):
            try:
                cache.set("test_method", f"value_{thread_id}", thread_id=thread_id)
                time.sleep(0.01)
                results.append((thread_id, cache.get("test_method", thread_id=thread_id)))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=set_and_get, args=(i,)) for i in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(errors) == 0
        assert len(results) == 10
        for thread_id, result in results:
            assert result == f"value_{thread_id}"


class TestPromptStorageClientCache:
    """Test cases for cache integration in PromptStorageClient."""

    @patch("promptshelf_client.client.requests.Session")
    def test_list_categories_cache_hit(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _json_response('["rust", "python"]')

        client = PromptStorageClient(api_key="test_key")
        result1 = client.list_categories()
        result2 = client.list_categories()

        assert mock_session.request.call_count == 1
        assert result1 == result2 == ["rust", "python"]

    @patch("promptshelf_client.client.requests.Session")
    def test_list_categories_force_refresh(self, mock_session_class):
        """Test that force_refresh bypasses cache."""
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.return_value = _json_response('["rust"]')

        client = PromptStorageClient(api_key="test_key")
        client.list_categories()
        client.list_categories(force_refresh=True)

        assert mock_session.request.call_count == 2

    @patch("promptshelf_client.client.requests.Session")
    def test_create_prompt_invalidates_categories(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        created = MagicMock()
        created.status_code = 201
        created.reason = "Created"
        created.text = "new-id"
        created.headers = {"content-type": "text/plain"}
        mock_session.request.side_effect = [
            _json_response('["rust"]'),
            created,
            _json_response('["rust", "go"]'),
        ]

        client = PromptStorageClient(api_key="test_key")
        assert client.list_categories() == ["rust"]
        client.create_prompt(content="hello", category="go")

        assert client.list_categories() == ["rust", "go"]
        assert mock_session.request.call_count == 3

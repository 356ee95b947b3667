from promptshelf.server.cache import (
    clear_request_context_cache,
    get_cache_stats,
    get_request_context,
    invalidate_request_context,
)
from promptshelf.server.services.storage.memory_kv_store import InMemoryKeyValueStore


def test_context_is_cached_per_profile(mock_gateway):
    clear_request_context_cache()

    first = get_request_context("profile-a", gateway=mock_gateway)
    again = get_request_context("profile-a", gateway=mock_gateway)
    other = get_request_context("profile-b", gateway=mock_gateway)

    assert first is again
    assert first is not other
    assert first.gateway is mock_gateway
    assert get_cache_stats()["current_size"] == 2
    clear_request_context_cache()


def test_memory_backend_is_used_in_tests(mock_gateway):
    clear_request_context_cache()

    context = get_request_context("profile-a", gateway=mock_gateway)

    assert isinstance(context.kv_store, InMemoryKeyValueStore)
    clear_request_context_cache()


def test_invalidate(mock_gateway):
    clear_request_context_cache()
    first = get_request_context("profile-a", gateway=mock_gateway)

    assert invalidate_request_context("profile-a") is True
    assert invalidate_request_context("profile-a") is False
    assert get_request_context("profile-a", gateway=mock_gateway) is not first
    clear_request_context_cache()

"""Request context caching module."""

from promptshelf.server.cache.request_context_cache import (
    get_prompt_gateway,
    get_request_context,
    invalidate_request_context,
    clear_request_context_cache,
    get_cache_stats,
)

__all__ = [
    "get_prompt_gateway",
    "get_request_context",
    "invalidate_request_context",
    "clear_request_context_cache",
    "get_cache_stats",
]

"""Per-profile request context cache with explicit invalidation."""

import threading
from typing import Optional

from cachetools import TTLCache

from promptshelf.server.api_endpoints.request_context import RequestContext
from promptshelf.server.services.gateway.prompt_gateway import PromptGateway

# Cache configuration
CONTEXT_CACHE_MAX_SIZE = 1000
CONTEXT_CACHE_TTL_SECONDS = 3600  # 1 hour safety net

# Module-level cache and lock
_context_cache: TTLCache = TTLCache(
    maxsize=CONTEXT_CACHE_MAX_SIZE, ttl=CONTEXT_CACHE_TTL_SECONDS
)
_context_cache_lock = threading.Lock()

# One gateway (and so one http client) shared by all profiles
_gateway: Optional[PromptGateway] = None
_gateway_lock = threading.Lock()


def get_prompt_gateway() -> PromptGateway:
    """Get or create the shared prompt gateway.

    Returns:
        PromptGateway: The process-wide gateway
    """
    global _gateway
    with _gateway_lock:
        if _gateway is None:
            _gateway = PromptGateway()
        return _gateway


def get_request_context(
    profile_id: str, gateway: Optional[PromptGateway] = None
) -> RequestContext:
    """Get or create the cached RequestContext of a browser profile.

    Args:
        profile_id (str): Browser profile id taken from the profile cookie
        gateway (Optional[PromptGateway]): Gateway to use for a newly created context

    Returns:
        RequestContext: Cached or newly created context
    """
    with _context_cache_lock:
        if profile_id in _context_cache:
            return _context_cache[profile_id]

    # Cache miss - create new context (outside lock to avoid blocking on disk)
    context = RequestContext(
        profile_id=profile_id, gateway=gateway or get_prompt_gateway()
    )

    with _context_cache_lock:
        # Double-check in case another thread created it
        if profile_id not in _context_cache:
            _context_cache[profile_id] = context
        return _context_cache[profile_id]


def invalidate_request_context(profile_id: str) -> bool:
    """Drop the cached context of one profile.

    Returns:
        bool: True if entry was removed, False if not found
    """
    with _context_cache_lock:
        if profile_id in _context_cache:
            del _context_cache[profile_id]
            return True
        return False


def clear_request_context_cache() -> None:
    """Clear entire cache (for testing/admin)."""
    with _context_cache_lock:
        _context_cache.clear()


def get_cache_stats() -> dict:
    """Get cache statistics for the health endpoint.

    Returns:
        dict: Cache statistics including current size, max size, and TTL
    """
    with _context_cache_lock:
        return {
            "current_size": len(_context_cache),
            "max_size": CONTEXT_CACHE_MAX_SIZE,
            "ttl_seconds": CONTEXT_CACHE_TTL_SECONDS,
        }

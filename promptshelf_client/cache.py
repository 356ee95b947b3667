"""In-memory response cache for the prompt storage client."""

import hashlib
import json
import threading
import time
from typing import Any, Optional


class InMemoryCache:
    """
    Thread-safe in-memory cache for read-only client calls.

    Entries are keyed by the client method name plus its call parameters and
    expire after a fixed TTL (default: 10 minutes). Only calls whose answers
    change rarely (such as the category list) are cached.
    """

    def __init__(self, ttl_seconds: int = 600):
        """
        Initialize the cache.

        Args:
            ttl_seconds (int): Time-to-live for cache entries in seconds. Default is 600 (10 minutes).
        """
        self._entries: dict[str, tuple[str, float, Any]] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def _make_key(method_name: str, **params) -> str:
        """
        Build a stable hash key from a method name and its parameters.

        Pydantic models are dumped to dicts; everything else falls back to str.

        Args:
            method_name (str): Name of the cached client method
            **params: Parameters of the call

        Returns:
            str: sha256 hex digest identifying the call
        """
        normalized = {
            name: value.model_dump() if hasattr(value, "model_dump") else value
            for name, value in params.items()
        }
        payload = json.dumps(
            {"method": method_name, "params": normalized},
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(payload.encode()).hexdigest()

    def get(self, method_name: str, **params) -> Optional[Any]:
        """
        Return the cached value of a call, or None when missing or expired.

        Args:
            method_name (str): Name of the cached client method
            **params: Parameters of the call

        Returns:
            Optional[Any]: Cached value if present and fresh
        """
        key = self._make_key(method_name, **params)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            _, expires_at, value = entry
            if time.monotonic() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, method_name: str, value: Any, **params) -> None:
        """
        Store the value of a call.

        Args:
            method_name (str): Name of the cached client method
            value (Any): Value to cache
            **params: Parameters of the call
        """
        key = self._make_key(method_name, **params)
        with self._lock:
            self._entries[key] = (
                method_name,
                time.monotonic() + self._ttl_seconds,
                value,
            )
            if len(self._entries) % 100 == 0:
                self._evict_expired()

    def invalidate(self, method_name: Optional[str] = None) -> int:
        """
        Drop cached entries of one method, or everything when no name is given.

        Args:
            method_name (Optional[str]): Method whose entries should be dropped

        Returns:
            int: Number of entries removed
        """
        with self._lock:
            if method_name is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed
            stale = [
                key
                for key, (name, _, _) in self._entries.items()
                if name == method_name
            ]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def _evict_expired(self) -> None:
        # caller holds the lock
        now = time.monotonic()
        expired = [
            key for key, (_, expires_at, _) in self._entries.items() if now >= expires_at
        ]
        for key in expired:
            del self._entries[key]

"""Async in-memory caches shared by every connector."""

from .async_cache import AsyncTTLCache, CacheEntry

__all__ = ["AsyncTTLCache", "CacheEntry"]

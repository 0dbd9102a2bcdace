"""
Build cache support: key construction, storage backends and the warn-only bridge.
"""

from .keys import SDK_CACHE_KIND, cache_key, restore_keys
from .backend import CacheBackend, LocalCacheBackend
from .bridge import CacheBridge

__all__ = [
    "SDK_CACHE_KIND",
    "cache_key",
    "restore_keys",
    "CacheBackend",
    "LocalCacheBackend",
    "CacheBridge",
]

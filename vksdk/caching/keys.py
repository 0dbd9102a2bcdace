"""
Cache key construction.

Keys encode artifact kind, version, platform and architecture so entries
never collide across versions or hosts:

    cache-vulkan-sdk-1.3.250.1-linux-x64

Restore keys replace the version with a wildcard and only ever match on
restore.
"""

from typing import List

SDK_CACHE_KIND = "vulkan-sdk"


def cache_key(kind: str, version: str, platform: str, arch: str) -> str:
    """
    Build the primary cache key.

    Example:
        >>> cache_key("vulkan-sdk", "1.3.250.1", "linux", "x64")
        'cache-vulkan-sdk-1.3.250.1-linux-x64'
    """
    return f"cache-{kind}-{version}-{platform}-{arch}"


def restore_keys(kind: str, platform: str, arch: str) -> List[str]:
    """Fallback keys matching any version of ``kind`` on the same platform/arch."""
    return [f"cache-{kind}-*-{platform}-{arch}"]

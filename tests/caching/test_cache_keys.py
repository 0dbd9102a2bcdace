"""
Tests for cache key construction.
"""

from vksdk.caching.backend import key_matches
from vksdk.caching.keys import SDK_CACHE_KIND, cache_key, restore_keys


class TestCacheKey:
    """Test cache_key()."""

    def test_format(self):
        """Test the key encodes kind, version, platform and arch."""
        assert cache_key(SDK_CACHE_KIND, "1.3.250.1", "linux", "x64") == (
            "cache-vulkan-sdk-1.3.250.1-linux-x64"
        )

    def test_deterministic(self):
        """Test the same inputs always give the same key."""
        assert cache_key("vulkan-sdk", "1.3.250.1", "windows", "x64") == cache_key(
            "vulkan-sdk", "1.3.250.1", "windows", "x64"
        )

    def test_distinct_inputs(self):
        """Test version and arch changes change the key."""
        base = cache_key("vulkan-sdk", "1.3.250.1", "linux", "x64")

        assert base != cache_key("vulkan-sdk", "1.3.243.0", "linux", "x64")
        assert base != cache_key("vulkan-sdk", "1.3.250.1", "linux", "arm64")


class TestRestoreKeys:
    """Test restore_keys() matching."""

    def test_matches_other_versions_same_host(self):
        """Test the fallback matches any version for the same platform and arch."""
        (pattern,) = restore_keys(SDK_CACHE_KIND, "linux", "x64")

        assert key_matches(pattern, "cache-vulkan-sdk-1.3.243.0-linux-x64")
        assert not key_matches(pattern, "cache-vulkan-sdk-1.3.243.0-linux-arm64")
        assert not key_matches(pattern, "cache-vulkan-sdk-1.3.243.0-windows-x64")

    def test_plain_keys_match_as_prefix(self):
        """Test keys without glob characters are prefixes."""
        assert key_matches("cache-vulkan-sdk-", "cache-vulkan-sdk-1.3.250.1-linux-x64")
        assert not key_matches("cache-other-", "cache-vulkan-sdk-1.3.250.1-linux-x64")

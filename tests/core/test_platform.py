"""
Unit tests for the platform resolver.

Tests cover:
- OS identifier to platform tag mapping
- Architecture normalization
- PlatformInfo properties
- Cache behavior
"""

from unittest.mock import patch

import pytest

from vksdk.core.platform import (
    PlatformInfo,
    PlatformTag,
    clear_platform_cache,
    detect_architecture,
    detect_platform,
    resolve_platform,
)


class TestResolvePlatform:
    """Tests for resolve_platform()."""

    @pytest.mark.parametrize(
        "system,expected",
        [
            ("Windows", PlatformTag.WINDOWS),
            ("win32", PlatformTag.WINDOWS),
            ("Linux", PlatformTag.LINUX),
            ("Darwin", PlatformTag.MAC),
        ],
    )
    def test_known_systems(self, system, expected):
        """Test known OS identifiers map to their tag."""
        assert resolve_platform(system) == expected

    def test_unknown_system_returns_raw_identifier(self):
        """Test unknown OS identifiers are passed through lower-cased."""
        assert resolve_platform("FreeBSD") == "freebsd"
        assert not isinstance(resolve_platform("FreeBSD"), PlatformTag)

    def test_tags_are_url_segments(self):
        """Test tags format as the plain strings used in download URLs."""
        assert f"{PlatformTag.WINDOWS}" == "windows"
        assert str(PlatformTag.MAC) == "mac"

    def test_detects_current_system(self):
        """Test the host OS is used when no identifier is given."""
        with patch("vksdk.core.platform.platform.system", return_value="Linux"):
            assert resolve_platform() == PlatformTag.LINUX


class TestDetectArchitecture:
    """Tests for detect_architecture()."""

    @pytest.mark.parametrize(
        "machine,expected",
        [
            ("x86_64", "x64"),
            ("AMD64", "x64"),
            ("aarch64", "arm64"),
            ("arm64", "arm64"),
            ("i686", "x86"),
            ("armv7l", "arm"),
            ("riscv64", "riscv64"),
        ],
    )
    def test_normalization(self, machine, expected):
        """Test machine names are normalized."""
        assert detect_architecture(machine) == expected


class TestPlatformInfo:
    """Tests for PlatformInfo dataclass."""

    def test_platform_string(self, linux_platform):
        """Test platform string generation."""
        assert linux_platform.platform_string() == "linux-x64"
        assert str(linux_platform) == "linux-x64"

    def test_name(self, windows_platform):
        """Test name is the plain tag string."""
        assert windows_platform.name == "windows"

    def test_flags(self, linux_platform, windows_platform, mac_platform):
        """Test is_* properties."""
        assert linux_platform.is_linux and not linux_platform.is_windows
        assert windows_platform.is_windows and not windows_platform.is_mac
        assert mac_platform.is_mac and not mac_platform.is_linux

    def test_unsupported(self, unsupported_platform):
        """Test raw tags are reported as unsupported."""
        assert unsupported_platform.is_supported is False
        assert unsupported_platform.name == "freebsd"

    def test_frozen(self, linux_platform):
        """Test PlatformInfo is immutable."""
        with pytest.raises(AttributeError):
            linux_platform.arch = "arm64"


class TestDetectPlatform:
    """Tests for cached platform detection."""

    @patch("vksdk.core.platform.platform.machine", return_value="x86_64")
    @patch("vksdk.core.platform.platform.system", return_value="Windows")
    def test_detect(self, mock_system, mock_machine):
        """Test detection from the platform module."""
        info = detect_platform()

        assert info == PlatformInfo(PlatformTag.WINDOWS, "x64", "windows")

    @patch("vksdk.core.platform.platform.machine", return_value="x86_64")
    @patch("vksdk.core.platform.platform.system", return_value="Linux")
    def test_detect_is_cached(self, mock_system, mock_machine):
        """Test detection runs once until the cache is cleared."""
        first = detect_platform()
        second = detect_platform()

        assert first is second
        assert mock_system.call_count == 1

        clear_platform_cache()
        detect_platform()
        assert mock_system.call_count == 2

"""
Platform detection for vksdk.

This module maps the host operating system to the canonical platform tag used
in LunarG download URLs and in the installer dispatch, and normalizes the CPU
architecture used in cache keys.

Usage:
    from vksdk.core.platform import detect_platform

    info = detect_platform()
    print(f"Platform: {info.tag}")
    print(f"Architecture: {info.arch}")
    print(f"Platform string: {info.platform_string()}")
"""

import functools
import platform
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class PlatformTag(str, Enum):
    """Platform names as they appear in the LunarG SDK URLs."""

    WINDOWS = "windows"
    LINUX = "linux"
    MAC = "mac"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information threaded through every component.

    Attributes:
        tag: PlatformTag, or the raw OS identifier for unsupported hosts
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm', or raw machine)
        os_name: Raw lower-cased OS identifier (e.g. 'linux', 'darwin')
    """

    tag: Union[PlatformTag, str]
    arch: str
    os_name: str

    @property
    def name(self) -> str:
        """Plain string form of the tag."""
        return str(self.tag)

    @property
    def is_supported(self) -> bool:
        """True if the tag is one of the known platforms."""
        return isinstance(self.tag, PlatformTag)

    @property
    def is_windows(self) -> bool:
        return self.tag == PlatformTag.WINDOWS

    @property
    def is_linux(self) -> bool:
        return self.tag == PlatformTag.LINUX

    @property
    def is_mac(self) -> bool:
        return self.tag == PlatformTag.MAC

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'windows-x64').

        Example:
            >>> PlatformInfo(PlatformTag.LINUX, 'x64', 'linux').platform_string()
            'linux-x64'
        """
        return f"{self.tag}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


def resolve_platform(system: Optional[str] = None) -> Union[PlatformTag, str]:
    """
    Map an OS identifier to a platform tag.

    Args:
        system: OS identifier as returned by platform.system(). Detected if None.

    Returns:
        PlatformTag for Windows, Linux and macOS, otherwise the raw lower-cased
        identifier unchanged.

    Example:
        >>> resolve_platform("Darwin")
        <PlatformTag.MAC: 'mac'>
        >>> resolve_platform("FreeBSD")
        'freebsd'
    """
    if system is None:
        system = platform.system()
    system = system.lower()

    if system in ("windows", "win32"):
        return PlatformTag.WINDOWS
    elif system == "darwin":
        return PlatformTag.MAC
    elif system == "linux":
        return PlatformTag.LINUX
    else:
        return system


def detect_architecture(machine: Optional[str] = None) -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    if machine is None:
        machine = platform.machine()
    machine = machine.lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo for the running host
    """
    system = platform.system()
    return PlatformInfo(
        tag=resolve_platform(system),
        arch=detect_architecture(),
        os_name=system.lower(),
    )


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    Useful for testing.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformTag",
    "PlatformInfo",
    "resolve_platform",
    "detect_architecture",
    "detect_platform",
    "clear_platform_cache",
]

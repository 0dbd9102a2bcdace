"""
Core functionality for vksdk.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    PlatformTag,
    PlatformInfo,
    resolve_platform,
    detect_architecture,
    detect_platform,
    clear_platform_cache,
)

from .exceptions import (
    VulkanSdkError,
    InvalidInputError,
    VersionResolutionError,
    ArtifactNotFoundError,
    DownloadError,
    InstallationFailedError,
    InstallerNotImplementedError,
    CacheError,
)

__all__ = [
    "PlatformTag",
    "PlatformInfo",
    "resolve_platform",
    "detect_architecture",
    "detect_platform",
    "clear_platform_cache",
    "VulkanSdkError",
    "InvalidInputError",
    "VersionResolutionError",
    "ArtifactNotFoundError",
    "DownloadError",
    "InstallationFailedError",
    "InstallerNotImplementedError",
    "CacheError",
]

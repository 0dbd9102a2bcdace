"""
Centralized exception hierarchy for vksdk.

Resolution, download and installation errors abort a run. Cache errors are
downgraded to warnings by the cache bridge.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class VulkanSdkError(Exception):
    """Base exception for all vksdk errors."""

    pass


class InvalidInputError(VulkanSdkError):
    """Raised when an input value (version, destination, ...) is malformed."""

    pass


# ============================================================================
# Version Resolution
# ============================================================================


class VersionResolutionError(VulkanSdkError):
    """Raised when the requested version cannot be turned into a concrete one."""

    pass


# ============================================================================
# Download Exceptions
# ============================================================================


class ArtifactNotFoundError(VulkanSdkError):
    """Raised when a download URL answers with an error status."""

    def __init__(self, url: str, version: str, status_code: Optional[int] = None):
        self.url = url
        self.version = version
        self.status_code = status_code
        msg = f"Vulkan SDK artifact was not found for version: {version} using URL: {url}"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        super().__init__(msg)


class DownloadError(VulkanSdkError):
    """Raised when transferring an artifact fails."""

    pass


# ============================================================================
# Installation Exceptions
# ============================================================================


class InstallationFailedError(VulkanSdkError):
    """Raised when the installer exits non-zero or extraction fails."""

    def __init__(self, message: str, arguments: str = ""):
        self.arguments = arguments
        if arguments:
            message = f"{message} Arguments used: {arguments}"
        super().__init__(message)


class InstallerNotImplementedError(InstallationFailedError, NotImplementedError):
    """Raised for platforms whose install procedure does not exist yet."""

    pass


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(VulkanSdkError):
    """Raised by cache backends; never aborts a run."""

    pass

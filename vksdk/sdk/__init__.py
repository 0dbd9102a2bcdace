"""
Vulkan SDK acquisition: version resolution, downloads and platform installers.

The install orchestration lives in ``vksdk.sdk.orchestrator``.
"""

from .models import ArtifactKind, DownloadDescriptor, InstallRequest, InstallResult
from .versions import LATEST, VersionResolver, is_concrete_version, validate_version
from .installers import (
    OPTIONAL_COMPONENTS_ALLOWLIST,
    PlatformInstaller,
    filter_optional_components,
    get_installer,
)
from .downloader import SdkDownloader

__all__ = [
    "ArtifactKind",
    "DownloadDescriptor",
    "InstallRequest",
    "InstallResult",
    "LATEST",
    "VersionResolver",
    "is_concrete_version",
    "validate_version",
    "OPTIONAL_COMPONENTS_ALLOWLIST",
    "PlatformInstaller",
    "filter_optional_components",
    "get_installer",
    "SdkDownloader",
]

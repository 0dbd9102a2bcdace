"""
Vulkan SDK download orchestration.

Builds platform-specific download URLs, probes them before downloading, and
streams the SDK installer/archive (and the windows runtime package) into a
local download directory.

For download URLs see https://vulkan.lunarg.com/sdk/home
"""

import logging
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

import requests

from vksdk.core.download import DownloadProgress, download_file, probe_url
from vksdk.core.exceptions import ArtifactNotFoundError
from vksdk.core.http import create_session
from vksdk.core.platform import PlatformInfo
from vksdk.sdk.installers import (
    DEFAULT_DOWNLOAD_BASE_URL,
    PlatformInstaller,
    get_installer,
)
from vksdk.sdk.models import ArtifactKind, DownloadDescriptor

logger = logging.getLogger(__name__)


def default_download_dir() -> Path:
    return Path(tempfile.gettempdir()) / "vksdk-downloads"


class SdkDownloader:
    """
    Downloads Vulkan SDK artifacts for one platform.

    Example:
        >>> downloader = SdkDownloader(detect_platform())
        >>> archive = downloader.download_sdk("1.3.250.1")
        >>> print(f"Downloaded to: {archive}")
    """

    def __init__(
        self,
        platform: PlatformInfo,
        session: Optional[requests.Session] = None,
        download_base_url: str = DEFAULT_DOWNLOAD_BASE_URL,
        download_dir: Optional[Path] = None,
        installer: Optional[PlatformInstaller] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ):
        self.platform = platform
        self.session = session or create_session()
        self.download_base_url = download_base_url
        self.download_dir = Path(download_dir) if download_dir else default_download_dir()
        self.installer = installer or get_installer(platform)
        self.progress_callback = progress_callback

    def get_download_url(self, kind: ArtifactKind, version: str) -> str:
        """
        Build the download URL of an artifact (no network access).

        Raises:
            ArtifactNotFoundError: If the platform has no such artifact
        """
        return self.installer.build_download_url(kind, version, self.download_base_url)

    def describe(self, kind: ArtifactKind, version: str) -> DownloadDescriptor:
        """
        Build the URL of an artifact and check that it exists.

        Raises:
            ArtifactNotFoundError: If the probe answers with status >= 400
            DownloadError: If the probe cannot reach the server
        """
        url = self.get_download_url(kind, version)

        status_code = probe_url(url, session=self.session)
        if status_code >= 400:
            error = ArtifactNotFoundError(url, version, status_code)
            logger.error(str(error))
            raise error

        logger.info(f"The Vulkan SDK {kind} version was found: {version}")
        return DownloadDescriptor(version=version, url=url, kind=kind)

    def download(
        self,
        descriptor: Union[DownloadDescriptor, str],
        destination_hint: Optional[Path] = None,
    ) -> Path:
        """
        Stream an artifact to a local file.

        Args:
            descriptor: Probed descriptor, or a plain URL
            destination_hint: Target file or directory (download dir if None)

        Returns:
            Path to the local file

        Raises:
            DownloadError: If the transfer fails
        """
        if isinstance(descriptor, DownloadDescriptor):
            url = descriptor.url
            file_name = descriptor.file_name
        else:
            url = descriptor
            file_name = url.rsplit("/", 1)[-1]

        if destination_hint is None:
            destination = self.download_dir / file_name
        else:
            destination = Path(destination_hint)
            if destination.is_dir():
                destination = destination / file_name

        return download_file(
            url,
            destination,
            session=self.session,
            progress_callback=self.progress_callback,
        )

    def download_sdk(self, version: str) -> Path:
        """Probe and download the SDK installer/archive."""
        logger.info(f"Downloading Vulkan SDK {version}")
        descriptor = self.describe(ArtifactKind.SDK, version)
        path = self.download(descriptor)
        logger.info(f"Vulkan SDK {version} downloaded successfully to {path}")
        return path

    def download_runtime(self, version: str) -> Path:
        """Probe and download the windows runtime components."""
        logger.info(f"Downloading Vulkan Runtime {version}")
        descriptor = self.describe(ArtifactKind.RUNTIME, version)
        path = self.download(descriptor)
        logger.info(f"Vulkan Runtime {version} downloaded successfully to {path}")
        return path

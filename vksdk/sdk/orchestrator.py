"""
Acquire/install orchestration for the Vulkan SDK.

Ties together the cache bridge, the download orchestrator and the platform
installer:

    cache restore ──hit──▶ done
        │ miss
        ▼
    download SDK ─▶ install SDK ─▶ [windows] download + install runtime
        ▼
    [cache] stripdown ─▶ cache save ─▶ verify (advisory)
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from vksdk.caching import SDK_CACHE_KIND, CacheBridge, cache_key, restore_keys
from vksdk.config.inputs import Inputs, get_input_destination
from vksdk.core.filesystem import directory_size
from vksdk.core.platform import PlatformInfo
from vksdk.sdk.downloader import SdkDownloader
from vksdk.sdk.installers import PlatformInstaller, get_installer
from vksdk.sdk.models import InstallRequest, InstallResult, versioned_path

logger = logging.getLogger(__name__)


class SdkInstaller:
    """
    Installs one Vulkan SDK version per call.

    Example:
        >>> platform = detect_platform()
        >>> sdk = SdkInstaller(platform, cache_bridge=CacheBridge(LocalCacheBackend(cache_dir)))
        >>> result = sdk.get_sdk(inputs, "1.3.250.1")
        >>> print(result.sdk_root)
    """

    def __init__(
        self,
        platform: PlatformInfo,
        downloader: Optional[SdkDownloader] = None,
        cache_bridge: Optional[CacheBridge] = None,
        installer: Optional[PlatformInstaller] = None,
    ):
        self.platform = platform
        self.installer = installer or get_installer(platform)
        self.downloader = downloader or SdkDownloader(platform, installer=self.installer)
        self.cache_bridge = cache_bridge

    def get_cache_keys(self, version: str) -> Tuple[str, List[str]]:
        """Primary key and restore keys for ``version`` on this platform."""
        primary = cache_key(SDK_CACHE_KIND, version, self.platform.name, self.platform.arch)
        fallbacks = restore_keys(SDK_CACHE_KIND, self.platform.name, self.platform.arch)
        return primary, fallbacks

    def install_sdk(
        self,
        archive_path: Path,
        destination_root: Path,
        version: str,
        optional_components: Iterable[str] = (),
    ) -> Path:
        """
        Install a downloaded SDK through the platform installer.

        Returns:
            The versioned install path

        Raises:
            InstallationFailedError: If the install procedure fails
        """
        request = InstallRequest(
            source_archive_path=Path(archive_path),
            destination_root=Path(destination_root),
            version=version,
            optional_components=tuple(optional_components),
        )
        return self.installer.install(request)

    def _restore(self, install_path: Path, version: str) -> Optional[str]:
        """
        Restore ``install_path`` from the cache.

        Entries only match the exact path they were saved from, and that path
        carries the version. Fallback keys therefore only reach entries for
        this same folder saved under another key, never an older SDK version.
        """
        primary, fallbacks = self.get_cache_keys(version)
        hit = self.cache_bridge.restore([install_path], primary, fallbacks)
        if hit is None or hit == primary:
            return hit

        # fallback entries are only trusted if they hold a usable SDK
        if self.installer.verify(install_path):
            return hit

        logger.warning(
            f"[Cache] Restored entry '{hit}' does not contain a usable Vulkan SDK, "
            "installing a fresh copy"
        )
        return None

    def get_sdk(self, inputs: Inputs, version: str) -> InstallResult:
        """
        Restore the SDK from cache or download and install it.

        Args:
            inputs: Validated run inputs
            version: Concrete SDK version

        Returns:
            InstallResult of the cached or fresh install

        Raises:
            ArtifactNotFoundError: If the SDK or runtime artifact does not exist
            DownloadError: If a download fails
            InstallationFailedError: If installing fails
            InstallerNotImplementedError: If the platform has no install procedure,
                raised before anything is downloaded
        """
        destination = inputs.destination or get_input_destination(None, self.platform)
        install_path = versioned_path(destination, version)
        use_cache = inputs.use_cache and self.cache_bridge is not None

        if not self.platform.is_supported:
            self.installer.install(InstallRequest(Path(), destination, version))
            return self._result(install_path, version)

        self.installer.check_installable()

        if use_cache:
            hit = self._restore(install_path, version)
            if hit is not None:
                logger.info(f"[Cache] Restored Vulkan SDK in path: '{install_path}'.")
                return self._result(install_path, version, from_cache=True)

        archive = self.downloader.download_sdk(version)
        install_path = self.install_sdk(
            archive, destination, version, inputs.optional_components
        )

        # runtime goes in before the cache save so both are cached together
        runtime_path = None
        if self.platform.is_windows and inputs.install_runtime:
            runtime_archive = self.downloader.download_runtime(version)
            runtime_path = self.installer.install_runtime(runtime_archive, install_path)

        removed: List[Path] = []
        if use_cache:
            if inputs.stripdown:
                removed = self.installer.stripdown(install_path)
            primary, _ = self.get_cache_keys(version)
            if install_path.is_dir():
                logger.debug(f"Caching {directory_size(install_path)} bytes from {install_path}")
            self.cache_bridge.save([install_path], primary)

        result = self._result(install_path, version, runtime_path=runtime_path)
        result.removed_paths = removed
        return result

    def _result(
        self,
        install_path: Path,
        version: str,
        from_cache: bool = False,
        runtime_path: Optional[Path] = None,
    ) -> InstallResult:
        verified = self.installer.verify(install_path)
        if not verified:
            logger.warning(f"Could not find Vulkan SDK in {install_path}")

        if runtime_path is None and self.platform.is_windows:
            if self.installer.verify_runtime(install_path):
                runtime_path = Path(install_path) / "runtime"

        return InstallResult(
            install_path=install_path,
            sdk_root=self.installer.sdk_root(install_path),
            version=version,
            verified=verified,
            from_cache=from_cache,
            runtime_path=runtime_path,
        )

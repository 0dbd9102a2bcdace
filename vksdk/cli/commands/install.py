"""
Install command implementation.

Runs the whole pipeline: inputs, version resolution, cache restore or
download + install, verification and publishing of the environment.
"""

import logging

from vksdk.caching import CacheBridge, LocalCacheBackend
from vksdk.ci.publisher import EnvironmentPublisher
from vksdk.cli.utils import create_resolver, download_base_url, format_summary, safe_print
from vksdk.config.inputs import INPUT_NAMES, load_inputs
from vksdk.core.download import DownloadProgress
from vksdk.core.exceptions import InstallationFailedError
from vksdk.core.http import create_session
from vksdk.core.platform import detect_platform
from vksdk.sdk.downloader import SdkDownloader
from vksdk.sdk.installers import get_installer
from vksdk.sdk.orchestrator import SdkInstaller

logger = logging.getLogger(__name__)


def _log_progress(progress: DownloadProgress):
    logger.debug(f"Downloading: {progress}")


def _overrides(args) -> dict:
    """Input values given as CLI flags (None = not given)."""
    return {name: getattr(args, name, None) for name in INPUT_NAMES}


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)

    Raises:
        VulkanSdkError: If resolving, downloading or installing fails
    """
    platform = detect_platform()
    logger.debug(f"Platform: {platform}")

    session = create_session()
    resolver = create_resolver(args, platform, session)

    inputs = load_inputs(
        platform,
        overrides=_overrides(args),
        config_path=args.config,
        resolver=resolver,
    )
    version = resolver.resolve_version(inputs.version)

    installer = get_installer(platform, inputs.installer_timeout)
    downloader = SdkDownloader(
        platform,
        session=session,
        download_base_url=download_base_url(args),
        download_dir=inputs.download_dir,
        installer=installer,
        progress_callback=_log_progress,
    )
    cache_bridge = CacheBridge(LocalCacheBackend(inputs.cache_dir)) if inputs.use_cache else None

    sdk = SdkInstaller(platform, downloader, cache_bridge, installer)
    result = sdk.get_sdk(inputs, version)

    if not result.verified and inputs.strict:
        raise InstallationFailedError(f"Could not find Vulkan SDK in {result.install_path}")

    if result.verified and not args.no_publish:
        EnvironmentPublisher(platform).publish(result)

    if platform.is_windows and inputs.install_runtime:
        if result.runtime_path is not None:
            logger.info(f"[INFO] Path to Vulkan Runtime: {result.runtime_path}")
        else:
            logger.warning(f"Could not find Vulkan Runtime in {result.install_path / 'runtime'}")

    safe_print(
        format_summary(
            "Vulkan SDK installed",
            {
                "Version": result.version,
                "Install path": result.install_path,
                "VULKAN_SDK": result.sdk_root,
                "Runtime": result.runtime_path,
                "From cache": result.from_cache,
                "Verified": result.verified,
            },
        )
    )
    return 0

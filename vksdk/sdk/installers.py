"""
Platform-specific Vulkan SDK installers.

Each supported platform tag has one PlatformInstaller implementation that
knows its download file names, its install procedure, its marker binary and
which parts of an install are safe to strip before caching:

- Windows: silent, elevated run of the vendor installer
- Linux: tarball extraction into ``destination/version``
- macOS: not implemented (raises InstallerNotImplementedError)
- anything else: no-op installer that only logs a warning

Usage:
    from vksdk.sdk.installers import get_installer

    installer = get_installer(detect_platform())
    install_path = installer.install(request)
    if not installer.verify(install_path):
        logger.warning("Could not find Vulkan SDK")
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Type

from vksdk.core.exceptions import (
    ArtifactNotFoundError,
    InstallationFailedError,
    InstallerNotImplementedError,
)
from vksdk.core.filesystem import (
    FilesystemError,
    extract_archive,
    recursive_copy,
    remove_paths,
    safe_rmtree,
    single_root_directory,
    temporary_directory,
)
from vksdk.core.platform import PlatformInfo, PlatformTag
from vksdk.sdk.models import ArtifactKind, InstallRequest

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_BASE_URL = "https://sdk.lunarg.com"
DEFAULT_INSTALLER_TIMEOUT = 1800

# List components on windows: "maintenancetool.exe list" or "installer.exe search"
# https://vulkan.lunarg.com/doc/view/latest/windows/getting_started.html#user-content-installing-optional-components
OPTIONAL_COMPONENTS_ALLOWLIST = (
    "com.lunarg.vulkan.32bit",
    "com.lunarg.vulkan.sdl2",
    "com.lunarg.vulkan.glm",
    "com.lunarg.vulkan.volk",
    "com.lunarg.vulkan.vma",
    "com.lunarg.vulkan.debug32",
    # components of old installers
    "com.lunarg.vulkan.thirdparty",
    "com.lunarg.vulkan.debug",
)


def filter_optional_components(components: Iterable[str]) -> List[str]:
    """
    Keep the allow-listed optional components, in their original order.

    Invalid entries are dropped and logged, never substituted. Duplicates
    are collapsed to their first occurrence, so filtering is idempotent.

    Example:
        >>> filter_optional_components(["a", "com.lunarg.vulkan.vma"])
        ['com.lunarg.vulkan.vma']
    """
    valid: List[str] = []
    invalid: List[str] = []
    for component in components:
        if component in OPTIONAL_COMPONENTS_ALLOWLIST:
            if component not in valid:
                valid.append(component)
        else:
            invalid.append(component)

    if invalid:
        logger.warning(
            f"Please remove the following invalid optional_components: {', '.join(invalid)}"
        )
    return valid


def _ps_quote(value) -> str:
    """Quote a value as a PowerShell single-quoted string."""
    return "'" + str(value).replace("'", "''") + "'"


class PlatformInstaller(ABC):
    """
    Base class for platform installers.

    Subclasses describe their artifacts and implement ``install``.
    """

    tag: Optional[PlatformTag] = None

    marker_binary: Tuple[str, ...] = ()
    """Path of the marker binary relative to the SDK root"""

    stripdown_dirs: Tuple[str, ...] = ()
    """Top-level folders that are safe to delete before caching"""

    def __init__(self, installer_timeout: int = DEFAULT_INSTALLER_TIMEOUT):
        self.installer_timeout = installer_timeout

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    def sdk_file_name(self, version: str) -> Optional[str]:
        """File name of the SDK download, None if there is no SDK artifact."""
        return None

    def runtime_file_name(self, version: str) -> Optional[str]:
        """File name of the runtime download, None if there is none."""
        return None

    def build_download_url(
        self,
        kind: ArtifactKind,
        version: str,
        base_url: str = DEFAULT_DOWNLOAD_BASE_URL,
    ) -> str:
        """
        Build the download URL for an artifact.

        Raises:
            ArtifactNotFoundError: If the platform has no such artifact
        """
        if kind == ArtifactKind.RUNTIME:
            file_name = self.runtime_file_name(version)
        else:
            file_name = self.sdk_file_name(version)

        base = f"{base_url.rstrip('/')}/sdk/download/{version}/{self.tag}"
        if file_name is None:
            raise ArtifactNotFoundError(f"{base}/<no {kind} artifact>", version)
        return f"{base}/{file_name}"

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    @abstractmethod
    def install(self, request: InstallRequest) -> Path:
        """
        Install the SDK described by ``request``.

        Returns:
            The versioned install path

        Raises:
            InstallationFailedError: If the install procedure fails
        """

    def check_installable(self):
        """
        Fail before any download when this installer cannot install an SDK.

        Raises:
            InstallerNotImplementedError: If the install procedure does not exist
        """

    def install_runtime(self, runtime_archive: Path, install_path: Path) -> Path:
        """Install the runtime component into ``install_path/runtime``."""
        raise InstallationFailedError(
            f"The Vulkan runtime component is not available on {self.tag}."
        )

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def default_destination(self, home: Path) -> Path:
        return Path(home) / "vulkan-sdk"

    def sdk_root(self, install_path: Path) -> Path:
        """Folder exported as VULKAN_SDK."""
        return Path(install_path)

    def marker_path(self, install_path: Path) -> Optional[Path]:
        if not self.marker_binary:
            return None
        return self.sdk_root(install_path).joinpath(*self.marker_binary)

    def verify(self, install_path: Path) -> bool:
        """Check that the marker binary exists."""
        marker = self.marker_path(install_path)
        return marker is not None and marker.exists()

    def verify_runtime(self, install_path: Path) -> bool:
        return False

    def stripdown(self, install_path: Path) -> List[Path]:
        """
        Delete demos, docs, templates and top-level loose files.

        Destructive: only call this on installs that are about to be cached.

        Paths that cannot be deleted are logged and skipped.

        Returns:
            The paths that were removed
        """
        install_path = Path(install_path)
        if not install_path.is_dir():
            return []

        logger.info("Reducing Vulkan SDK size before caching")
        candidates = [install_path / name for name in self.stripdown_dirs]
        candidates += [item for item in install_path.iterdir() if item.is_file()]

        removed: List[Path] = []
        for path in candidates:
            try:
                gone = remove_paths([path])
            except (FilesystemError, OSError) as e:
                logger.warning(f"Could not remove {path}: {e}")
                continue
            for item in gone:
                logger.info(f"Removed {item}")
            removed.extend(gone)
        return removed


class LinuxInstaller(PlatformInstaller):
    """Extracts the SDK tarball into ``destination/version``."""

    tag = PlatformTag.LINUX
    marker_binary = ("bin", "vulkaninfo")
    stripdown_dirs = ("samples", "source", "config")

    def sdk_file_name(self, version: str) -> str:
        return f"vulkansdk-linux-x86_64-{version}.tar.gz"

    def sdk_root(self, install_path: Path) -> Path:
        # https://vulkan.lunarg.com/doc/sdk/latest/linux/getting_started.html
        return Path(install_path) / "x86_64"

    def install(self, request: InstallRequest) -> Path:
        install_path = request.install_path
        # staging must live next to install_path, never inside it
        parent = install_path.parent

        logger.info(f"Extracting Vulkan SDK into {install_path}")
        try:
            with temporary_directory(prefix=".vksdk-extract-", parent=parent) as staging:
                extract_archive(request.source_archive_path, staging)
                root = single_root_directory(staging)

                if install_path.exists():
                    safe_rmtree(install_path, require_prefix=parent)
                shutil.move(str(root), str(install_path))
        except (FilesystemError, OSError) as e:
            raise InstallationFailedError(
                f"Extracting {request.source_archive_path} failed: {e}"
            ) from e

        return install_path


class MacInstaller(PlatformInstaller):
    """
    macOS installer.

    Installing from the disk image needs two steps that are not implemented:
    1. mount the dmg (hdiutil attach)
    2. sudo InstallVulkan.app/Contents/MacOS/InstallVulkan --root <path>
       --accept-licenses --default-answer --confirm-command install
    """

    tag = PlatformTag.MAC
    marker_binary = ("bin", "vulkaninfo")

    def sdk_file_name(self, version: str) -> str:
        return f"vulkansdk-macos-{version}.dmg"

    def sdk_root(self, install_path: Path) -> Path:
        return Path(install_path) / "macOS"

    def check_installable(self):
        raise InstallerNotImplementedError(
            "Installing the Vulkan SDK on macOS is not implemented: "
            "mounting the disk image and running the bundled installer is not supported yet."
        )

    def install(self, request: InstallRequest) -> Path:
        self.check_installable()
        return request.install_path


class WindowsInstaller(PlatformInstaller):
    """Runs the vendor installer silently with elevated privileges."""

    tag = PlatformTag.WINDOWS
    marker_binary = ("bin", "vulkaninfoSDK.exe")
    stripdown_dirs = ("Demos", "Helpers", "installerResources", "Licenses", "Templates")
    runtime_markers = (("runtime", "x64", "vulkan-1.dll"), ("runtime", "vulkan-1.dll"))

    def sdk_file_name(self, version: str) -> str:
        return f"VulkanSDK-{version}-Installer.exe"

    def runtime_file_name(self, version: str) -> str:
        return "vulkan-runtime-components.zip"

    def default_destination(self, home: Path) -> Path:
        return Path("C:\\VulkanSDK")

    def build_installer_args(self, request: InstallRequest) -> List[str]:
        """
        Build the silent installer argument list.

        The installation path cannot be relative and is double quoted so that
        paths with spaces stay one argument.
        """
        return [
            "--root",
            f'"{request.install_path}"',
            "--accept-licenses",
            "--default-answer",
            "--confirm-command",
            "install",
            *filter_optional_components(request.optional_components),
        ]

    def build_command(self, installer_path: Path, installer_args: str) -> List[str]:
        """
        Wrap the installer in an elevated, waiting Start-Process call.

        ``-Wait`` is required: verification fails if the installer is still
        writing files. ``-PassThru`` exposes the installer's exit code.
        """
        script = (
            f"$p = Start-Process -FilePath {_ps_quote(installer_path)} "
            f"-ArgumentList {_ps_quote(installer_args)} -Verb RunAs -Wait -PassThru; "
            "exit $p.ExitCode"
        )
        return ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command", script]

    def install(self, request: InstallRequest) -> Path:
        installer_args = " ".join(self.build_installer_args(request))
        cmd = self.build_command(request.source_archive_path, installer_args)

        logger.info(f"Running Vulkan SDK installer into {request.install_path}")
        logger.debug(f"Command: {cmd}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.installer_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise InstallationFailedError(
                f"Installer did not finish within {self.installer_timeout}s.",
                installer_args,
            ) from e
        except OSError as e:
            raise InstallationFailedError(
                f"Installer could not be started: {e}.", installer_args
            ) from e

        if result.returncode != 0:
            logger.error(result.stderr.strip() or result.stdout.strip())
            raise InstallationFailedError(
                f"Installer failed with exit code {result.returncode}.",
                installer_args,
            )

        return request.install_path

    def install_runtime(self, runtime_archive: Path, install_path: Path) -> Path:
        """
        Install vulkan-runtime-components (vulkan-1.dll for x86 and x64).

        The zip wraps everything in a top-level folder such as
        VulkanRT-1.3.250.1-Components. Its contents are copied into
        ``install_path/runtime`` so the result is runtime/x64/vulkan-1.dll.
        """
        runtime_path = Path(install_path) / "runtime"
        logger.info("Extracting Vulkan Runtime (vulkan-1.dll)")

        try:
            with temporary_directory(prefix="vulkan-runtime-") as staging:
                extract_archive(runtime_archive, staging)
                recursive_copy(single_root_directory(staging), runtime_path)
        except (FilesystemError, OSError) as e:
            raise InstallationFailedError(
                f"Extracting {runtime_archive} failed: {e}"
            ) from e

        return runtime_path

    def verify_runtime(self, install_path: Path) -> bool:
        return any(Path(install_path).joinpath(*m).exists() for m in self.runtime_markers)


class UnsupportedInstaller(PlatformInstaller):
    """Degraded installer for hosts without a Vulkan SDK package."""

    def __init__(self, tag: str, installer_timeout: int = DEFAULT_INSTALLER_TIMEOUT):
        super().__init__(installer_timeout)
        self.tag = tag

    def install(self, request: InstallRequest) -> Path:
        logger.warning(
            f"There is no Vulkan SDK installer for platform '{self.tag}', skipping install."
        )
        return request.install_path


_INSTALLERS: Dict[PlatformTag, Type[PlatformInstaller]] = {
    PlatformTag.WINDOWS: WindowsInstaller,
    PlatformTag.LINUX: LinuxInstaller,
    PlatformTag.MAC: MacInstaller,
}


def get_installer(
    platform: PlatformInfo, installer_timeout: int = DEFAULT_INSTALLER_TIMEOUT
) -> PlatformInstaller:
    """Select the installer for a platform."""
    installer_cls = _INSTALLERS.get(platform.tag) if platform.is_supported else None
    if installer_cls is None:
        return UnsupportedInstaller(platform.name, installer_timeout)
    return installer_cls(installer_timeout)


__all__ = [
    "OPTIONAL_COMPONENTS_ALLOWLIST",
    "filter_optional_components",
    "PlatformInstaller",
    "LinuxInstaller",
    "MacInstaller",
    "WindowsInstaller",
    "UnsupportedInstaller",
    "get_installer",
]

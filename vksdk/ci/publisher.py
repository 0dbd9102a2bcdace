"""
Publishes the installed SDK to the calling CI environment.

Sets the variables of the LunarG ``setup-env.sh`` script ourselves:

    PATH=$VULKAN_SDK/bin:$PATH
    VULKAN_SDK=<sdk root>
    VULKAN_VERSION=<version>
    LD_LIBRARY_PATH=$VULKAN_SDK/lib:$LD_LIBRARY_PATH       (linux)
    VK_LAYER_PATH=$VULKAN_SDK/etc/vulkan/explicit_layer.d  (linux)

Under GitHub Actions the values are also appended to the ``GITHUB_ENV`` and
``GITHUB_PATH`` files so later steps see them.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Set, Union

from vksdk.core.platform import PlatformInfo
from vksdk.sdk.installers import get_installer
from vksdk.sdk.models import InstallResult

logger = logging.getLogger(__name__)


class EnvironmentPublisher:
    """
    Exports SDK paths and variables.

    Publishing is idempotent: PATH-like entries are never duplicated and each
    value is written to the GitHub files at most once per publisher.

    Example:
        >>> publisher = EnvironmentPublisher(detect_platform())
        >>> publisher.publish(result)
        >>> os.environ["VULKAN_SDK"]
        '/home/runner/vulkan-sdk/1.3.250.1/x86_64'
    """

    def __init__(
        self,
        platform: PlatformInfo,
        environ: Optional[MutableMapping[str, str]] = None,
        github_env: Optional[Union[str, Path]] = None,
        github_path: Optional[Union[str, Path]] = None,
    ):
        self.platform = platform
        self.environ = os.environ if environ is None else environ

        if github_env is None:
            github_env = self.environ.get("GITHUB_ENV")
        if github_path is None:
            github_path = self.environ.get("GITHUB_PATH")

        self.github_env = Path(github_env) if github_env else None
        self.github_path = Path(github_path) if github_path else None

        self._exported: Dict[str, str] = {}
        self._added_paths: Set[str] = set()

    def publish(self, install: Union[InstallResult, str, Path], version: Optional[str] = None):
        """
        Publish an install.

        Args:
            install: InstallResult, or the versioned install path
            version: SDK version, required when ``install`` is a path
        """
        if isinstance(install, InstallResult):
            sdk_root = install.sdk_root
            version = install.version
        else:
            if version is None:
                raise ValueError("version is required when publishing an install path")
            sdk_root = get_installer(self.platform).sdk_root(Path(install))

        self.add_path(Path(sdk_root) / "bin")
        logger.info("[PATH] Added path to Vulkan SDK to environment variable PATH.")

        self.export_variable("VULKAN_SDK", str(sdk_root))
        self.export_variable("VULKAN_VERSION", version)

        if self.platform.is_linux:
            self.export_variable(
                "VK_LAYER_PATH", str(Path(sdk_root) / "etc" / "vulkan" / "explicit_layer.d")
            )
            self.prepend_variable("LD_LIBRARY_PATH", str(Path(sdk_root) / "lib"))

    def export_variable(self, name: str, value: str):
        """Set ``name`` in the environment and the GitHub env file."""
        self.environ[name] = value
        logger.info(f'[ENV] Set env variable {name} -> "{value}".')

        if self.github_env is None or self._exported.get(name) == value:
            return

        # heredoc form, safe for values containing newlines or '='
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with open(self.github_env, "a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        self._exported[name] = value

    def prepend_variable(self, name: str, entry: str):
        """Prepend ``entry`` to a path-list variable unless it is already there."""
        current = self.environ.get(name, "")
        entries = [e for e in current.split(os.pathsep) if e]
        if entry in entries:
            value = current
        else:
            value = os.pathsep.join([entry] + entries)
        self.export_variable(name, value)

    def add_path(self, entry: Union[str, Path]):
        """Prepend ``entry`` to PATH and register it in the GitHub path file."""
        entry = str(entry)

        current = self.environ.get("PATH", "")
        entries = current.split(os.pathsep) if current else []
        if entry not in entries:
            self.environ["PATH"] = os.pathsep.join([entry] + entries)

        if self.github_path is not None and entry not in self._added_paths:
            with open(self.github_path, "a", encoding="utf-8") as f:
                f.write(f"{entry}\n")
            self._added_paths.add(entry)

"""
Data types shared by the download and install orchestration.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class ArtifactKind(str, Enum):
    """Downloadable artifacts."""

    SDK = "sdk"
    RUNTIME = "runtime"  # windows-only vulkan-runtime-components.zip

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DownloadDescriptor:
    """A probed, downloadable artifact. Consumed once by the download step."""

    version: str
    url: str
    kind: ArtifactKind

    @property
    def file_name(self) -> str:
        """Versioned file name used for the local copy."""
        if self.kind == ArtifactKind.RUNTIME:
            return f"vulkan-runtime-components-{self.version}.zip"
        return self.url.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class InstallRequest:
    """Everything a platform installer needs for one SDK install."""

    source_archive_path: Path
    destination_root: Path
    version: str
    optional_components: Tuple[str, ...] = ()

    @property
    def install_path(self) -> Path:
        """Versioned install folder, e.g. C:\\VulkanSDK\\1.3.250.1."""
        return versioned_path(self.destination_root, self.version)


@dataclass
class InstallResult:
    """Outcome of the acquire/install pipeline."""

    install_path: Path
    """Versioned install folder"""

    sdk_root: Path
    """Folder exported as VULKAN_SDK"""

    version: str
    """Concrete SDK version"""

    verified: bool = False
    """Whether the marker binary was found"""

    from_cache: bool = False
    """Whether the install was restored from the cache"""

    runtime_path: Optional[Path] = None
    """Windows runtime folder, if the runtime was requested"""

    removed_paths: list = field(default_factory=list)
    """Paths deleted by the stripdown step"""


def versioned_path(destination_root: Path, version: str) -> Path:
    """Return ``destination_root/version`` unless it already ends with the version."""
    destination_root = Path(destination_root)
    if destination_root.name == version:
        return destination_root
    return destination_root / version

"""
Pytest configuration and shared fixtures for vksdk tests.
"""

import io
import logging
import tarfile
import zipfile
from pathlib import Path

import pytest

from vksdk.core.platform import PlatformInfo, PlatformTag, clear_platform_cache

SDK_VERSION = "1.3.250.1"

LATEST_JSON = {"windows": "1.3.250.1", "linux": "1.3.250.2", "mac": "1.3.250.3"}


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Every test sees a freshly detected platform."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture(autouse=True)
def _restore_log_level():
    """CLI runs reconfigure the root logger."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


# ============================================================================
# Platforms
# ============================================================================


@pytest.fixture
def linux_platform() -> PlatformInfo:
    return PlatformInfo(PlatformTag.LINUX, "x64", "linux")


@pytest.fixture
def windows_platform() -> PlatformInfo:
    return PlatformInfo(PlatformTag.WINDOWS, "x64", "windows")


@pytest.fixture
def mac_platform() -> PlatformInfo:
    return PlatformInfo(PlatformTag.MAC, "arm64", "darwin")


@pytest.fixture
def unsupported_platform() -> PlatformInfo:
    return PlatformInfo("freebsd", "x64", "freebsd")


# ============================================================================
# Archives
# ============================================================================


def _add_file(tar: tarfile.TarFile, name: str, content: bytes = b"data"):
    info = tarfile.TarInfo(name)
    info.size = len(content)
    info.mode = 0o755
    tar.addfile(info, io.BytesIO(content))


@pytest.fixture
def make_sdk_tarball(tmp_path):
    """
    Factory for a Linux SDK tarball laid out like the LunarG one:

        1.3.250.1/x86_64/bin/vulkaninfo
        1.3.250.1/x86_64/lib/libvulkan.so
        1.3.250.1/samples/...
        1.3.250.1/setup-env.sh
    """

    def _make(version: str = SDK_VERSION, with_marker: bool = True) -> Path:
        archive = tmp_path / f"vulkansdk-linux-x86_64-{version}.tar.gz"
        with tarfile.open(archive, "w:gz") as tar:
            if with_marker:
                _add_file(tar, f"{version}/x86_64/bin/vulkaninfo", b"#!/bin/sh\n")
            _add_file(tar, f"{version}/x86_64/lib/libvulkan.so")
            _add_file(tar, f"{version}/samples/build.sh")
            _add_file(tar, f"{version}/source/README")
            _add_file(tar, f"{version}/config/vk_layer_settings.txt")
            _add_file(tar, f"{version}/setup-env.sh")
        return archive

    return _make


@pytest.fixture
def make_runtime_zip(tmp_path):
    """Factory for vulkan-runtime-components.zip with its wrapper folder."""

    def _make(version: str = SDK_VERSION) -> Path:
        archive = tmp_path / f"vulkan-runtime-components-{version}.zip"
        wrapper = f"VulkanRT-{version}-Components"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr(f"{wrapper}/x64/vulkan-1.dll", b"dll64")
            zf.writestr(f"{wrapper}/x86/vulkan-1.dll", b"dll32")
        return archive

    return _make


@pytest.fixture
def fake_windows_install(tmp_path):
    """A windows SDK install folder as the vendor installer leaves it."""
    install = tmp_path / "VulkanSDK" / SDK_VERSION
    (install / "bin").mkdir(parents=True)
    (install / "bin" / "vulkaninfoSDK.exe").write_bytes(b"exe")
    for name in ("Demos", "Helpers", "installerResources", "Licenses", "Templates"):
        (install / name).mkdir()
        (install / name / "file.txt").write_text("x")
    (install / "maintenancetool.exe").write_bytes(b"exe")
    (install / "Include").mkdir()
    return install

"""
Tests for the platform installers.
"""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from vksdk.core.exceptions import (
    ArtifactNotFoundError,
    InstallationFailedError,
    InstallerNotImplementedError,
)
from vksdk.sdk.installers import (
    LinuxInstaller,
    MacInstaller,
    UnsupportedInstaller,
    WindowsInstaller,
    filter_optional_components,
    get_installer,
)
from vksdk.sdk.models import ArtifactKind, InstallRequest

VERSION = "1.3.250.1"


class TestFilterOptionalComponents:
    """Test filter_optional_components()."""

    def test_keeps_allowed_in_order(self):
        """Test valid components keep their order."""
        components = ["com.lunarg.vulkan.vma", "com.lunarg.vulkan.32bit"]

        assert filter_optional_components(components) == components

    def test_drops_invalid(self, caplog):
        """Test invalid entries are dropped and logged, never substituted."""
        result = filter_optional_components(["bogus", "com.lunarg.vulkan.glm"])

        assert result == ["com.lunarg.vulkan.glm"]
        assert "bogus" in caplog.text

    def test_idempotent(self):
        """Test filtering a filtered list changes nothing."""
        once = filter_optional_components(
            ["com.lunarg.vulkan.volk", "x", "com.lunarg.vulkan.volk", "com.lunarg.vulkan.sdl2"]
        )

        assert filter_optional_components(once) == once
        assert once == ["com.lunarg.vulkan.volk", "com.lunarg.vulkan.sdl2"]


class TestGetInstaller:
    """Test installer selection."""

    def test_dispatch(self, linux_platform, windows_platform, mac_platform):
        """Test one installer class per platform tag."""
        assert isinstance(get_installer(linux_platform), LinuxInstaller)
        assert isinstance(get_installer(windows_platform), WindowsInstaller)
        assert isinstance(get_installer(mac_platform), MacInstaller)

    def test_unsupported(self, unsupported_platform):
        """Test unknown tags get the no-op installer."""
        installer = get_installer(unsupported_platform)

        assert isinstance(installer, UnsupportedInstaller)
        assert installer.tag == "freebsd"

    def test_timeout_is_passed(self, windows_platform):
        """Test the installer timeout is configurable."""
        assert get_installer(windows_platform, installer_timeout=60).installer_timeout == 60


class TestLinuxInstaller:
    """Test the tarball installer."""

    def test_install_extracts_to_versioned_path(self, tmp_path, make_sdk_tarball):
        """Test the tarball lands in destination/version."""
        archive = make_sdk_tarball()
        dest = tmp_path / "vulkan-sdk"
        installer = LinuxInstaller()

        install_path = installer.install(InstallRequest(archive, dest, VERSION))

        assert install_path == dest / VERSION
        assert (install_path / "x86_64" / "bin" / "vulkaninfo").exists()
        assert installer.verify(install_path)
        assert installer.sdk_root(install_path) == install_path / "x86_64"
        assert sorted(p.name for p in dest.iterdir()) == [VERSION]

    def test_install_replaces_partial_install(self, tmp_path, make_sdk_tarball):
        """Test a leftover folder is replaced."""
        dest = tmp_path / "vulkan-sdk"
        (dest / VERSION / "stale").mkdir(parents=True)

        install_path = LinuxInstaller().install(
            InstallRequest(make_sdk_tarball(), dest, VERSION)
        )

        assert not (install_path / "stale").exists()

    def test_install_destination_ending_in_version(self, tmp_path, make_sdk_tarball):
        """Test a destination that already names the version is used as is."""
        dest = tmp_path / VERSION

        install_path = LinuxInstaller().install(
            InstallRequest(make_sdk_tarball(), dest, VERSION)
        )

        assert install_path == dest
        assert (dest / "x86_64" / "bin" / "vulkaninfo").exists()

    def test_bad_archive(self, tmp_path):
        """Test extraction failures raise InstallationFailedError."""
        archive = tmp_path / "vulkansdk-linux-x86_64-1.3.250.1.tar.gz"
        archive.write_bytes(b"not a tarball")

        with pytest.raises(InstallationFailedError, match="Extracting"):
            LinuxInstaller().install(InstallRequest(archive, tmp_path / "dest", VERSION))

        assert not (tmp_path / "dest" / VERSION).exists()

    def test_verify_missing_marker(self, tmp_path):
        """Test verification fails without vulkaninfo."""
        assert LinuxInstaller().verify(tmp_path) is False

    def test_stripdown(self, tmp_path, make_sdk_tarball):
        """Test samples, source, config and loose files are removed."""
        installer = LinuxInstaller()
        install_path = installer.install(
            InstallRequest(make_sdk_tarball(), tmp_path / "sdk", VERSION)
        )

        removed = installer.stripdown(install_path)

        assert sorted(p.name for p in removed) == ["config", "samples", "setup-env.sh", "source"]
        assert sorted(p.name for p in install_path.iterdir()) == ["x86_64"]
        assert installer.verify(install_path)

    def test_default_destination(self, tmp_path):
        """Test the default destination is ~/vulkan-sdk."""
        assert LinuxInstaller().default_destination(tmp_path) == tmp_path / "vulkan-sdk"


class TestMacInstaller:
    """Test the placeholder mac installer."""

    def test_install_not_implemented(self, tmp_path):
        """Test install never reports success."""
        request = InstallRequest(tmp_path / "vulkansdk-macos-1.3.250.1.dmg", tmp_path, VERSION)

        with pytest.raises(InstallerNotImplementedError):
            MacInstaller().install(request)

    def test_check_installable(self):
        """Test mac reports the missing install procedure up front."""
        with pytest.raises(InstallerNotImplementedError, match="macOS"):
            MacInstaller().check_installable()

        LinuxInstaller().check_installable()
        WindowsInstaller().check_installable()

    def test_error_types(self):
        """Test the error is both an install failure and NotImplementedError."""
        assert issubclass(InstallerNotImplementedError, InstallationFailedError)
        assert issubclass(InstallerNotImplementedError, NotImplementedError)

    def test_layout(self, tmp_path):
        """Test the mac SDK root and marker."""
        installer = MacInstaller()

        assert installer.sdk_root(tmp_path) == tmp_path / "macOS"
        assert installer.marker_path(tmp_path) == tmp_path / "macOS" / "bin" / "vulkaninfo"


class TestWindowsInstaller:
    """Test the elevated vendor installer invocation."""

    def _request(self, tmp_path, components=()):
        return InstallRequest(
            tmp_path / "VulkanSDK-1.3.250.1-Installer.exe",
            Path("C:/VulkanSDK"),
            VERSION,
            tuple(components),
        )

    def test_installer_args(self, tmp_path):
        """Test the silent install arguments and filtered components."""
        request = self._request(tmp_path, ["com.lunarg.vulkan.vma", "bogus"])

        args = WindowsInstaller().build_installer_args(request)

        assert args == [
            "--root",
            f'"{request.install_path}"',
            "--accept-licenses",
            "--default-answer",
            "--confirm-command",
            "install",
            "com.lunarg.vulkan.vma",
        ]

    def test_command_waits_elevated(self, tmp_path):
        """Test the installer runs elevated and is waited for."""
        cmd = WindowsInstaller().build_command(tmp_path / "setup.exe", "--root C:/x")

        assert cmd[0] == "powershell.exe"
        script = cmd[-1]
        assert "-Verb RunAs" in script
        assert "-Wait" in script
        assert "-ArgumentList '--root C:/x'" in script
        assert "exit $p.ExitCode" in script

    def test_command_quotes_paths(self, tmp_path):
        """Test spaces and single quotes survive the PowerShell script."""
        request = InstallRequest(
            tmp_path / "setup.exe", Path("C:/Program Files/O'Brien SDK"), VERSION
        )
        args = " ".join(WindowsInstaller().build_installer_args(request))

        script = WindowsInstaller().build_command(Path("C:/Temp/it's/setup.exe"), args)[-1]

        assert "-FilePath 'C:/Temp/it''s/setup.exe'" in script
        assert (
            "-ArgumentList '--root \"C:/Program Files/O''Brien SDK/1.3.250.1\" "
            "--accept-licenses"
        ) in script

    @patch("vksdk.sdk.installers.subprocess.run")
    def test_install_success(self, mock_run, tmp_path):
        """Test a zero exit code returns the install path."""
        mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
        request = self._request(tmp_path)

        result = WindowsInstaller(installer_timeout=120).install(request)

        assert result == request.install_path
        assert mock_run.call_args.kwargs["timeout"] == 120

    @patch("vksdk.sdk.installers.subprocess.run")
    def test_install_nonzero_exit(self, mock_run, tmp_path):
        """Test a non-zero exit raises with the argument string."""
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="denied")

        with pytest.raises(InstallationFailedError) as exc_info:
            WindowsInstaller().install(self._request(tmp_path))

        assert "--accept-licenses" in exc_info.value.arguments
        assert "Arguments used:" in str(exc_info.value)

    @patch("vksdk.sdk.installers.subprocess.run")
    def test_install_timeout(self, mock_run, tmp_path):
        """Test the deadline turns into InstallationFailedError."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="powershell.exe", timeout=5)

        with pytest.raises(InstallationFailedError, match="did not finish within"):
            WindowsInstaller(installer_timeout=5).install(self._request(tmp_path))

    @patch("vksdk.sdk.installers.subprocess.run")
    def test_install_launch_error(self, mock_run, tmp_path):
        """Test a missing powershell raises InstallationFailedError."""
        mock_run.side_effect = FileNotFoundError("powershell.exe")

        with pytest.raises(InstallationFailedError, match="could not be started"):
            WindowsInstaller().install(self._request(tmp_path))

    def test_install_runtime(self, tmp_path, make_runtime_zip):
        """Test the runtime lands in runtime/<arch> without the wrapper folder."""
        install_path = tmp_path / "VulkanSDK" / VERSION
        installer = WindowsInstaller()

        runtime_path = installer.install_runtime(make_runtime_zip(), install_path)

        assert runtime_path == install_path / "runtime"
        assert (runtime_path / "x64" / "vulkan-1.dll").read_bytes() == b"dll64"
        assert (runtime_path / "x86" / "vulkan-1.dll").exists()
        assert installer.verify_runtime(install_path)

    def test_install_runtime_cleans_staging(self, tmp_path, make_runtime_zip):
        """Test the staging directory is removed."""
        archive = make_runtime_zip()

        with patch("vksdk.sdk.installers.temporary_directory") as mock_temp:
            staging = tmp_path / "staging"
            mock_temp.return_value.__enter__.return_value = staging
            WindowsInstaller().install_runtime(archive, tmp_path / "install")

        mock_temp.return_value.__exit__.assert_called_once()

    def test_install_runtime_bad_zip(self, tmp_path):
        """Test a broken runtime zip raises InstallationFailedError."""
        archive = tmp_path / "vulkan-runtime-components-1.3.250.1.zip"
        archive.write_bytes(b"nope")

        with pytest.raises(InstallationFailedError):
            WindowsInstaller().install_runtime(archive, tmp_path / "install")

    def test_verify_runtime_fallback_marker(self, tmp_path):
        """Test runtime/vulkan-1.dll is accepted as well."""
        (tmp_path / "runtime").mkdir()
        (tmp_path / "runtime" / "vulkan-1.dll").write_bytes(b"x")

        assert WindowsInstaller().verify_runtime(tmp_path)

    def test_stripdown(self, fake_windows_install):
        """Test demos, helpers, licenses, templates and loose files are removed."""
        installer = WindowsInstaller()

        removed = installer.stripdown(fake_windows_install)

        assert len(removed) == 6
        assert sorted(p.name for p in fake_windows_install.iterdir()) == ["Include", "bin"]
        assert installer.verify(fake_windows_install)

    def test_default_destination(self, tmp_path):
        """Test the default windows destination."""
        assert WindowsInstaller().default_destination(tmp_path) == Path("C:\\VulkanSDK")


class TestUnsupportedInstaller:
    """Test the degraded installer."""

    def test_install_is_noop(self, tmp_path, caplog):
        """Test nothing is written and a warning is logged."""
        installer = UnsupportedInstaller("freebsd")

        result = installer.install(InstallRequest(Path(), tmp_path, VERSION))

        assert result == tmp_path / VERSION
        assert list(tmp_path.iterdir()) == []
        assert "freebsd" in caplog.text
        assert installer.verify(result) is False

    def test_no_artifacts(self):
        """Test there is nothing to download."""
        with pytest.raises(ArtifactNotFoundError):
            UnsupportedInstaller("freebsd").build_download_url(ArtifactKind.SDK, VERSION)

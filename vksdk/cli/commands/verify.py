"""
Verify command implementation.

Checks the marker binaries of an installed SDK.
"""

import logging

from vksdk.cli.utils import safe_print
from vksdk.core.platform import detect_platform
from vksdk.sdk.installers import get_installer

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if all checks pass, 1 otherwise)
    """
    platform = detect_platform()
    installer = get_installer(platform)
    install_path = args.install_path

    ok = True
    if installer.verify(install_path):
        safe_print(f"[OK] Vulkan SDK: {installer.marker_path(install_path)}")
    else:
        logger.error(f"Could not find Vulkan SDK in {install_path}")
        ok = False

    if args.runtime:
        runtime_path = install_path / "runtime"
        if installer.verify_runtime(install_path):
            safe_print(f"[OK] Vulkan Runtime: {runtime_path}")
        else:
            logger.error(f"Could not find Vulkan Runtime in {runtime_path}")
            ok = False

    return 0 if ok else 1

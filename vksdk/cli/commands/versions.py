"""
Versions command implementation.

Lists the SDK versions published for the current platform.
"""

import logging

from vksdk.cli.utils import create_resolver, safe_print
from vksdk.core.platform import detect_platform

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the versions command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    platform = detect_platform()
    resolver = create_resolver(args, platform)

    if args.latest:
        for name, latest in resolver.get_latest_versions().items():
            safe_print(f"{name}: {latest}")
        return 0

    versions = resolver.get_available_versions()
    logger.debug(f"{len(versions)} versions available for {platform.name}")
    for v in versions:
        safe_print(v)
    return 0

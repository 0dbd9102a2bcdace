"""
Resolve command implementation.

Prints the concrete SDK version a version token resolves to.
"""

import logging

from vksdk.cli.utils import create_resolver, safe_print
from vksdk.config.inputs import get_input_version
from vksdk.core.platform import detect_platform

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    platform = detect_platform()
    resolver = create_resolver(args, platform)

    requested = get_input_version(args.vulkan_version, resolver)
    logger.debug(f"Resolving '{requested}' for {platform}")

    safe_print(resolver.resolve_version(requested))
    return 0

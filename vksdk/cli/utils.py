"""
Shared utilities for CLI commands.
"""

import logging
from typing import Any, Dict, Optional

from vksdk.core.http import create_session
from vksdk.core.platform import PlatformInfo
from vksdk.sdk.installers import DEFAULT_DOWNLOAD_BASE_URL
from vksdk.sdk.versions import DEFAULT_API_BASE_URL, VersionResolver

logger = logging.getLogger(__name__)


def create_resolver(args, platform: PlatformInfo, session=None) -> VersionResolver:
    """Version resolver honoring the global --api-url option."""
    return VersionResolver(
        platform,
        session=session or create_session(),
        api_base_url=getattr(args, "api_url", None) or DEFAULT_API_BASE_URL,
    )


def download_base_url(args) -> str:
    return getattr(args, "download_url", None) or DEFAULT_DOWNLOAD_BASE_URL


def format_summary(title: str, details: Dict[str, Any], width: int = 70) -> str:
    """
    Format a boxed summary.

    Args:
        title: Summary title
        details: Key-value pairs to display, None values are skipped
        width: Width of the box
    """
    lines = ["=" * width, title, "=" * width]
    for key, value in details.items():
        if value is not None:
            lines.append(f"{key}: {value}")
    lines.append("")
    return "\n".join(lines)


def safe_print(message: str, file: Optional[Any] = None):
    """Print, replacing characters the console cannot encode."""
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        print(message.encode("ascii", "replace").decode("ascii"), file=file)

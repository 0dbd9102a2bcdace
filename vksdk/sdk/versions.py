"""
Vulkan SDK version resolution.

Turns a user-supplied version token into a concrete dotted version. The token
"latest" (or an empty token) is resolved through the LunarG version query API,
which publishes a separate latest version per platform.

See https://vulkan.lunarg.com/content/view/latest-sdk-version-api
"""

import logging
import re
from typing import Dict, List, Optional

import requests
from requests.exceptions import RequestException

from vksdk.core.exceptions import VersionResolutionError
from vksdk.core.http import create_session, get_json
from vksdk.core.platform import PlatformInfo

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://vulkan.lunarg.com"
LATEST = "latest"

_CONCRETE_VERSION = re.compile(r"^\d+\.\d+\.\d+\.\d+$")


def is_concrete_version(version: str) -> bool:
    """
    Check whether a token is a literal ``major.minor.build.rev`` version.

    Example:
        >>> is_concrete_version("1.3.250.1")
        True
        >>> is_concrete_version("1.3-rc")
        False
    """
    return bool(_CONCRETE_VERSION.match(version))


def validate_version(version: str) -> bool:
    """Accept "latest" or a concrete dotted version."""
    return version == LATEST or is_concrete_version(version)


class VersionResolver:
    """
    Resolves version tokens against the LunarG version endpoints.

    Example:
        >>> resolver = VersionResolver(detect_platform())
        >>> resolver.resolve_version("latest")
        '1.3.250.1'
    """

    def __init__(
        self,
        platform: PlatformInfo,
        session: Optional[requests.Session] = None,
        api_base_url: str = DEFAULT_API_BASE_URL,
    ):
        self.platform = platform
        self.session = session or create_session()
        self.api_base_url = api_base_url.rstrip("/")

    @property
    def latest_url(self) -> str:
        return f"{self.api_base_url}/sdk/latest.json"

    @property
    def versions_url(self) -> str:
        return f"{self.api_base_url}/sdk/versions/{self.platform.name}.json"

    def get_latest_versions(self) -> Dict[str, str]:
        """
        Get the latest version of every platform.

        Returns:
            Mapping like {"windows": "1.3.250.1", "linux": "1.3.250.1", "mac": "1.3.250.1"}

        Raises:
            VersionResolutionError: If the endpoint fails or returns no mapping
        """
        url = self.latest_url
        try:
            result = get_json(self.session, url)
        except (RequestException, ValueError) as e:
            raise VersionResolutionError(
                f"Unable to retrieve the latest version information from '{url}': {e}"
            ) from e

        if not result or not isinstance(result, dict):
            raise VersionResolutionError(
                f"Unable to retrieve the latest version information from '{url}'"
            )
        return result

    def get_available_versions(self) -> List[str]:
        """
        Get all versions published for the current platform.

        Raises:
            VersionResolutionError: If the endpoint fails or returns no list
        """
        url = self.versions_url
        try:
            result = get_json(self.session, url)
        except (RequestException, ValueError) as e:
            raise VersionResolutionError(
                f"Unable to retrieve the list of all available Vulkan SDK versions from '{url}': {e}"
            ) from e

        if not isinstance(result, dict) or not isinstance(result.get("versions"), list):
            raise VersionResolutionError(
                f"Unable to retrieve the list of all available Vulkan SDK versions from '{url}'"
            )
        return [str(v) for v in result["versions"]]

    def resolve_version(self, requested: str) -> str:
        """
        Resolve a version token to a concrete version.

        Args:
            requested: Concrete version, "latest" or empty

        Returns:
            Concrete dotted version, never empty

        Raises:
            VersionResolutionError: If the token is malformed, the query fails,
                or there is no entry for this platform
        """
        requested = (requested or "").strip()

        if is_concrete_version(requested):
            return requested

        if requested not in ("", LATEST):
            raise VersionResolutionError(
                f"Invalid version '{requested}'. "
                "Use 'latest' or the format 'major.minor.build.rev'."
            )

        latest_versions = self.get_latest_versions()
        version = latest_versions.get(self.platform.name)
        if not version:
            raise VersionResolutionError(
                f"The latest version information has no entry for platform "
                f"'{self.platform.name}'"
            )

        logger.info(f"Latest Version: {version}")
        return str(version)

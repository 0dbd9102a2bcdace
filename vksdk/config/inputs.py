"""
Run inputs for the Vulkan SDK installer.

Inputs use the GitHub Actions names (``vulkan_version``, ``destination``,
``install_runtime``, ``cache``, ``optional_components``, ``stripdown``) and are
merged with the precedence:

    CLI flags > INPUT_* environment variables > vksdk.yaml > defaults

Example vksdk.yaml::

    vulkan_version: 1.3.250.1
    destination: ~/vulkan-sdk
    cache: true
    stripdown: true
    optional_components: com.lunarg.vulkan.vma, com.lunarg.vulkan.volk
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import yaml

from vksdk.core.exceptions import InvalidInputError, VersionResolutionError
from vksdk.core.platform import PlatformInfo
from vksdk.sdk.installers import (
    DEFAULT_INSTALLER_TIMEOUT,
    filter_optional_components,
    get_installer,
)
from vksdk.sdk.versions import LATEST, VersionResolver, validate_version

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "vksdk.yaml"
ENV_PREFIX = "INPUT_"

# Input names, in the order they are reported
INPUT_NAMES = (
    # Intentionally not "version": workflows often export VERSION for artifact names
    "vulkan_version",
    "destination",
    "install_runtime",
    "cache",
    "optional_components",
    "stripdown",
    "installer_timeout",
    "cache_dir",
    "download_dir",
    "strict",
)


@dataclass
class Inputs:
    """Validated run inputs."""

    version: str = LATEST
    destination: Optional[Path] = None
    install_runtime: bool = False
    use_cache: bool = False
    optional_components: List[str] = field(default_factory=list)
    stripdown: bool = False
    installer_timeout: int = DEFAULT_INSTALLER_TIMEOUT
    cache_dir: Optional[Path] = None
    download_dir: Optional[Path] = None
    strict: bool = False  # fail the run when verification fails


def default_cache_dir() -> Path:
    return Path.home() / ".vksdk" / "cache"


def parse_bool(value: Any) -> bool:
    """Interpret an input as a boolean; only "true" (any case) is true."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() == "true"


def parse_optional_components(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Parse a comma separated component list and filter it against the allow-list.

    Example:
        >>> parse_optional_components("com.lunarg.vulkan.vma, bogus")
        ['com.lunarg.vulkan.vma']
    """
    if not value:
        return []

    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)

    components = [str(item).strip() for item in items]
    valid = filter_optional_components(c for c in components if c)

    if valid:
        logger.info(f"Installing Optional Components: {', '.join(valid)}")
    return valid


def get_input_version(version: Optional[str], resolver: Optional[VersionResolver] = None) -> str:
    """
    Validate the requested version token.

    Args:
        version: Requested version, empty means "latest"
        resolver: Used to list the available versions in the error message

    Raises:
        InvalidInputError: If the token is neither "latest" nor a dotted version
    """
    requested = (version or "").strip()
    if requested == "":
        return LATEST

    if validate_version(requested):
        return requested

    available = "(not retrieved)"
    if resolver is not None:
        try:
            available = ", ".join(resolver.get_available_versions())
        except VersionResolutionError as e:
            logger.debug(f"Could not list available versions: {e}")
            available = "(the list of available versions could not be retrieved)"

    raise InvalidInputError(
        f'Invalid format of "vulkan_version: ({requested})". '
        "Please specify a version using the format 'major.minor.build.rev'. "
        f"The following versions are available: {available}."
    )


def get_input_destination(
    destination: Optional[Union[str, Path]],
    platform: PlatformInfo,
    home: Optional[Path] = None,
) -> Path:
    """Normalize the destination, falling back to the platform default."""
    if destination is None or str(destination).strip() == "":
        path = get_installer(platform).default_destination(home or Path.home())
    else:
        path = Path(os.path.expanduser(str(destination).strip()))

    path = Path(os.path.normpath(path))
    logger.info(f"Destination: {path}")
    return path


def read_env_inputs(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Collect ``INPUT_<NAME>`` variables set by the Actions runner.

    Empty values are treated as unset.
    """
    environ = os.environ if environ is None else environ

    values = {}
    for name in INPUT_NAMES:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None and value.strip() != "":
            values[name] = value
    return values


def load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load inputs from a YAML file.

    Raises:
        InvalidInputError: If the file cannot be read or is not a mapping
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise InvalidInputError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidInputError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise InvalidInputError(f"Configuration file must contain a mapping: {config_path}")

    unknown = sorted(set(data) - set(INPUT_NAMES))
    if unknown:
        logger.warning(f"Ignoring unknown inputs in {config_path}: {', '.join(unknown)}")

    return {k: v for k, v in data.items() if k in INPUT_NAMES and v is not None}


def _parse_timeout(value: Any) -> int:
    try:
        timeout = int(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"installer_timeout must be an integer, got '{value}'") from e
    if timeout <= 0:
        raise InvalidInputError(f"installer_timeout must be positive, got {timeout}")
    return timeout


def _optional_path(value: Any) -> Optional[Path]:
    if value is None or str(value).strip() == "":
        return None
    return Path(os.path.expanduser(str(value).strip()))


def load_inputs(
    platform: PlatformInfo,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Union[str, Path]] = None,
    resolver: Optional[VersionResolver] = None,
) -> Inputs:
    """
    Assemble and validate the run inputs.

    Args:
        platform: Platform the inputs are validated for
        overrides: Values from CLI flags, keyed by input name (None = unset)
        environ: Environment to read INPUT_* variables from
        config_path: YAML file; ``vksdk.yaml`` in the working dir is used if present
        resolver: Used to list available versions for invalid version input

    Raises:
        InvalidInputError: If any input is invalid
    """
    raw: Dict[str, Any] = {}

    if config_path is not None:
        raw.update(load_config_file(config_path))
    elif Path(DEFAULT_CONFIG_FILE).exists():
        raw.update(load_config_file(DEFAULT_CONFIG_FILE))

    raw.update(read_env_inputs(environ))

    if overrides:
        raw.update({k: v for k, v in overrides.items() if k in INPUT_NAMES and v is not None})

    logger.debug(f"Raw inputs: {raw}")

    return Inputs(
        version=get_input_version(raw.get("vulkan_version"), resolver),
        destination=get_input_destination(raw.get("destination"), platform),
        install_runtime=parse_bool(raw.get("install_runtime")),
        use_cache=parse_bool(raw.get("cache")),
        optional_components=parse_optional_components(raw.get("optional_components")),
        stripdown=parse_bool(raw.get("stripdown")),
        installer_timeout=_parse_timeout(raw.get("installer_timeout", DEFAULT_INSTALLER_TIMEOUT)),
        cache_dir=_optional_path(raw.get("cache_dir")) or default_cache_dir(),
        download_dir=_optional_path(raw.get("download_dir")),
        strict=parse_bool(raw.get("strict")),
    )

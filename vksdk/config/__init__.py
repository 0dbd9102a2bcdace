"""
Input handling for vksdk.
"""

from .inputs import (
    DEFAULT_CONFIG_FILE,
    Inputs,
    get_input_destination,
    get_input_version,
    load_config_file,
    load_inputs,
    parse_bool,
    parse_optional_components,
    read_env_inputs,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "Inputs",
    "get_input_destination",
    "get_input_version",
    "load_config_file",
    "load_inputs",
    "parse_bool",
    "parse_optional_components",
    "read_env_inputs",
]

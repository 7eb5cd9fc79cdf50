"""
deltaspec.config - Configuration loading and defaults
"""

from deltaspec.config.defaults import DEFAULT_CONFIG
from deltaspec.config.loader import (
    ConfigLoader,
    _apply_env_overrides,
    _try_parse_env_value,
    apply_env_overrides,
    find_config_file,
    find_git_root,
    get_config,
    load_config,
    merge_configs,
    parse_toml,
    parse_toml_document,
    validate_config,
)

__all__ = [
    "ConfigLoader",
    "DEFAULT_CONFIG",
    "apply_env_overrides",
    "find_config_file",
    "find_git_root",
    "get_config",
    "load_config",
    "merge_configs",
    "parse_toml",
    "parse_toml_document",
    "validate_config",
]

"""
deltaspec.config.loader - Configuration file loading and environment overrides.

Lookup order, lowest precedence first:

1. ``DEFAULT_CONFIG``
2. ``.deltaspec.toml`` (nearest one walking up to the git root)
3. ``.deltaspec.local.toml`` beside it (not meant to be committed)
4. ``DELTASPEC_<SECTION>_<KEY>`` environment variables
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import tomlkit
from tomlkit import TOMLDocument

from deltaspec.config.defaults import DEFAULT_CONFIG

CONFIG_FILENAME = ".deltaspec.toml"
LOCAL_CONFIG_FILENAME = ".deltaspec.local.toml"
ENV_PREFIX = "DELTASPEC_"


def parse_toml_document(content: str) -> TOMLDocument:
    """Parse TOML text, keeping comments and layout."""
    return tomlkit.parse(content)


def parse_toml(content: str) -> Dict[str, Any]:
    """Parse TOML text into plain Python containers."""
    return parse_toml_document(content).unwrap()


def find_git_root(start: Optional[Path] = None) -> Optional[Path]:
    """
    Find the nearest directory containing ``.git``.

    A ``.git`` file counts as well (worktrees and submodules).

    Args:
        start: Directory to start from (default: current directory)

    Returns:
        Repository root, or None outside a git checkout
    """
    current = Path(start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if (directory / ".git").exists():
            return directory
    return None


def find_config_file(start: Path) -> Optional[Path]:
    """
    Find ``.deltaspec.toml`` in ``start`` or one of its parents.

    The search stops at the git root so a config from an enclosing
    checkout is never picked up.

    Returns:
        Path to the config file, or None if not found
    """
    current = Path(start).resolve()
    git_root = find_git_root(current)

    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if git_root is not None and directory == git_root:
            break
    return None


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge ``override`` into a copy of ``base``.

    Nested tables merge key by key; any other value in ``override``
    replaces the one in ``base``.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _try_parse_env_value(value: str) -> Any:
    """
    Interpret an environment variable value.

    JSON arrays and objects become lists and dicts, ``true``/``false``
    (any case) become booleans. Everything else, including malformed
    JSON, stays a string.
    """
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    return value


def _apply_env_overrides(
    config: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Apply ``DELTASPEC_<SECTION>_<KEY>`` overrides in place.

    The part after the prefix is lowercased and split on underscores.
    Leading parts that name an existing table descend into it; the
    remainder, re-joined with underscores, is the key. So
    ``DELTASPEC_RULES_DELTA_REQUIRE_SHALL`` sets
    ``rules.delta.require_shall`` and ``DELTASPEC_MERGE_STRICT_RENAMES``
    sets ``merge.strict_renames``. Missing sections are created.
    """
    env = os.environ if environ is None else environ

    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        parts = name[len(ENV_PREFIX):].lower().split("_")
        if len(parts) < 2 or not all(parts):
            continue

        section = config.setdefault(parts[0], {})
        if not isinstance(section, dict):
            continue
        remaining = parts[1:]
        while len(remaining) > 1 and isinstance(section.get(remaining[0]), dict):
            section = section[remaining[0]]
            remaining = remaining[1:]

        section["_".join(remaining)] = _try_parse_env_value(raw)

    return config


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides from the process environment."""
    return _apply_env_overrides(config)


def validate_config(config: Mapping[str, Any]) -> List[str]:
    """
    Check value types of the known configuration keys.

    Returns:
        List of error messages (empty when valid)
    """
    errors: List[str] = []

    merge = config.get("merge", {})
    if not isinstance(merge, Mapping):
        errors.append("[merge] must be a table")
        merge = {}
    if not isinstance(merge.get("strict_renames", False), bool):
        errors.append("merge.strict_renames must be true or false")
    if not isinstance(merge.get("capability_title", ""), str):
        errors.append("merge.capability_title must be a string")

    rules = config.get("rules", {})
    delta_rules = rules.get("delta", {}) if isinstance(rules, Mapping) else None
    if not isinstance(delta_rules, Mapping):
        errors.append("[rules.delta] must be a table")
        delta_rules = {}
    for key in ("require_shall", "require_scenarios"):
        if not isinstance(delta_rules.get(key, True), bool):
            errors.append(f"rules.delta.{key} must be true or false")

    return errors


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration, merged over the defaults.

    Args:
        config_path: Path to ``.deltaspec.toml``; None uses defaults only

    Returns:
        Configuration dictionary

    Raises:
        OSError: If the given file cannot be read
        tomlkit.exceptions.ParseError: If a file is not valid TOML
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        path = Path(config_path)
        config = merge_configs(config, parse_toml(path.read_text(encoding="utf-8")))

        local_path = path.with_name(LOCAL_CONFIG_FILENAME)
        if local_path.is_file():
            config = merge_configs(config, parse_toml(local_path.read_text(encoding="utf-8")))

    return apply_env_overrides(config)


class ConfigLoader:
    """Read-only view over a loaded configuration with dotted-key access."""

    def __init__(self, data: Dict[str, Any], path: Optional[Path] = None):
        self._data = data
        self.path = path

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigLoader":
        return cls(merge_configs(DEFAULT_CONFIG, data))

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ConfigLoader":
        return cls(load_config(config_path), Path(config_path))

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as ``"rules.delta.require_shall"``.

        Returns ``default`` when any part of the path is missing.
        """
        value: Any = self._data
        for part in key.split("."):
            if not isinstance(value, Mapping) or part not in value:
                return default
            value = value[part]
        return value

    def get_raw(self) -> Dict[str, Any]:
        return self._data


def get_config(
    config_path: Optional[Union[str, Path]] = None,
    start: Optional[Path] = None,
) -> ConfigLoader:
    """
    Load the configuration that applies to ``start``.

    Args:
        config_path: Explicit config file (skips discovery)
        start: Directory to search from (default: current directory)
    """
    if config_path is None:
        config_path = find_config_file(start or Path.cwd())
    if config_path is None:
        return ConfigLoader(load_config(None))
    return ConfigLoader.from_file(config_path)

"""
Configuration file parsing and management.

Supports YAML configuration files (PyYAML) and JSON files.
Merges configurations from multiple sources (explicit → env → user → system → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .common import vlog
from .errors import ConfigError
from .package_managers import MANAGER_NAMES


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    os.path.expanduser("~/.config/update-bin/config.yml"),
    os.path.expanduser("~/.config/update-bin/config.yaml"),
    os.path.expanduser("~/.config/update-bin/config.json"),
    "/etc/update-bin/config.yml",
    "/etc/update-bin/config.yaml",
]

CONFIG_ENV_VAR = "UPDATE_BIN_CONFIG"

COLOR_MODES = {"auto", "always", "never"}


@dataclass(frozen=True)
class ToolOverride:
    """
    Per-binary override of detection.

    Attributes:
        manager: Package manager to use instead of path classification
        package: Package name to use instead of manifest lookup
    """
    manager: str | None = None
    package: str | None = None

    def __post_init__(self):
        for name in ("manager", "package"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"Invalid {name} override: {value!r}. Must be a string")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ToolOverride:
        """Create ToolOverride from dictionary."""
        return ToolOverride(
            manager=data.get("manager"),
            package=data.get("package"),
        )


PREFERENCE_KEYS = ("color", "output_prefix", "stream_output")


@dataclass(frozen=True)
class Preferences:
    """
    Output preferences.

    Attributes:
        color: When to dim streamed output ('auto', 'always', or 'never')
        output_prefix: Prefix for each line of package manager output
        stream_output: Whether to echo the package manager's output at all
        explicit: Keys the config file actually set; only these win a merge
    """
    color: str = "auto"
    output_prefix: str = "---> "
    stream_output: bool = True
    explicit: frozenset = field(default_factory=frozenset, compare=False)

    def __post_init__(self):
        if self.color not in COLOR_MODES:
            raise ValueError(
                f"Invalid color setting: {self.color}. "
                f"Must be one of: {', '.join(sorted(COLOR_MODES))}"
            )
        if not isinstance(self.output_prefix, str):
            raise ValueError(f"Invalid output_prefix: {self.output_prefix!r}. Must be a string")
        if not isinstance(self.stream_output, bool):
            raise ValueError(f"Invalid stream_output: {self.stream_output!r}. Must be true or false")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from dictionary, remembering which keys were given."""
        defaults = Preferences()
        return Preferences(
            color=data.get("color", defaults.color),
            output_prefix=data.get("output_prefix", defaults.output_prefix),
            stream_output=data.get("stream_output", defaults.stream_output),
            explicit=frozenset(key for key in PREFERENCE_KEYS if key in data),
        )

    def merge_with(self, other: Preferences) -> Preferences:
        """Merge key by key; a key set here beats the same key from other."""
        values = {
            key: getattr(self if key in self.explicit else other, key)
            for key in PREFERENCE_KEYS
        }
        return Preferences(explicit=self.explicit | other.explicit, **values)


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for update-bin.

    Attributes:
        version: Config schema version
        tools: Per-binary detection overrides
        preferences: Output preferences
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    tools: dict[str, ToolOverride] = field(default_factory=dict)
    preferences: Preferences = field(default_factory=Preferences)
    source: str = ""

    def __post_init__(self):
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        tools_data = data.get("tools") or {}
        if not isinstance(tools_data, dict):
            raise TypeError("'tools' must be a mapping of binary name to override")
        tools = {
            bin_name: ToolOverride.from_dict(override or {})
            for bin_name, override in tools_data.items()
        }

        return Config(
            version=data.get("version", 1),
            tools=tools,
            preferences=Preferences.from_dict(data.get("preferences") or {}),
            source=source,
        )

    def get_tool_config(self, bin_name: str) -> ToolOverride:
        """
        Get override for a binary.

        Returns:
            ToolOverride for the binary, or an empty override if not configured
        """
        return self.tools.get(bin_name, ToolOverride())

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        merged_tools = dict(other.tools)
        merged_tools.update(self.tools)

        merged_preferences = self.preferences.merge_with(other.preferences)

        return Config(
            version=self.version,
            tools=merged_tools,
            preferences=merged_preferences,
            source=self.source or other.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Files ending in .json are read as JSON, everything else as YAML.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
    except (ValueError, TypeError, AttributeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None

    vlog(f"Loaded config successfully: {file_path}", verbose)
    return config


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. $UPDATE_BIN_CONFIG
    3. User ~/.config/update-bin/config.yml
    4. System /etc/update-bin/config.yml
    5. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ConfigError: If an explicitly requested file cannot be loaded
    """
    configs: list[Config] = []

    explicit = [p for p in (custom_path, os.environ.get(CONFIG_ENV_VAR)) if p]
    for path in explicit:
        config = load_config_file(path, verbose)
        if config is None:
            raise ConfigError(
                f"Could not load config from specified path: {path}",
                remediation="Check that the file exists and is valid YAML or JSON",
            )
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config()

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged


def validate_config(config: Config) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: Config object to validate

    Returns:
        List of validation warning messages (empty if valid)
    """
    warnings = []

    for bin_name, override in config.tools.items():
        if override.manager and override.manager not in MANAGER_NAMES:
            warnings.append(
                f"Tool '{bin_name}': unknown package manager '{override.manager}' "
                f"(expected one of: {', '.join(MANAGER_NAMES)})"
            )
        if not override.manager and not override.package:
            warnings.append(f"Tool '{bin_name}': override sets neither manager nor package")

    return warnings

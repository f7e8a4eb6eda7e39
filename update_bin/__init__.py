"""
update-bin - Update a binary with the package manager that installed it.

Core Modules:
- Detection: binary lookup, path classification, package name resolution
- Package managers: supported manager table and update commands
- Versions: before/after version scraping with binary fallback
- Updater: streamed update execution and reporting
"""

__version__ = "1.0.0"

VERSION = __version__

from .errors import (
    UpdateBinError,
    NotFoundError,
    UndetectedManagerError,
    UnsupportedManagerError,
    UpdateLaunchError,
    UpdateFailedError,
    ConfigError,
    VersionError,
    PackageNotFoundError,
    VersionUnknownError,
)
from .package_managers import (
    PackageManager,
    PACKAGE_MANAGERS,
    MANAGER_NAMES,
    get_package_manager,
    get_update_command,
)
from .config import Config, ToolOverride, Preferences, load_config, load_config_file, validate_config
from .detection import (
    Detection,
    normalize_path,
    find_binary_path,
    classify_path,
    detect_package_manager,
)
from .manifests import resolve_package_name, find_package_for_binary
from .versions import (
    UNKNOWN_VERSION,
    get_version,
    get_version_or_unknown,
    get_binary_version,
    parse_brew_version,
    parse_node_list_version,
    parse_cargo_list_version,
)
from .updater import UpdateResult, run_update, update_binary, display_info
from .logging_config import setup_logging, get_logger

__all__ = [
    "__version__",
    "VERSION",
    # Errors
    "UpdateBinError",
    "NotFoundError",
    "UndetectedManagerError",
    "UnsupportedManagerError",
    "UpdateLaunchError",
    "UpdateFailedError",
    "ConfigError",
    "VersionError",
    "PackageNotFoundError",
    "VersionUnknownError",
    # Package managers
    "PackageManager",
    "PACKAGE_MANAGERS",
    "MANAGER_NAMES",
    "get_package_manager",
    "get_update_command",
    # Config
    "Config",
    "ToolOverride",
    "Preferences",
    "load_config",
    "load_config_file",
    "validate_config",
    # Detection
    "Detection",
    "normalize_path",
    "find_binary_path",
    "classify_path",
    "detect_package_manager",
    "resolve_package_name",
    "find_package_for_binary",
    # Versions
    "UNKNOWN_VERSION",
    "get_version",
    "get_version_or_unknown",
    "get_binary_version",
    "parse_brew_version",
    "parse_node_list_version",
    "parse_cargo_list_version",
    # Updater
    "UpdateResult",
    "run_update",
    "update_binary",
    "display_info",
    # Logging
    "setup_logging",
    "get_logger",
]

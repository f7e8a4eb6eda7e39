"""
Binary location and package manager classification.

The classifier only looks at where a binary lives. Paths are normalized to
forward slashes once, here, and every marker and directory comparison works
on the normalized form.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import PurePosixPath, PureWindowsPath

from .common import run_command, vlog
from .config import Config
from .errors import NotFoundError, UndetectedManagerError
from .manifests import resolve_package_name
from .package_managers import (
    BIN_DIR_COMMAND,
    BIN_DIR_EXECUTABLE,
    PACKAGE_MANAGERS,
    PackageManager,
    require_package_manager,
)


@dataclass(frozen=True)
class Detection:
    """
    Package manager detected for a binary.

    Attributes:
        manager: Package manager identifier (e.g., "homebrew", "npm")
        package_name: Package that provides the binary
        binary_path: Resolved path of the binary
        source: "path" when classified from the filesystem, "config" when overridden
    """
    manager: str
    package_name: str
    binary_path: str = ""
    source: str = "path"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "manager": self.manager,
            "package_name": self.package_name,
            "binary_path": self.binary_path,
            "source": self.source,
        }


def normalize_path(path: str) -> str:
    """
    Normalize a filesystem path to forward-slash form.

    Windows-style paths (containing backslashes) are parsed as Windows paths
    regardless of the host, so classification behaves the same everywhere.
    Normalizing an already-normalized path returns it unchanged.
    """
    if "\\" in path:
        return PureWindowsPath(path).as_posix()
    return PurePosixPath(path).as_posix()


def is_under(path: str, directory: str | None) -> bool:
    """Check whether path lies inside directory (case-insensitive, normalized)."""
    if not directory or not directory.strip():
        return False
    base = normalize_path(directory.strip()).rstrip("/").lower()
    if not base:
        return False
    return normalize_path(path).lower().startswith(base + "/")


def find_binary_path(bin_name: str) -> str:
    """
    Find the executable for a binary name on PATH.

    Args:
        bin_name: Binary name to search for

    Returns:
        Absolute path to the executable

    Raises:
        NotFoundError: If the binary is not on PATH
    """
    path = shutil.which(bin_name)
    if not path:
        raise NotFoundError(
            f"Binary '{bin_name}' not found",
            remediation="Check the name and that its install directory is on PATH",
        )
    return path


def get_global_bin_dir(pm: PackageManager, verbose: bool = False) -> str | None:
    """
    Get the global bin directory of a manager that has to be asked for it.

    Returns:
        Directory path, or None if the manager is missing or cannot tell
    """
    if pm.bin_dir_strategy == BIN_DIR_COMMAND and pm.global_bin_command:
        result = run_command(pm.global_bin_command, verbose)
        if result is None or result.returncode != 0:
            return None
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        return lines[0] if lines else None

    if pm.bin_dir_strategy == BIN_DIR_EXECUTABLE:
        executable = shutil.which(pm.executable)
        return os.path.dirname(executable) if executable else None

    return None


def _matches_location(pm: PackageManager, path: str, verbose: bool) -> bool:
    lowered = path.lower()
    if pm.path_markers and not (pm.posix_only and os.name == "nt"):
        if any(marker in lowered for marker in pm.path_markers):
            return True

    if pm.home_env_var and os.environ.get(pm.home_env_var):
        if is_under(path, os.path.join(os.environ[pm.home_env_var], "bin")):
            return True

    global_dir = get_global_bin_dir(pm, verbose)
    if global_dir:
        vlog(f"{pm.display_name} global bin: {global_dir}", verbose)
        return is_under(path, global_dir)
    return False


def classify_path(path: str, verbose: bool = False) -> PackageManager | None:
    """
    Classify a binary path by the package manager that owns it.

    Managers are tested in registry order; the first match wins.

    Args:
        path: Path to the binary
        verbose: Enable verbose logging

    Returns:
        Matching PackageManager, or None
    """
    normalized = normalize_path(path)
    for pm in PACKAGE_MANAGERS:
        if _matches_location(pm, normalized, verbose):
            vlog(f"Classified {normalized} as {pm.name}", verbose)
            return pm
    return None


def detect_package_manager(
    bin_name: str,
    config: Config | None = None,
    verbose: bool = False,
) -> Detection:
    """
    Detect which package manager installed a binary, and under which package.

    Args:
        bin_name: Binary name as typed on the command line
        config: Configuration with optional per-binary overrides
        verbose: Enable verbose logging

    Returns:
        Detection result

    Raises:
        NotFoundError: If the binary is not on PATH
        UndetectedManagerError: If no manager matches the binary's location
        UnsupportedManagerError: If a config override names an unknown manager
    """
    override = (config or Config()).get_tool_config(bin_name)
    path = find_binary_path(bin_name)
    vlog(f"Found {bin_name} at: {path}", verbose)

    if override.manager:
        pm = require_package_manager(override.manager)
        source = "config"
        vlog(f"Using configured manager for {bin_name}: {pm.name}", verbose)
    else:
        pm = classify_path(path, verbose)
        source = "path"
        if pm is None:
            raise UndetectedManagerError(
                f"Could not detect package manager for '{bin_name}'",
                remediation=f"Set tools.{bin_name}.manager in the update-bin config",
            )

    if override.package:
        package_name = override.package
    elif pm.name == "cargo":
        package_name = bin_name
    else:
        package_name = resolve_package_name(pm.name, bin_name, verbose)

    return Detection(
        manager=pm.name,
        package_name=package_name,
        binary_path=path,
        source=source,
    )

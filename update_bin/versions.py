"""
Installed version lookup for before/after reporting.

Versions are scraped from each package manager's listing output, falling back
to asking the binary itself. Nothing here is allowed to block an update:
callers use get_version_or_unknown().
"""

from __future__ import annotations

import re

from packaging.version import InvalidVersion, Version

from .common import run_command, strip_ansi, vlog
from .detection import Detection
from .errors import PackageNotFoundError, VersionError, VersionUnknownError
from .package_managers import (
    VERSION_BREW,
    VERSION_CARGO_LIST,
    VERSION_NODE_LIST,
    get_package_manager,
)


UNKNOWN_VERSION = "unknown"

VERSION_FLAGS = ("--version", "-v", "-V", "version")

VERSION_RE = re.compile(r"(\d+(?:\.\d+)+)")


def parse_brew_version(output: str) -> str:
    """
    Parse ``brew list --versions <formula>`` output ("ripgrep 14.1.0").

    Returns:
        Second whitespace token, or "unknown" if absent
    """
    tokens = output.strip().split()
    return tokens[1] if len(tokens) > 1 else UNKNOWN_VERSION


def parse_node_list_version(output: str, package_name: str) -> str | None:
    """
    Parse a global listing from npm, pnpm or bun ("├── cowsay@1.6.0").

    Args:
        output: Listing output
        package_name: Package to look for

    Returns:
        Text after "<package>@" on the first matching line, or None
    """
    marker = f"{package_name}@"
    pattern = re.compile(r"(?:^|\s)" + re.escape(marker))
    for line in output.splitlines():
        match = pattern.search(line)
        if match:
            return line[match.end():].strip()
    return None


def parse_cargo_list_version(output: str, bin_name: str) -> str | None:
    """
    Parse ``cargo install --list`` output ("ripgrep v14.1.0:").

    Returns:
        Version without the leading "v" and trailing colon, or None
    """
    prefix = f"{bin_name} "
    for line in output.splitlines():
        if line.startswith(prefix):
            tokens = line.split()
            if len(tokens) < 2:
                return None
            version = tokens[1]
            if version.startswith("v"):
                version = version[1:]
            return version.rstrip(":")
    return None


def get_binary_version(bin_name: str, verbose: bool = False) -> str:
    """
    Ask the binary for its version.

    Tries each of VERSION_FLAGS in order; the first successful invocation
    wins.

    Raises:
        VersionUnknownError: If no flag succeeds
    """
    for flag in VERSION_FLAGS:
        result = run_command([bin_name, flag], verbose)
        if result is None or result.returncode != 0:
            continue
        output = result.stdout if result.stdout.strip() else result.stderr
        lines = output.splitlines()
        if not lines:
            return UNKNOWN_VERSION
        return strip_ansi(lines[0]).strip()

    raise VersionUnknownError(f"Could not determine version of {bin_name}")


def get_homebrew_version(package_name: str, verbose: bool = False) -> str:
    """
    Raises:
        PackageNotFoundError: If Homebrew does not list the formula
        VersionUnknownError: If brew cannot be run
    """
    pm = get_package_manager("homebrew")
    result = run_command([*pm.list_command, package_name], verbose)
    if result is None:
        raise VersionUnknownError("Failed to get brew version: brew could not be run")
    if result.returncode != 0:
        raise PackageNotFoundError(f"Package {package_name} not found in homebrew")
    return parse_brew_version(result.stdout)


def get_node_package_version(bin_name: str, detection: Detection, verbose: bool = False) -> str:
    pm = get_package_manager(detection.manager)
    if pm is not None and pm.list_command:
        result = run_command(list(pm.list_command), verbose)
        if result is not None and result.returncode == 0:
            version = parse_node_list_version(result.stdout, detection.package_name)
            if version:
                return version
    vlog(f"{detection.manager} does not list {detection.package_name}, asking {bin_name}", verbose)
    return get_binary_version(bin_name, verbose)


def get_cargo_version(bin_name: str, verbose: bool = False) -> str:
    pm = get_package_manager("cargo")
    result = run_command(list(pm.list_command), verbose)
    if result is not None and result.returncode == 0:
        version = parse_cargo_list_version(result.stdout, bin_name)
        if version:
            return version
    return get_binary_version(bin_name, verbose)


def get_version(bin_name: str, detection: Detection, verbose: bool = False) -> str:
    """
    Get the installed version of a binary via its package manager.

    Args:
        bin_name: Binary name
        detection: Detected package manager and package
        verbose: Enable verbose logging

    Returns:
        Version string

    Raises:
        VersionError: If no version can be determined
    """
    pm = get_package_manager(detection.manager)
    strategy = pm.version_strategy if pm else None

    if strategy == VERSION_BREW:
        return get_homebrew_version(detection.package_name, verbose)
    if strategy == VERSION_NODE_LIST:
        return get_node_package_version(bin_name, detection, verbose)
    if strategy == VERSION_CARGO_LIST:
        return get_cargo_version(bin_name, verbose)
    return get_binary_version(bin_name, verbose)


def get_version_or_unknown(bin_name: str, detection: Detection, verbose: bool = False) -> str:
    """Get the installed version, or "unknown" if it cannot be determined."""
    try:
        return get_version(bin_name, detection, verbose)
    except VersionError as e:
        vlog(f"Version lookup failed: {e}", verbose)
        return UNKNOWN_VERSION


def extract_version_number(s: str) -> str:
    """
    Extract version number from string.

    Returns:
        Version number (e.g., "1.2.3") or empty string
    """
    if not s:
        return ""
    m = VERSION_RE.search(s)
    return m.group(1) if m else ""


def is_major_upgrade(v1: str, v2: str) -> bool:
    """
    Check if moving from v1 to v2 crosses a major version.

    Both strings may carry surrounding text ("rg 13.0.0"); only the embedded
    version numbers are compared. Unparseable versions are never major.
    """
    try:
        ver1 = Version(extract_version_number(v1))
        ver2 = Version(extract_version_number(v2))
    except InvalidVersion:
        return False
    return ver2.major > ver1.major

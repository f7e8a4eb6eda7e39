"""
Package name resolution from package manager metadata.

A globally installed executable does not have to share its package's name:
npm-style packages declare the executables they provide in the "bin" field of
their package.json, and Homebrew formulae can ship binaries under any name.
Each manager contributes a list of (package name, manifest path) candidates;
a single scan finds the first manifest declaring the requested binary.
"""

from __future__ import annotations

import json
import os
import shutil
from typing import Any, Callable, Iterable, Iterator

from .common import run_command, vlog


def read_manifest(path: str) -> dict[str, Any]:
    """
    Read a package.json file.

    Args:
        path: Path to the manifest

    Returns:
        Parsed manifest, or an empty dict if missing or malformed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return None


def declares_binary(manifest: dict[str, Any], bin_name: str) -> bool:
    """
    Check whether a manifest's "bin" field provides bin_name.

    The field is either a single string or a mapping of executable name to
    entry point.
    """
    bin_field = manifest.get("bin")
    if isinstance(bin_field, str):
        return bin_field == bin_name
    if isinstance(bin_field, dict):
        return bin_name in bin_field
    return False


def find_package_for_binary(
    bin_name: str,
    candidates: Iterable[tuple[str, str]],
    verbose: bool = False,
) -> str | None:
    """
    Find the package whose manifest declares bin_name.

    Args:
        bin_name: Executable name to look for
        candidates: (package name, manifest path) pairs, in priority order
        verbose: Enable verbose logging

    Returns:
        First matching package name, or None
    """
    for package_name, manifest_path in candidates:
        if declares_binary(read_manifest(manifest_path), bin_name):
            vlog(f"{package_name} provides {bin_name} ({manifest_path})", verbose)
            return package_name
    return None


def _dependency_names(manifest: dict[str, Any]) -> list[str]:
    dependencies = manifest.get("dependencies")
    return list(dependencies) if isinstance(dependencies, dict) else []


def _global_dir_candidates(global_dir: str) -> Iterator[tuple[str, str]]:
    """Candidates for managers keeping a package.json in their global dir (yarn, bun)."""
    node_modules = os.path.join(global_dir, "node_modules")
    for package_name in _dependency_names(read_manifest(os.path.join(global_dir, "package.json"))):
        yield (package_name, os.path.join(node_modules, package_name, "package.json"))


def npm_global_node_modules() -> str | None:
    """
    Locate npm's global node_modules directory.

    Derived from the npm executable: <prefix>/bin/npm -> <prefix>/lib/node_modules,
    or <prefix>\\npm.cmd -> <prefix>\\node_modules on Windows.
    """
    npm_path = shutil.which("npm")
    if not npm_path:
        return None
    npm_dir = os.path.dirname(npm_path)
    if os.name == "nt":
        return os.path.join(npm_dir, "node_modules")
    return os.path.join(os.path.dirname(npm_dir), "lib", "node_modules")


def npm_candidates(verbose: bool = False) -> Iterator[tuple[str, str]]:
    node_modules = npm_global_node_modules()
    if not node_modules:
        return
    result = run_command(["npm", "list", "-g", "--json", "--depth=0"], verbose)
    if result is None:
        return
    listing = _parse_json(result.stdout)
    if not isinstance(listing, dict):
        return
    for package_name in _dependency_names(listing):
        yield (package_name, os.path.join(node_modules, package_name, "package.json"))


def pnpm_candidates(verbose: bool = False) -> Iterator[tuple[str, str]]:
    result = run_command(["pnpm", "list", "-g", "--json"], verbose)
    if result is None:
        return
    listing = _parse_json(result.stdout)
    # pnpm prints one object per global project; older releases print a bare object
    if isinstance(listing, dict):
        listing = [listing]
    if not isinstance(listing, list):
        return
    for project in listing:
        if not isinstance(project, dict):
            continue
        dependencies = project.get("dependencies")
        if not isinstance(dependencies, dict):
            continue
        for package_name, info in dependencies.items():
            path = info.get("path") if isinstance(info, dict) else None
            if path:
                yield (package_name, os.path.join(path, "package.json"))


def yarn_candidates(verbose: bool = False) -> Iterator[tuple[str, str]]:
    result = run_command(["yarn", "global", "dir"], verbose)
    if result is None or result.returncode != 0:
        return
    global_dir = result.stdout.strip()
    if global_dir:
        yield from _global_dir_candidates(global_dir)


def bun_global_dir() -> str:
    """Bun's global install directory ($BUN_INSTALL/install/global by default)."""
    if os.name == "nt" and os.environ.get("APPDATA"):
        return os.path.join(os.environ["APPDATA"], "bun")
    bun_home = os.environ.get("BUN_INSTALL") or os.path.join(os.path.expanduser("~"), ".bun")
    return os.path.join(bun_home, "install", "global")


def bun_candidates(verbose: bool = False) -> Iterator[tuple[str, str]]:
    global_dir = bun_global_dir()
    vlog(f"Scanning bun global dir: {global_dir}", verbose)
    yield from _global_dir_candidates(global_dir)


def homebrew_package_name(bin_name: str, verbose: bool = False) -> str | None:
    """
    Find the installed Homebrew formula providing bin_name.

    Intersects ``brew which-formula`` candidates with ``brew list --formula``.
    """
    installed = run_command(["brew", "list", "--formula"], verbose)
    if installed is None or installed.returncode != 0:
        return None
    installed_set = {line.strip() for line in installed.stdout.splitlines() if line.strip()}

    candidates = run_command(["brew", "which-formula", bin_name], verbose)
    if candidates is None or candidates.returncode != 0 or "Error" in candidates.stdout:
        return None

    for line in candidates.stdout.splitlines():
        candidate = line.strip()
        if candidate and candidate in installed_set:
            return candidate
    return None


_MANIFEST_SOURCES: dict[str, Callable[[bool], Iterable[tuple[str, str]]]] = {
    "npm": npm_candidates,
    "pnpm": pnpm_candidates,
    "yarn": yarn_candidates,
    "bun": bun_candidates,
}


def resolve_package_name(manager: str, bin_name: str, verbose: bool = False) -> str:
    """
    Resolve the package that installed bin_name.

    Args:
        manager: Package manager identifier
        bin_name: Executable name
        verbose: Enable verbose logging

    Returns:
        Package name, falling back to bin_name when nothing declares it
    """
    package_name = None
    if manager in _MANIFEST_SOURCES:
        package_name = find_package_for_binary(bin_name, _MANIFEST_SOURCES[manager](verbose), verbose)
    elif manager == "homebrew":
        package_name = homebrew_package_name(bin_name, verbose)

    if package_name is None:
        vlog(f"No {manager} package declares {bin_name}, assuming same name", verbose)
        return bin_name
    return package_name

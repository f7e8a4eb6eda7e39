"""
Package manager registry and update command builder.

One row per supported manager. The registry order is the classification
order: a binary path is tested against each manager in turn and the first
match wins, so managers whose install directories can nest inside another's
(Homebrew's /usr/local prefix, Bun's and Cargo's home directories) come
before the managers that have to be asked where their global bin lives.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import UnsupportedManagerError


# How a manager's global bin directory is found
BIN_DIR_MARKERS = "markers"            # path substring markers only
BIN_DIR_COMMAND = "command"            # ask the manager (global_bin_command)
BIN_DIR_EXECUTABLE = "executable_dir"  # directory holding the manager itself

# How the installed version is read
VERSION_BREW = "brew"
VERSION_NODE_LIST = "node_list"
VERSION_CARGO_LIST = "cargo_list"
VERSION_BINARY = "binary"


@dataclass(frozen=True)
class PackageManager:
    """
    Package manager definition.

    Attributes:
        name: Canonical identifier (e.g., "homebrew", "cargo", "npm")
        display_name: Human-readable name
        executable: Command used to drive the manager
        update_command_template: Update invocation (use {package} placeholder)
        bin_dir_strategy: One of BIN_DIR_MARKERS, BIN_DIR_COMMAND, BIN_DIR_EXECUTABLE
        path_markers: Lowercase path substrings identifying the install location
        home_env_var: Environment variable overriding the manager's home directory
        global_bin_command: Command printing the global bin directory
        list_command: Command listing globally installed packages with versions
        version_strategy: One of the VERSION_* constants
        posix_only: Skip path markers on Windows hosts
    """
    name: str
    display_name: str
    executable: str
    update_command_template: tuple[str, ...]
    bin_dir_strategy: str = BIN_DIR_MARKERS
    path_markers: tuple[str, ...] = ()
    home_env_var: str | None = None
    global_bin_command: tuple[str, ...] | None = None
    list_command: tuple[str, ...] | None = None
    version_strategy: str = VERSION_BINARY
    posix_only: bool = False

    def get_update_command(self, package: str) -> tuple[str, list[str]]:
        """
        Get update command for a package.

        Args:
            package: Package name

        Returns:
            Tuple of (command, argument list)
        """
        command = [part.replace("{package}", package) for part in self.update_command_template]
        return (command[0], command[1:])


PACKAGE_MANAGERS = (
    PackageManager(
        name="homebrew",
        display_name="Homebrew",
        executable="brew",
        update_command_template=("brew", "upgrade", "{package}"),
        path_markers=("/opt/homebrew/", "/usr/local/", "/home/linuxbrew/.linuxbrew/"),
        list_command=("brew", "list", "--versions"),
        version_strategy=VERSION_BREW,
        posix_only=True,
    ),
    PackageManager(
        name="bun",
        display_name="Bun",
        executable="bun",
        update_command_template=("bun", "update", "-g", "{package}"),
        path_markers=("/.bun/", "/appdata/roaming/bun/"),
        home_env_var="BUN_INSTALL",
        list_command=("bun", "pm", "ls", "-g"),
        version_strategy=VERSION_NODE_LIST,
    ),
    PackageManager(
        name="cargo",
        display_name="Cargo",
        executable="cargo",
        update_command_template=("cargo", "install", "{package}"),
        path_markers=("/.cargo/bin/",),
        home_env_var="CARGO_HOME",
        list_command=("cargo", "install", "--list"),
        version_strategy=VERSION_CARGO_LIST,
    ),
    PackageManager(
        name="pnpm",
        display_name="pnpm",
        executable="pnpm",
        update_command_template=("pnpm", "update", "-g", "{package}"),
        bin_dir_strategy=BIN_DIR_COMMAND,
        global_bin_command=("pnpm", "bin", "-g"),
        list_command=("pnpm", "list", "-g", "--depth=0"),
        version_strategy=VERSION_NODE_LIST,
    ),
    PackageManager(
        name="npm",
        display_name="npm",
        executable="npm",
        update_command_template=("npm", "update", "-g", "{package}"),
        bin_dir_strategy=BIN_DIR_EXECUTABLE,
        list_command=("npm", "list", "-g", "--depth=0"),
        version_strategy=VERSION_NODE_LIST,
    ),
    PackageManager(
        name="yarn",
        display_name="Yarn",
        executable="yarn",
        update_command_template=("yarn", "global", "upgrade", "{package}"),
        bin_dir_strategy=BIN_DIR_COMMAND,
        global_bin_command=("yarn", "global", "bin"),
    ),
)


_PM_BY_NAME = {pm.name: pm for pm in PACKAGE_MANAGERS}

MANAGER_NAMES = tuple(pm.name for pm in PACKAGE_MANAGERS)


def get_package_manager(name: str) -> PackageManager | None:
    """
    Get package manager by name.

    Args:
        name: Package manager identifier

    Returns:
        PackageManager object, or None if not found
    """
    return _PM_BY_NAME.get(name)


def require_package_manager(name: str) -> PackageManager:
    """
    Get package manager by name, failing for unknown identifiers.

    Raises:
        UnsupportedManagerError: If name is not a supported manager
    """
    pm = get_package_manager(name)
    if pm is None:
        raise UnsupportedManagerError(
            f"Unsupported package manager: {name}",
            remediation=f"Supported managers: {', '.join(MANAGER_NAMES)}",
        )
    return pm


def get_update_command(package_manager: str, package_name: str) -> tuple[str, list[str]]:
    """
    Build the update invocation for a package.

    Args:
        package_manager: Package manager identifier
        package_name: Package to update

    Returns:
        Tuple of (command, argument list)

    Raises:
        UnsupportedManagerError: If package_manager is not supported
    """
    return require_package_manager(package_manager).get_update_command(package_name)

"""
Update execution and reporting.

Runs the detected package manager's update command, echoing its output as
it arrives, and reports the version before and after.
"""

from __future__ import annotations

import subprocess
import sys
import threading
import time
from dataclasses import dataclass
from typing import IO, Sequence, TextIO

from .common import resolve_executable, vlog
from .config import Config
from .detection import Detection, detect_package_manager
from .errors import UpdateFailedError, UpdateLaunchError
from .logging_config import get_logger
from .package_managers import get_update_command
from .render import format_output_line, should_use_colors
from .versions import get_version_or_unknown, is_major_upgrade


@dataclass(frozen=True)
class UpdateResult:
    """
    Result of updating a single binary.

    Attributes:
        bin_name: Binary that was updated
        package_name: Package that was updated
        manager: Package manager that performed the update
        previous_version: Version before update ("unknown" if undetermined)
        new_version: Version after update ("unknown" if undetermined)
        exit_code: Exit status of the update command
        duration_seconds: Time spent in the update command
    """
    bin_name: str
    package_name: str
    manager: str
    previous_version: str
    new_version: str
    exit_code: int = 0
    duration_seconds: float = 0.0

    @property
    def changed(self) -> bool:
        return self.previous_version != self.new_version

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "bin_name": self.bin_name,
            "package_name": self.package_name,
            "manager": self.manager,
            "previous_version": self.previous_version,
            "new_version": self.new_version,
            "changed": self.changed,
            "exit_code": self.exit_code,
            "duration_seconds": self.duration_seconds,
        }


def _write_line(sink: TextIO, text: str) -> None:
    try:
        print(text, file=sink, flush=True)
    except UnicodeEncodeError:
        encoding = getattr(sink, "encoding", None) or "ascii"
        print(text.encode(encoding, "replace").decode(encoding), file=sink, flush=True)


def _pump(source: IO[str], sink: TextIO | None, prefix: str, use_colors: bool) -> None:
    """Echo one pipe of the child process until EOF."""
    for line in source:
        if sink is None:
            continue
        try:
            _write_line(sink, format_output_line(line.rstrip("\r\n"), prefix, use_colors))
        except OSError as e:
            # Only the echo stops; the pipe is still read to EOF
            get_logger().debug(f"Stopped echoing update output: {e}")
            sink = None
    source.close()


def run_update(
    command: str,
    args: Sequence[str],
    prefix: str = "---> ",
    color: str = "auto",
    stream_output: bool = True,
    verbose: bool = False,
) -> int:
    """
    Run an update command, echoing its output line by line.

    stdout and stderr are each drained by their own reader thread so neither
    pipe can fill up and stall the child; both readers finish before the exit
    status is collected.

    Args:
        command: Package manager executable
        args: Arguments to the update command
        prefix: Prefix for every echoed line
        color: Color mode ('auto', 'always', 'never')
        stream_output: Echo output (False drains it silently)
        verbose: Enable verbose logging

    Returns:
        Exit code of the update command

    Raises:
        UpdateLaunchError: If the command cannot be started
    """
    vlog(f"Executing: {' '.join([command, *args])}", verbose)

    try:
        proc = subprocess.Popen(
            [resolve_executable(command), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            bufsize=1,
        )
    except OSError as e:
        raise UpdateLaunchError(f"Failed to run {command}: {e}") from e

    out = sys.stdout if stream_output else None
    err = sys.stderr if stream_output else None
    readers = [
        threading.Thread(
            target=_pump,
            args=(proc.stdout, out, prefix, should_use_colors(color, sys.stdout)),
            daemon=True,
        ),
        threading.Thread(
            target=_pump,
            args=(proc.stderr, err, prefix, should_use_colors(color, sys.stderr)),
            daemon=True,
        ),
    ]
    for reader in readers:
        reader.start()
    for reader in readers:
        reader.join()

    return proc.wait()


def update_binary(
    bin_name: str,
    config: Config | None = None,
    verbose: bool = False,
) -> UpdateResult:
    """
    Update a binary with the package manager that installed it.

    Args:
        bin_name: Binary name as typed on the command line
        config: Configuration (overrides and output preferences)
        verbose: Enable verbose logging

    Returns:
        UpdateResult describing the versions before and after

    Raises:
        NotFoundError: If the binary is not on PATH
        UndetectedManagerError: If no manager matches the binary
        UnsupportedManagerError: If the manager has no update command
        UpdateLaunchError: If the update command cannot be started
        UpdateFailedError: If the update command exits non-zero
    """
    config = config or Config()
    prefs = config.preferences
    detection = detect_package_manager(bin_name, config, verbose)

    old_version = get_version_or_unknown(bin_name, detection, verbose)
    print(f"Current version: {old_version}")

    command, args = get_update_command(detection.manager, detection.package_name)
    print(f"Updating {detection.package_name} with {detection.manager}")

    start_time = time.time()
    exit_code = run_update(
        command,
        args,
        prefix=prefs.output_prefix,
        color=prefs.color,
        stream_output=prefs.stream_output,
        verbose=verbose,
    )
    duration = time.time() - start_time

    if exit_code != 0:
        raise UpdateFailedError(
            f"Failed to update {detection.package_name} with {detection.manager}",
            exit_code=exit_code,
        )

    new_version = get_version_or_unknown(bin_name, detection, verbose)
    result = UpdateResult(
        bin_name=bin_name,
        package_name=detection.package_name,
        manager=detection.manager,
        previous_version=old_version,
        new_version=new_version,
        exit_code=exit_code,
        duration_seconds=duration,
    )

    if result.changed:
        print(f"Updated to version: {new_version}")
        if is_major_upgrade(old_version, new_version):
            get_logger().warning(
                f"{detection.package_name} moved to a new major version, check its changelog for breaking changes"
            )
        print(f"✅ Successfully updated {detection.package_name} from {old_version} to {new_version}")
    else:
        print(f"ℹ️  {detection.package_name} is already up to date ({old_version})")

    vlog(f"Update finished in {duration:.1f}s", verbose)
    return result


def display_info(
    bin_name: str,
    config: Config | None = None,
    verbose: bool = False,
) -> Detection:
    """Print the package name and package manager detected for a binary."""
    detection = detect_package_manager(bin_name, config, verbose)
    print(f"Package name: {detection.package_name}")
    print(f"Package manager: {detection.manager}")
    return detection

"""
Common utilities shared across update_bin modules.
"""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import sys
from typing import Sequence


ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;]*m|\033\[[0-9;]*m')


def is_debug_enabled() -> bool:
    """Check whether UPDATE_BIN_DEBUG forces diagnostic output."""
    return os.environ.get("UPDATE_BIN_DEBUG", "0") == "1"


def strip_ansi(text: str) -> str:
    """Remove ANSI color sequences from a line of tool output."""
    return ANSI_ESCAPE_RE.sub('', text)


def resolve_executable(command: str) -> str:
    """
    Resolve a command name to the executable that would run.

    On Windows, package managers are usually ``.cmd`` shims that
    subprocess cannot start by bare name, so PATH lookup is done up front.

    Args:
        command: Command name or path

    Returns:
        Absolute path if found on PATH, otherwise the command unchanged
    """
    return shutil.which(command) or command


def run_command(args: Sequence[str], verbose: bool = False) -> subprocess.CompletedProcess | None:
    """
    Run a query command and capture its output.

    Args:
        args: Command and arguments
        verbose: Enable verbose logging

    Returns:
        CompletedProcess with text stdout/stderr, or None if the command
        could not be started
    """
    command = [resolve_executable(args[0]), *args[1:]]
    vlog(f"Running: {' '.join(args)}", verbose)
    try:
        return subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,  # Isolate stdin
            text=True,
            errors="replace",
            check=False,
            env={**os.environ, "TERM": "dumb"},  # Disable ANSI/color output from subprocesses
        )
    except OSError as e:
        vlog(f"Could not run {args[0]}: {e}", verbose)
        return None


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or is_debug_enabled():
        try:
            from .logging_config import get_logger
            get_logger().info(msg)
        except Exception:
            # Fallback to stderr if logging fails
            print(f"[update_bin] {msg}", file=sys.stderr)

"""
Terminal rendering helpers for streamed package manager output.
"""

from __future__ import annotations

from typing import TextIO

DIM = "\x1b[2m"
RESET = "\x1b[0m"


def should_use_colors(mode: str, stream: TextIO) -> bool:
    """
    Decide whether to emit ANSI styling.

    Args:
        mode: 'always', 'never', or 'auto' (colors only on a TTY)
        stream: Stream the output is written to
    """
    if mode == "always":
        return True
    if mode == "never":
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def format_output_line(line: str, prefix: str = "---> ", use_colors: bool = False) -> str:
    """Prefix one line of package manager output, dimmed when colors are on."""
    text = f"{prefix}{line}"
    if use_colors:
        return f"{DIM}{text}{RESET}"
    return text

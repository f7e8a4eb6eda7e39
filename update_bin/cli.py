"""
update-bin - update a binary with the package manager that installed it.

Usage:
    update-bin rg             # Update rg with whichever manager installed it
    update-bin rg --info      # Show detected package name and manager
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace

from . import __version__
from .config import load_config, validate_config
from .errors import UpdateBinError
from .logging_config import get_logger, setup_logging
from .updater import display_info, update_binary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="update-bin",
        description="Update a binary to its latest version by using the original package manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Supported package managers: homebrew, bun, cargo, pnpm, npm, yarn",
    )
    parser.add_argument("bin_name", help="Name of the binary to update")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Display package name and package manager instead of updating",
    )
    parser.add_argument("--config", metavar="PATH", help="Path to a config file")
    parser.add_argument(
        "--color",
        choices=("auto", "always", "never"),
        help="Dim package manager output (default: from config, else auto)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show diagnostic output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--log-file", metavar="PATH", help="Also write logs to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)
    logger = get_logger()

    try:
        config = load_config(args.config, verbose=args.verbose)
        for warning in validate_config(config):
            logger.warning(warning)
        if args.color:
            config = replace(config, preferences=replace(config.preferences, color=args.color))

        if args.info:
            display_info(args.bin_name, config, verbose=args.verbose)
        else:
            update_binary(args.bin_name, config, verbose=args.verbose)
    except UpdateBinError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.remediation and args.verbose:
            print(f"  Hint: {e.remediation}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n✗ Interrupted", file=sys.stderr)
        return 130

    return 0

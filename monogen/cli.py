"""Command line entry point for monogen."""

from __future__ import annotations

import argparse
import sys

from . import __version__
from .logging_config import get_logger, setup_logging
from .templates.cli_integration import create_template_subparsers

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="monogen",
        description="Compile declarative template definitions into TypeScript source files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    create_template_subparsers(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Arguments without the program name (defaults to sys.argv).

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    logger.debug("Running command: %s", args.command)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

"""Main CLI dispatcher for flowslice.

This module provides the command-line interface, dispatching commands to
the slicing drivers.
"""

import argparse
import sys

from flowslice import __version__
from .slice import add_callers_parser, add_slice_parser


def build_parser():
    parser = argparse.ArgumentParser(
        description="flowslice - forward program slicing over a call graph", prog="flowslice"
    )

    parser.add_argument("--version", action="version", version="flowslice %s" % __version__)

    subparsers = parser.add_subparsers(
        dest="command", help="Available commands", required=True
    )

    add_slice_parser(subparsers)
    add_callers_parser(subparsers)
    return parser


def main(argv=None):
    """Main entry point for the flowslice CLI.

    Parses command-line arguments and dispatches to the selected driver.

    Returns:
        int: Exit code (0 for success, non-zero for error).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.model.exists():
        print(f"Error: Path '{args.model}' not found", file=sys.stderr)
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

"""Command-line argument parsing for wt."""

import argparse
from typing import List, Optional

from wt.__version__ import __version__
from wt.constants import HELP_TEXT


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wt",
        usage="wt [command | query | github-url] [options]",
        description=HELP_TEXT,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Worktrees live under ~/.wt/<repo> (override with WT_BASE). "
        "GitHub lookups use GITHUB_TOKEN when set.",
    )
    parser.add_argument(
        "words",
        nargs="*",
        metavar="ARG",
        help="Command and its arguments, or a search query",
    )
    parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation (wt rm)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information and write ~/.wt/wt.log"
    )
    parser.add_argument("--version", action="version", version=f"wt {__version__}")
    parser.add_argument(
        "--no-install",
        action="store_true",
        help="Skip dependency installation after creating a worktree",
    )
    parser.add_argument(
        "--no-copy",
        action="store_true",
        help="Skip copying gitignored files into a new worktree",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Options may appear anywhere, e.g. ``wt rm -y feature-x``.
    """
    return build_parser().parse_intermixed_args(argv)

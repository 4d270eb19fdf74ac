#!/usr/bin/env python3
"""bfmemo CLI - inspect and exercise memo files.

Commands:
    path      Print where the memo file for a source would live
    inspect   Report whether a source's memo file is usable
    open      Open a source through the memoizer and report hit/miss
    clear     Delete memo files below a directory
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from bfmemo import __version__
from bfmemo.cache import Memoizer, check_memo, resolve_memo_path
from bfmemo.config import MemoConfig, load_config
from bfmemo.core.constants import MEMO_EXTENSION
from bfmemo.core.exceptions import BFMemoError
from bfmemo.core.logging import LogContext, configure_logging, get_logger
from bfmemo.readers import ReaderRegistry

logger = get_logger(__name__)


def _config_from_args(args: argparse.Namespace) -> MemoConfig:
    return load_config(
        args.config,
        directory=getattr(args, "directory", None),
        in_place=True if getattr(args, "in_place", False) else None,
        minimum_elapsed_ms=getattr(args, "min_elapsed", None),
    )


def cmd_path(args: argparse.Namespace) -> int:
    """Print the memo path for a source, or 'none'."""
    config = _config_from_args(args)
    memo_file = resolve_memo_path(args.source, config)
    print(memo_file if memo_file is not None else "none")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Print the memo path and its validity status."""
    config = _config_from_args(args)
    memo_file = resolve_memo_path(args.source, config)
    status = check_memo(memo_file, args.source)
    print(f"memo:   {memo_file if memo_file is not None else 'none'}")
    print(f"status: {status.value}")
    return 0 if status.is_hit else 1


def cmd_open(args: argparse.Namespace) -> int:
    """Open a source through the memoizer."""
    config = _config_from_args(args)

    try:
        reader_class = ReaderRegistry.for_source(args.source)
    except ValueError as e:
        print(str(e))
        return 1

    with Memoizer(reader_class(), config) as memo:
        with LogContext(logger, "Opening", source=args.source):
            memo.set_id(args.source)

        print(f"reader:  {reader_class.format_name}")
        print(f"memo:    {memo.memo_file if memo.memo_file is not None else 'none'}")
        print(f"load:    {memo.last_load.value}")
        print(f"save:    {memo.last_save.value}")
        if memo.last_elapsed_ms is not None:
            print(f"elapsed: {memo.last_elapsed_ms:.1f} ms")
        print(
            f"size:    X={memo.size_x} Y={memo.size_y} Z={memo.size_z} "
            f"C={memo.size_c} T={memo.size_t} ({memo.pixel_type})"
        )
        print(f"series:  {memo.series_count}, planes: {memo.image_count}")
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    """Delete memo files below a directory."""
    root: Path = args.directory
    if not root.is_dir():
        print(f"Not a directory: {root}")
        return 1

    removed = 0
    for memo_file in sorted(root.rglob(f".*.{MEMO_EXTENSION}")):
        if not memo_file.is_file():
            continue
        if args.dry_run:
            print(f"would remove {memo_file}")
        else:
            memo_file.unlink()
            logger.debug("Removed %s", memo_file)
        removed += 1

    verb = "Would remove" if args.dry_run else "Removed"
    print(f"{verb} {removed} memo file(s)")
    return 0


def _add_policy_args(parser: argparse.ArgumentParser) -> None:
    placement = parser.add_mutually_exclusive_group()
    placement.add_argument("--directory", "-d", type=Path, help="Cache root directory")
    placement.add_argument(
        "--in-place", action="store_true", help="Store memo files next to their source"
    )
    parser.add_argument(
        "--min-elapsed",
        type=float,
        default=None,
        metavar="MS",
        help="Only save memos for initializations slower than this (ms)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="bfmemo",
        description="bfmemo - memoize expensive reader initialization",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    path_parser = subparsers.add_parser("path", help="Print the memo path for a source")
    path_parser.add_argument("source", help="Source identifier")
    _add_policy_args(path_parser)
    path_parser.set_defaults(func=cmd_path)

    inspect_parser = subparsers.add_parser("inspect", help="Check a source's memo file")
    inspect_parser.add_argument("source", help="Source identifier")
    _add_policy_args(inspect_parser)
    inspect_parser.set_defaults(func=cmd_inspect)

    open_parser = subparsers.add_parser("open", help="Open a source through the memoizer")
    open_parser.add_argument("source", help="Source identifier")
    _add_policy_args(open_parser)
    open_parser.set_defaults(func=cmd_open)

    clear_parser = subparsers.add_parser("clear", help="Delete memo files below a directory")
    clear_parser.add_argument("directory", type=Path, help="Directory to clean")
    clear_parser.add_argument("--dry-run", action="store_true", help="List only")
    clear_parser.set_defaults(func=cmd_clear)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.log_level:
        configure_logging(level=args.log_level)

    try:
        return args.func(args)
    except BFMemoError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Command line front end: optimize HTML files of a built site in place."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import OptionsError
from .files import iter_files
from .options import DEFAULT_PATTERN, OPTIMIZER_FLAGS
from .pipeline import HtmlOptimizer

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="optimizehtml",
        description="Collapse whitespace and apply optional size optimizations to built HTML files in place.",
    )
    ap.add_argument("paths", nargs="+", type=Path, help="Files or directories to process.")
    ap.add_argument("--pattern", help=f"Glob for files to process, relative to each directory (default: {DEFAULT_PATTERN}).")
    ap.add_argument(
        "--exclude-tag",
        dest="exclude_tags",
        action="append",
        metavar="TAG",
        help="Leave elements with this tag name untouched by every optimization (repeatable).",
    )
    ap.add_argument(
        "--aggressive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable every optimization except empty attribute removal.",
    )
    for flag in OPTIMIZER_FLAGS:
        ap.add_argument(
            "--" + flag.replace("_", "-"),
            dest=flag,
            action=argparse.BooleanOptionalAction,
            default=None,
            help=f"Toggle {flag.replace('_', ' ')}.",
        )
    ap.add_argument("--dry-run", action="store_true", help="Report what would change without writing files.")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeat for debug output).")
    ap.add_argument("-q", "--quiet", action="store_true", help="Only log errors.")
    return ap


def options_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Collect the options the user actually set; unset ones keep their defaults."""

    names = ("pattern", "exclude_tags", "aggressive", *OPTIMIZER_FLAGS)
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load(path: Path) -> dict[str, tuple[Path, bytes]]:
    if path.is_dir():
        return {name: (p, p.read_bytes()) for name, p in iter_files(path)}
    return {path.name: (path, path.read_bytes())}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        optimizer = HtmlOptimizer(options_from_args(args))
    except OptionsError as exc:
        print(exc, file=sys.stderr)
        return 2

    failed = 0
    saved = 0
    for root in args.paths:
        if not root.exists():
            logger.error("No such file or directory: %s", root)
            failed += 1
            continue

        loaded = _load(root)
        files: dict[str, bytes] = {name: data for name, (_path, data) in loaded.items()}
        report = optimizer.process_files(files)

        for err in report.errors:
            logger.error("%s", err)
        failed += len(report.errors)

        for name in report.processed:
            path, original = loaded[name]
            optimized = files[name]
            if optimized == original:
                continue
            saved += len(original) - len(optimized)
            logger.info("%s: %d -> %d bytes", path, len(original), len(optimized))
            if not args.dry_run:
                path.write_bytes(optimized)

    logger.info("Saved %d bytes%s", saved, " (dry run)" if args.dry_run else "")
    return 1 if failed else 0


__all__ = ["build_parser", "main", "options_from_args"]

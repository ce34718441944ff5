from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from cull import __version__, clean
from cull.models import Report, RetentionPolicy
from cull.report import write_report

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cull",
        description=(
            "Remove files older than a retention window and report what was "
            "deleted, retained, or busy. Apply mode requires --yes confirmation."
        ),
    )
    parser.add_argument("--path", default=".", help="Directory to clean")
    parser.add_argument(
        "--max-age-days",
        type=int,
        default=90,
        help="Files at least this many whole days old are removed (default: 90)",
    )
    parser.add_argument(
        "--reference",
        type=datetime.fromisoformat,
        default=None,
        help="ISO timestamp ages are measured from (default: now)",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Descend into subdirectories",
    )
    parser.add_argument(
        "--delete-empty-dirs",
        action="store_true",
        help="Also remove directories that are empty or hold only removable files",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", action="store_true", help="Dry-run (default)")
    mode.add_argument("--apply", action="store_true", help="Delete files")
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm apply mode (required with --apply)",
    )
    parser.add_argument("--report", type=Path, default=None, help="Write a JSON report here")
    parser.add_argument(
        "--markdown",
        type=Path,
        default=None,
        help="Write a Markdown report here",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def policy_from_args(args: argparse.Namespace) -> RetentionPolicy:
    if args.max_age_days < 0:
        raise SystemExit(f"--max-age-days must be >= 0, got {args.max_age_days}")
    options = {
        "max_age_days": args.max_age_days,
        "recursive": args.recursive,
        "delete_empty_directories": args.delete_empty_dirs,
        "dry_run": not args.apply,
    }
    if args.reference is not None:
        options["reference"] = args.reference
    return RetentionPolicy(**options)


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose)

    root = Path(args.path).resolve()
    if not root.exists() or not root.is_dir():
        raise SystemExit(f"Path does not exist or is not a directory: {root}")
    if args.apply and not args.yes:
        raise SystemExit("Refusing to apply without --yes confirmation.")

    policy = policy_from_args(args)
    report = asyncio.run(clean(root, policy))
    write_report(report, json_path=args.report, markdown_path=args.markdown)

    print(_summary_line(report))
    if report.busy or report.not_empty:
        logger.warning(
            "%d busy file(s) and %d non-empty directory(ies) were left behind",
            len(report.busy),
            len(report.not_empty),
        )
        return 2
    return 0


def _summary_line(report: Report) -> str:
    counts = (
        f"delete={len(report.deleted)} retain={len(report.retained)} busy={len(report.busy)}"
    )
    if report.policy.dry_run:
        return f"Dry-run complete for {report.root}: {counts}"
    return f"Cleanup complete for {report.root}: {counts}"


if __name__ == "__main__":
    raise SystemExit(main())

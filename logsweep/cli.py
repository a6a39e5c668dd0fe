"""
Command line entry point for logsweep.

Usage:
    python -m logsweep --base /var/log/ --max-info-age 720h --max-error-age 1440h reg/
    logsweep --dry-run -v reg api
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace

from loguru import logger

from logsweep.config import (
    DEFAULT_BASE_DIR,
    RotationConfig,
    parse_duration,
    parse_size,
)
from logsweep.retention.rotator import LogRotator


def _duration_arg(value: str):
    try:
        return parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _size_arg(value: str) -> int:
    try:
        return parse_size(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Point loguru at stderr with a level picked from the flags or LOGSWEEP_LOG_LEVEL."""
    if quiet:
        level = "ERROR"
    elif verbose:
        level = "DEBUG"
    else:
        level = os.getenv("LOGSWEEP_LOG_LEVEL", "INFO").upper()
        try:
            logger.level(level)
        except ValueError as e:
            raise ValueError(f"LOGSWEEP_LOG_LEVEL: {e}") from e

    logger.remove()
    logger.add(sys.stderr, level=level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logsweep",
        description="Compress and delete glog log files by age and directory size",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Keep INFO logs 30 days, ERROR logs 60 days, at most 1 GiB per directory:
    python -m logsweep --base /var/log/ --max-info-age 720h --max-error-age 1440h --max-size 1G reg/

  Show what would be removed without touching anything:
    python -m logsweep --dry-run -v reg api

Environment:
  LOGSWEEP_BASE_DIR, LOGSWEEP_INFO_MAX_AGE, LOGSWEEP_WARNING_MAX_AGE,
  LOGSWEEP_ERROR_MAX_AGE, LOGSWEEP_MAX_SIZE, LOGSWEEP_DRY_RUN, LOGSWEEP_LOG_LEVEL
  provide defaults; flags take precedence.
""",
    )

    parser.add_argument(
        "log_names",
        nargs="+",
        metavar="LOG_NAME",
        help="Log subdirectories of --base to process",
    )
    parser.add_argument(
        "--base",
        type=str,
        help=f"Base log directory (default: {DEFAULT_BASE_DIR})",
    )
    parser.add_argument(
        "--max-info-age",
        type=_duration_arg,
        metavar="DURATION",
        help="Delete INFO files older than this (default: 1440h)",
    )
    parser.add_argument(
        "--max-warning-age",
        type=_duration_arg,
        metavar="DURATION",
        help="Delete WARNING files older than this (default: 4320h)",
    )
    parser.add_argument(
        "--max-error-age",
        type=_duration_arg,
        metavar="DURATION",
        help="Delete ERROR and FATAL files older than this (default: 4320h)",
    )
    parser.add_argument(
        "--max-size",
        type=_size_arg,
        metavar="SIZE",
        help="Delete oldest files while a directory is larger than this (default: 2G)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would be compressed or deleted",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every file action",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress output except errors",
    )
    return parser


def build_config(args: argparse.Namespace) -> RotationConfig:
    """Environment configuration with command line overrides applied."""
    config = RotationConfig.from_env(log_names=args.log_names)

    overrides = {}
    if args.base:
        overrides["base_dir"] = args.base
    if args.max_info_age is not None:
        overrides["info_max_age"] = args.max_info_age
    if args.max_warning_age is not None:
        overrides["warning_max_age"] = args.max_warning_age
    if args.max_error_age is not None:
        overrides["error_max_age"] = args.max_error_age
    if args.max_size is not None:
        overrides["max_total_bytes"] = args.max_size
    if args.dry_run:
        overrides["dry_run"] = True

    return replace(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Returns:
        Exit code: 0 after a run (even if some directories failed),
        2 for invalid configuration, 1 for an unexpected error
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(verbose=args.verbose, quiet=args.quiet)
        config = build_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        results = LogRotator(config).run()
    except Exception as e:
        logger.exception(f"Rotation crashed: {e}")
        return 1

    if not args.quiet:
        for result in results.values():
            print(result.summary())

    return 0


if __name__ == "__main__":
    sys.exit(main())

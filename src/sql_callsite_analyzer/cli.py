"""
Command line entry point.

    sql-callsite-analyzer src/ --config sql-analyzer.yaml --show-shapes
"""

import argparse
import sys
from typing import Optional, Sequence

from loguru import logger

from .config import ConfigError, load_config
from .static_analysis import SqlCallSiteAnalyzer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sql-callsite-analyzer",
        description="Check bind variables and syntax of SQL passed to execSql-style calls",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Python files or directories to analyze",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--show-shapes",
        action="store_true",
        help="Also print the inferred row shape of every call",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return 2

    analyzer = SqlCallSiteAnalyzer(config)
    report = analyzer.analyze_paths(args.paths)

    for issue in report.issues:
        print(issue.format())

    if args.show_shapes:
        for row_shape in report.shapes:
            print(row_shape.format())

    for warning in report.warnings:
        logger.warning(warning)

    logger.info(
        f"Analyzed {report.calls_analyzed} SQL calls in {report.files_analyzed} files, "
        f"{len(report.issues)} issues",
    )
    return 1 if report.has_issues else 0


if __name__ == "__main__":
    sys.exit(main())

"""
Main static analysis orchestrator.

Parses Python sources with LibCST, collects the constants their calls may
refer to, and runs the SQL call-site analyzers over every registered call.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import libcst as cst
from libcst.metadata import MetadataWrapper
from loguru import logger

from ..config import AnalyzerConfig, DEFAULT_CONFIG
from ..diagnostics import Issue
from ..registry import get_call_argument_analyzers, get_return_type_analyzers
from .call_analyzer import RowShape, SqlCallVisitor
from .value_resolver import ConstantCollector


@dataclass
class AnalysisReport:
    """Issues, inferred row shapes and warnings from analyzing some sources."""

    issues: list[Issue] = field(default_factory=list)
    shapes: list[RowShape] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    files_analyzed: int = 0
    calls_analyzed: int = 0

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def merge(self, other: "AnalysisReport") -> None:
        self.issues.extend(other.issues)
        self.shapes.extend(other.shapes)
        self.warnings.extend(other.warnings)
        self.files_analyzed += other.files_analyzed
        self.calls_analyzed += other.calls_analyzed

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


class SqlCallSiteAnalyzer:
    """
    Analyzes Python sources for problems with the SQL passed to registered calls.

    Args:
        config: Analyzer configuration
    """

    def __init__(self, config: AnalyzerConfig = DEFAULT_CONFIG):
        self.config = config
        self.call_argument_analyzers = get_call_argument_analyzers(config)
        self.return_type_analyzers = get_return_type_analyzers(config)

    @property
    def enabled(self) -> bool:
        return bool(self.call_argument_analyzers or self.return_type_analyzers)

    def analyze_source(self, source: str, path: str = "<string>") -> AnalysisReport:
        """
        Analyze one module's source code.

        Args:
            source: Python source code
            path: Path reported in issues

        Returns:
            AnalysisReport for this module
        """
        report = AnalysisReport()
        if not self.enabled:
            return report

        try:
            module = cst.parse_module(source)
        except cst.ParserSyntaxError as e:
            # If we can't parse the source, skip it with a warning
            logger.warning(f"Skipping {path}: {e.message}")
            report.add_warning(f"Could not parse {path}: {e.message}")
            return report

        try:
            wrapper = MetadataWrapper(module)
            constants = ConstantCollector()
            wrapper.visit(constants)

            visitor = SqlCallVisitor(
                path,
                constants,
                self.call_argument_analyzers,
                self.return_type_analyzers,
            )
            wrapper.visit(visitor)
        except Exception as e:
            # Fallback for any unexpected errors; one module never stops the run
            logger.opt(exception=e).warning(f"Analysis of {path} failed")
            report.add_warning(f"Analysis failed for {path}: {e!r}")
            return report

        report.issues.extend(visitor.issues)
        report.shapes.extend(visitor.shapes)
        report.files_analyzed = 1
        report.calls_analyzed = visitor.calls_analyzed
        logger.debug(
            f"{path}: {visitor.calls_analyzed} SQL calls, {len(visitor.issues)} issues",
        )
        return report

    def analyze_file(self, path: str | Path) -> AnalysisReport:
        """Analyze one Python file."""
        file_path = Path(path)
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping {file_path}: {e}")
            report = AnalysisReport()
            report.add_warning(f"Could not read {file_path}: {e}")
            return report
        return self.analyze_source(source, str(file_path))

    def analyze_paths(self, paths: Iterable[str | Path]) -> AnalysisReport:
        """Analyze files, and ``.py`` files found recursively under directories."""
        report = AnalysisReport()
        for file_path in iter_python_files(paths, report):
            report.merge(self.analyze_file(file_path))
        return report


def iter_python_files(paths: Iterable[str | Path], report: AnalysisReport):
    for path in paths:
        path = Path(path)
        if path.is_dir():
            yield from sorted(path.rglob("*.py"))
        elif path.is_file():
            yield path
        else:
            report.add_warning(f"No such file or directory: {path}")


def analyze_source(
    source: str,
    path: str = "<string>",
    config: AnalyzerConfig = DEFAULT_CONFIG,
) -> AnalysisReport:
    """Analyze one module's source code with a fresh analyzer."""
    return SqlCallSiteAnalyzer(config).analyze_source(source, path)


def analyze_paths(
    paths: Iterable[str | Path],
    config: AnalyzerConfig = DEFAULT_CONFIG,
) -> AnalysisReport:
    """Analyze Python files and directories with a fresh analyzer."""
    return SqlCallSiteAnalyzer(config).analyze_paths(paths)

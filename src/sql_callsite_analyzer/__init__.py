"""
SQL Call-Site Analyzer

Static checks for SQL passed to execSql-style functions: bind variables that
are missing or unexpected, SQL that does not parse, and the column names a
SELECT returns. Call sites are found in Python sources with LibCST; the SQL
itself is parsed with sqlglot.
"""

from .config import AnalyzerConfig, CallSite, ConfigError, load_config
from .diagnostics import Diagnostic, Issue, IssueKind, Severity
from .registry import (
    CallArgumentAnalyzer,
    CallArguments,
    ReturnTypeAnalyzer,
    get_call_argument_analyzers,
    get_return_type_analyzers,
)
from .static_analysis import AnalysisReport, SqlCallSiteAnalyzer, analyze_paths, analyze_source

__version__ = "0.1.0"

__all__ = [
    # Source analysis
    "analyze_source",
    "analyze_paths",
    "SqlCallSiteAnalyzer",
    "AnalysisReport",
    # Registration table
    "get_call_argument_analyzers",
    "get_return_type_analyzers",
    "CallArgumentAnalyzer",
    "CallArguments",
    "ReturnTypeAnalyzer",
    # Configuration
    "AnalyzerConfig",
    "CallSite",
    "ConfigError",
    "load_config",
    # Diagnostics
    "Diagnostic",
    "Issue",
    "IssueKind",
    "Severity",
]

"""
Static analysis of Python sources that run SQL.

This module provides the LibCST-based host for the SQL analyzers: it locates
calls to the registered SQL functions, resolves their SQL and bind variable
arguments without executing anything, and collects the resulting issues and
row shapes.
"""

from .analyzer import (
    AnalysisReport,
    SqlCallSiteAnalyzer,
    analyze_paths,
    analyze_source,
)
from .call_analyzer import RowShape, SqlCallVisitor, call_arguments, positional_args
from .value_resolver import ConstantCollector, LiteralResolver

__all__ = [
    # Main analysis entry points
    "analyze_source",
    "analyze_paths",
    "SqlCallSiteAnalyzer",
    "AnalysisReport",
    "RowShape",
    # Analysis components
    "SqlCallVisitor",
    "ConstantCollector",
    "LiteralResolver",
    # Utility functions
    "call_arguments",
    "positional_args",
]

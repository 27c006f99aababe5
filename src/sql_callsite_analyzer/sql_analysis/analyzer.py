"""
Analyzer facade for SQL call sites.

Combines normalization, bind variable checks, syntax validation and shape
inference into the two analyses a host runs per call: checking the call's
arguments, and inferring what the call returns.
"""

from typing import Iterable, Optional

from ..config import AnalyzerConfig, DEFAULT_CONFIG
from ..diagnostics import Diagnostic, IssueKind
from .bind_vars import BindVarSet, compare_bind_vars, extract_referenced_bind_vars
from .results import ShapeInference
from .shape_inference import ShapeInferrer
from .syntax_validator import SyntaxValidator


class SqlAnalyzer:
    """
    Pure, stateless analysis of one SQL text at a time.

    Args:
        config: Analyzer configuration (dialect, suppression lists, ...)
    """

    def __init__(self, config: AnalyzerConfig = DEFAULT_CONFIG):
        self.config = config
        self.syntax_validator = SyntaxValidator(config)
        self.shape_inferrer = ShapeInferrer(config)

    def analyze_call_bind_vars(
        self,
        sql: str,
        actual_bind_vars: Optional[Iterable[str]] = None,
    ) -> list[Diagnostic]:
        """
        Check the syntax and bind variables of the SQL passed to a call.

        Args:
            sql: The SQL text; empty when it could not be resolved
            actual_bind_vars: Bind variable names supplied at the call, or
                None when they are not fully known statically

        Returns:
            Diagnostics to report for this call, possibly empty
        """
        if not sql:
            return []

        diagnostics = []
        outcome = self.syntax_validator.validate(sql)
        if outcome.is_error:
            diagnostics.append(
                Diagnostic(
                    IssueKind.SQL_SYNTAX_ERROR,
                    (outcome.error_kind.value, outcome.raw_token, outcome.message),
                ),
            )

        if actual_bind_vars is not None:
            diagnostics.extend(self._bind_var_diagnostics(sql, BindVarSet(actual_bind_vars)))

        return diagnostics

    def infer_return_shape(self, sql: str) -> ShapeInference:
        """Infer the row shape returned by running ``sql``."""
        if not sql:
            return ShapeInference.unknown("unresolved sql")
        return self.shape_inferrer.infer(sql)

    def _bind_var_diagnostics(self, sql: str, actual: BindVarSet) -> list[Diagnostic]:
        expected = extract_referenced_bind_vars(sql, self.config.placeholder_pattern)
        diff = compare_bind_vars(expected, actual)

        diagnostics = []
        actual_listing = ", ".join(actual.by_key())
        for name in diff.missing:
            diagnostics.append(
                Diagnostic(IssueKind.MISSING_BIND_VAR, (name, actual_listing)),
            )

        expected_listing = ", ".join(expected.by_key())
        for name in diff.unexpected:
            diagnostics.append(
                Diagnostic(IssueKind.UNEXPECTED_BIND_VAR, (name, expected_listing)),
            )
        return diagnostics

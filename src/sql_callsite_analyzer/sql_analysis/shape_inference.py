"""
Result shape inference for SELECT statements.

Infers the column names a query returns so callers' row handling can be
checked against them. Only names are inferred; every column gets the
placeholder type :data:`MIXED_TYPE`.

When any projection is in doubt the whole shape is reported unknown. A
partial shape would be taken as complete and hide real errors on the columns
left out.
"""

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from ..config import AnalyzerConfig, DEFAULT_CONFIG
from .normalizer import normalize_sql, restore_bind_vars
from .results import ShapeInference


class ShapeInferrer:
    """Derives the ordered output column aliases of a single SELECT."""

    def __init__(self, config: AnalyzerConfig = DEFAULT_CONFIG):
        self.placeholder_pattern = config.placeholder_pattern
        self.dialect = config.syntax.dialect
        self.misparsed_aliases = frozenset(config.shapes.misparsed_aliases)

    def infer(self, sql: str) -> ShapeInference:
        """
        Infer the row shape of a SQL statement.

        Args:
            sql: Raw SQL text as written at the call site

        Returns:
            ShapeInference with the column aliases, or unknown with a reason
        """
        normalized = normalize_sql(
            sql,
            rewrite_binds=True,
            placeholder_pattern=self.placeholder_pattern,
        )
        try:
            parsed = sqlglot.parse(normalized, read=self.dialect)
        except (ParseError, TokenError):
            return ShapeInference.unknown("unparseable statement")
        except RecursionError:
            return ShapeInference.unknown("statement too deeply nested")

        statements = [statement for statement in parsed if statement is not None]
        if len(statements) != 1:
            return ShapeInference.unknown(
                f"expected one statement, found {len(statements)}",
            )

        statement = statements[0]
        if not isinstance(statement, exp.Select):
            return ShapeInference.unknown(f"{statement.key} is not a select")

        aliases = []
        for projection in statement.expressions:
            alias = self.column_alias(projection)
            if alias == "*":
                return ShapeInference.unknown("wildcard select")
            if alias in self.misparsed_aliases:
                return ShapeInference.unknown(f"ambiguous column {alias}")
            if not alias:
                return ShapeInference.unknown("empty column alias")
            aliases.append(alias)

        return ShapeInference.from_aliases(aliases)

    def column_alias(self, projection: exp.Expression) -> str:
        """Explicit alias, else bare column name, else the expression text."""
        if projection.is_star:
            return "*"
        if isinstance(projection, exp.Alias):
            alias = projection.alias
        elif isinstance(projection, exp.Column):
            alias = projection.name
        else:
            alias = projection.sql(dialect=self.dialect)

        alias = restore_bind_vars(alias.strip().lower())
        return strip_redundant_parens(alias)


def strip_redundant_parens(alias: str) -> str:
    """``(a + b)`` -> ``a + b``; nested parentheses are left alone."""
    if alias.startswith("(") and alias.endswith(")"):
        inner = alias[1:-1]
        if "(" not in inner and ")" not in inner:
            return inner.strip()
    return alias


def infer_shape(sql: str, config: AnalyzerConfig = DEFAULT_CONFIG) -> ShapeInference:
    """Infer a row shape with an inferrer built from ``config``."""
    return ShapeInferrer(config).infer(sql)

"""
SQL syntax validation with false-positive suppression.

The grammar is sqlglot's parser for a single dialect, used as an
approximation of the SQL the application actually runs. Constructs outside
that grammar would otherwise be reported on every call, so some statements
are skipped up front and some parse failures are dropped based on the token
the parser stopped at.
"""

import re
from typing import Optional

import sqlglot
from loguru import logger
from sqlglot.errors import ParseError, TokenError

from ..config import AnalyzerConfig, DEFAULT_CONFIG
from .normalizer import normalize_sql
from .results import ParseErrorKind, ParseOutcome

UNSUPPORTED_CONSTRUCT = "unsupported construct"
APPROXIMATION_GAP = "approximation gap"
TOO_DEEPLY_NESTED = "too deeply nested"


class SyntaxValidator:
    """
    Checks SQL statements against the configured dialect's grammar.

    Instances hold only compiled configuration and can be shared freely.
    """

    def __init__(self, config: AnalyzerConfig = DEFAULT_CONFIG):
        self.placeholder_pattern = config.placeholder_pattern
        self.dialect = config.syntax.dialect
        self.give_up_patterns = [
            re.compile(pattern, re.IGNORECASE)
            for pattern in config.syntax.give_up_patterns
        ]
        self.suppressed_tokens = frozenset(config.syntax.suppressed_tokens)

    def validate(self, sql: str) -> ParseOutcome:
        """
        Validate the syntax of one SQL statement.

        Args:
            sql: Raw SQL text as written at the call site

        Returns:
            ParseOutcome that is valid, a syntax error, or suppressed
        """
        if self._should_give_up(sql):
            return ParseOutcome.suppressed(UNSUPPORTED_CONSTRUCT)

        normalized = normalize_sql(
            sql,
            rewrite_binds=True,
            placeholder_pattern=self.placeholder_pattern,
        )
        try:
            sqlglot.parse(normalized, read=self.dialect)
        except (ParseError, TokenError) as e:
            return self._outcome_for_error(e)
        except RecursionError:
            # The recursive-descent parser gives up long before the database does
            logger.debug(f"Parser recursion limit reached on: {sql[:80]}")
            return ParseOutcome.suppressed(TOO_DEEPLY_NESTED)

        return ParseOutcome.valid()

    def _should_give_up(self, sql: str) -> bool:
        return any(pattern.search(sql) for pattern in self.give_up_patterns)

    def _outcome_for_error(self, error: Exception) -> ParseOutcome:
        error_kind = classify_parse_error(error)
        raw_token = (offending_token(error) or error_kind.name).upper()

        if raw_token in self.suppressed_tokens:
            logger.debug(f"Suppressed parse failure at {raw_token}: {error_message(error)}")
            return ParseOutcome.suppressed(APPROXIMATION_GAP)

        return ParseOutcome.syntax_error(
            raw_token=raw_token,
            message=error_message(error),
            error_kind=error_kind,
        )


def _first_error(error: Exception) -> dict:
    errors = getattr(error, "errors", None) or []
    return errors[0] if errors else {}


def offending_token(error: Exception) -> Optional[str]:
    """Text of the token the parser failed on, if the error carries it."""
    highlight = _first_error(error).get("highlight")
    if highlight:
        return str(highlight).strip() or None
    return None


def error_message(error: Exception) -> str:
    description = _first_error(error).get("description")
    if description:
        return str(description)
    return str(error)


def classify_parse_error(error: Exception) -> ParseErrorKind:
    """Map a sqlglot exception onto a :class:`ParseErrorKind`."""
    if isinstance(error, TokenError):
        return ParseErrorKind.TOKENIZE

    description = str(_first_error(error).get("description") or "")
    if description.startswith("Required keyword"):
        return ParseErrorKind.MISSING_ARGUMENT
    if description.startswith("Expected"):
        return ParseErrorKind.EXPECTED_TOKEN
    if description.startswith(("Invalid expression", "Unexpected token")):
        return ParseErrorKind.UNEXPECTED_TOKEN
    return ParseErrorKind.PARSE


def validate_syntax(sql: str, config: AnalyzerConfig = DEFAULT_CONFIG) -> ParseOutcome:
    """Validate one SQL statement with a validator built from ``config``."""
    return SyntaxValidator(config).validate(sql)

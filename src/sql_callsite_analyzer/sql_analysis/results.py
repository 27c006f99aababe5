"""
Result values for syntax validation and shape inference.

These types do not depend on the SQL parser, so hosts can handle results
without importing it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Placeholder value type for every inferred column; only names are inferred
MIXED_TYPE = "mixed"


class ParseStatus(Enum):
    VALID = "valid"
    SYNTAX_ERROR = "syntax_error"
    SUPPRESSED = "suppressed"


class ParseErrorKind(Enum):
    """Parser failure classes, independent of the parser's exception types."""

    TOKENIZE = "tokenize"
    UNEXPECTED_TOKEN = "unexpected_token"
    EXPECTED_TOKEN = "expected_token"
    MISSING_ARGUMENT = "missing_argument"
    PARSE = "parse"


@dataclass(frozen=True)
class ParseOutcome:
    """Outcome of checking one SQL statement's syntax."""

    status: ParseStatus
    raw_token: Optional[str] = None
    message: Optional[str] = None
    error_kind: Optional[ParseErrorKind] = None
    reason: Optional[str] = None

    @classmethod
    def valid(cls) -> "ParseOutcome":
        return cls(ParseStatus.VALID)

    @classmethod
    def suppressed(cls, reason: str) -> "ParseOutcome":
        return cls(ParseStatus.SUPPRESSED, reason=reason)

    @classmethod
    def syntax_error(
        cls,
        raw_token: str,
        message: str,
        error_kind: ParseErrorKind,
    ) -> "ParseOutcome":
        return cls(
            ParseStatus.SYNTAX_ERROR,
            raw_token=raw_token,
            message=message,
            error_kind=error_kind,
        )

    @property
    def is_valid(self) -> bool:
        return self.status is ParseStatus.VALID

    @property
    def is_error(self) -> bool:
        return self.status is ParseStatus.SYNTAX_ERROR

    @property
    def is_suppressed(self) -> bool:
        return self.status is ParseStatus.SUPPRESSED


@dataclass(frozen=True)
class ShapeInference:
    """
    Inferred row shape of a query.

    ``columns`` is ``None`` when the shape is unknown; ``reason`` then says why.
    A known shape maps each lowercase column alias to :data:`MIXED_TYPE`.
    """

    columns: Optional[dict[str, str]] = field(default=None, hash=False)
    reason: Optional[str] = None

    @classmethod
    def unknown(cls, reason: str) -> "ShapeInference":
        return cls(columns=None, reason=reason)

    @classmethod
    def from_aliases(cls, aliases: list[str]) -> "ShapeInference":
        columns: dict[str, str] = {}
        for alias in aliases:
            columns[alias] = MIXED_TYPE
        return cls(columns=columns)

    @property
    def is_known(self) -> bool:
        return self.columns is not None

    @property
    def column_names(self) -> list[str]:
        return list(self.columns or {})

    def describe(self) -> str:
        if self.columns is None:
            return f"unknown ({self.reason})"
        fields = ", ".join(f"{name}: {kind}" for name, kind in self.columns.items())
        return f"{{{fields}}}"

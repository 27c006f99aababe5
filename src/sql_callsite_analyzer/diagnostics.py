"""
Issue kinds and diagnostic values produced by the analyzer.

The analyzer core only builds :class:`Diagnostic` values. Attaching a source
location and deciding what to do with the result is up to the host, which
wraps them in :class:`Issue`.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class Severity(IntEnum):
    LOW = 0
    NORMAL = 5
    CRITICAL = 10


class IssueKind(Enum):
    """Issue types with stable identifiers, codes and message templates."""

    MISSING_BIND_VAR = (
        "OraMissingBindVar",
        16004,
        Severity.NORMAL,
        "Missing bind var {0}. Actual bind vars: ({1})",
    )
    UNEXPECTED_BIND_VAR = (
        "OraUnexpectedBindVar",
        16005,
        Severity.NORMAL,
        "Unexpected bind var {0}. Expected bind vars: ({1})",
    )
    SQL_SYNTAX_ERROR = (
        "OraSqlSyntaxError",
        16006,
        Severity.CRITICAL,
        "Invalid SQL ({0}) near {1}: {2}",
    )

    def __init__(self, identifier, code, severity, template):
        self.identifier = identifier
        self.code = code
        self.severity = severity
        self.template = template


@dataclass(frozen=True)
class Diagnostic:
    """A single finding about one SQL call, without a location."""

    kind: IssueKind
    args: tuple[str, ...]

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    @property
    def message(self) -> str:
        return self.kind.template.format(*self.args)


@dataclass(frozen=True)
class Issue:
    """A diagnostic attached to a place in a source file."""

    diagnostic: Diagnostic
    path: str
    line: int
    column: int
    function: str | None = None

    def format(self) -> str:
        kind = self.diagnostic.kind
        return (
            f"{self.path}:{self.line}:{self.column}: "
            f"{kind.identifier} [{kind.code}] {self.diagnostic.message}"
        )

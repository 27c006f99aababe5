"""
Registration table for the SQL-executing functions a host should check.

Each registered function maps to two analyzers: one checking the call's
arguments (syntax and bind variables) and one inferring the call's return
shape. Both are generic; what differs between functions is the
:class:`~sql_callsite_analyzer.config.CallSite` record saying which argument
holds the SQL and which holds the bind variables.

If sqlglot is not installed both tables are empty, so a host keeps running
without SQL checks.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from importlib.util import find_spec
from typing import TYPE_CHECKING, Generic, Mapping, Optional, Protocol, Sequence, TypeVar

from loguru import logger

from .config import AnalyzerConfig, CallSite, DEFAULT_CONFIG
from .diagnostics import Diagnostic
from .sql_analysis.results import ShapeInference

if TYPE_CHECKING:
    from .sql_analysis.analyzer import SqlAnalyzer

ArgT = TypeVar("ArgT")
ArgT_contra = TypeVar("ArgT_contra", contravariant=True)


class ArgumentResolver(Protocol[ArgT_contra]):
    """What a host must provide to turn argument expressions into values."""

    def resolve_string(self, node: ArgT_contra) -> Optional[str]:
        """Statically known string value of ``node``, or None."""

    def resolve_keys(self, node: ArgT_contra) -> Optional[list[str]]:
        """All keys of a fully known mapping literal, or None."""


@dataclass(frozen=True)
class CallArguments(Generic[ArgT]):
    """
    Argument expressions of one call, as the host sees them.

    Args:
        positional: Positional arguments before any ``*args``
        keywords: Arguments passed by name, excluding ``**kwargs``
    """

    positional: Sequence[ArgT] = ()
    keywords: Mapping[str, ArgT] = field(default_factory=dict)

    def argument(self, index: Optional[int], keyword: Optional[str]) -> Optional[ArgT]:
        """The expression in a parameter slot, or None when it cannot be located."""
        if index is not None and index < len(self.positional):
            return self.positional[index]
        if keyword is not None:
            return self.keywords.get(keyword)
        return None


@dataclass(frozen=True)
class CallArgumentAnalyzer(Generic[ArgT]):
    """Checks the SQL and bind variable arguments of one registered function."""

    call_site: CallSite
    analyzer: "SqlAnalyzer"

    def analyze(
        self,
        args: CallArguments[ArgT],
        resolver: ArgumentResolver[ArgT],
    ) -> list[Diagnostic]:
        sql = _resolve_sql(self.call_site, args, resolver)
        if not sql:
            return []

        # Omitted, or hidden behind *args / **kwargs: the supplied keys are unknown
        actual_bind_vars = None
        bind_vars_node = args.argument(
            self.call_site.bind_vars_arg_index,
            self.call_site.bind_vars_keyword,
        )
        if bind_vars_node is not None:
            actual_bind_vars = resolver.resolve_keys(bind_vars_node)

        return self.analyzer.analyze_call_bind_vars(sql, actual_bind_vars)


@dataclass(frozen=True)
class ReturnTypeAnalyzer(Generic[ArgT]):
    """Infers the row shape returned by one registered function."""

    call_site: CallSite
    analyzer: "SqlAnalyzer"

    def analyze(
        self,
        args: CallArguments[ArgT],
        resolver: ArgumentResolver[ArgT],
    ) -> ShapeInference:
        sql = _resolve_sql(self.call_site, args, resolver)
        return self.analyzer.infer_return_shape(sql or "")


def _resolve_sql(
    call_site: CallSite,
    args: CallArguments[ArgT],
    resolver: ArgumentResolver[ArgT],
) -> Optional[str]:
    sql_node = args.argument(call_site.sql_arg_index, call_site.sql_keyword)
    if sql_node is None:
        return None
    return resolver.resolve_string(sql_node)


@lru_cache(maxsize=None)
def sql_parser_available() -> bool:
    """Whether sqlglot can be imported. Reports its absence once."""
    if find_spec("sqlglot") is None:
        logger.error(
            "sqlglot is not installed; SQL call-site analysis is disabled. "
            "Install it with `pip install sqlglot`.",
        )
        return False
    return True


def _build_analyzer(config: AnalyzerConfig) -> "SqlAnalyzer":
    from .sql_analysis.analyzer import SqlAnalyzer

    return SqlAnalyzer(config)


def get_call_argument_analyzers(
    config: AnalyzerConfig = DEFAULT_CONFIG,
) -> dict[str, CallArgumentAnalyzer]:
    """
    Build the call-argument analyzers for every registered function.

    Args:
        config: Analyzer configuration, including the registered call sites

    Returns:
        Mapping of fully qualified function name to its analyzer; empty when
        sqlglot is unavailable
    """
    if not sql_parser_available():
        return {}

    analyzer = _build_analyzer(config)
    return {
        call_site.function: CallArgumentAnalyzer(call_site, analyzer)
        for call_site in config.call_sites
    }


def get_return_type_analyzers(
    config: AnalyzerConfig = DEFAULT_CONFIG,
) -> dict[str, ReturnTypeAnalyzer]:
    """
    Build the return-shape analyzers for every registered function.

    Returns:
        Mapping of fully qualified function name to its analyzer; empty when
        sqlglot is unavailable
    """
    if not sql_parser_available():
        return {}

    analyzer = _build_analyzer(config)
    return {
        call_site.function: ReturnTypeAnalyzer(call_site, analyzer)
        for call_site in config.call_sites
    }

"""Tests for the registration table and degraded mode."""

import libcst as cst

from sql_callsite_analyzer import registry
from sql_callsite_analyzer.config import AnalyzerConfig, CallSite
from sql_callsite_analyzer.diagnostics import IssueKind
from sql_callsite_analyzer.registry import (
    CallArgumentAnalyzer,
    CallArguments,
    ReturnTypeAnalyzer,
    get_call_argument_analyzers,
    get_return_type_analyzers,
)
from sql_callsite_analyzer.static_analysis import (
    ConstantCollector,
    LiteralResolver,
    call_arguments,
)


def call_args(source: str) -> CallArguments:
    """Argument expressions of a call expression."""
    return call_arguments(cst.parse_expression(source))


def resolver() -> LiteralResolver:
    return LiteralResolver(ConstantCollector())


class TestRegistrationTable:
    """The three registered functions and their argument positions."""

    def test_registered_functions(self):
        """Test that both tables cover the same three functions."""
        call_analyzers = get_call_argument_analyzers()
        return_analyzers = get_return_type_analyzers()

        expected = {"Ora.execSql", "Ora.execLimitSql", "Ora.getSelectRows"}
        assert set(call_analyzers) == expected
        assert set(return_analyzers) == expected
        assert all(isinstance(a, CallArgumentAnalyzer) for a in call_analyzers.values())
        assert all(isinstance(a, ReturnTypeAnalyzer) for a in return_analyzers.values())

    def test_argument_positions(self):
        """Test the SQL and bind variable positions per function."""
        call_analyzers = get_call_argument_analyzers()

        assert call_analyzers["Ora.execSql"].call_site.bind_vars_arg_index == 1
        assert call_analyzers["Ora.getSelectRows"].call_site.bind_vars_arg_index == 1
        assert call_analyzers["Ora.execLimitSql"].call_site.bind_vars_arg_index == 3
        assert all(a.call_site.sql_arg_index == 0 for a in call_analyzers.values())

    def test_custom_call_sites(self):
        """Test registering a different function from configuration."""
        config = AnalyzerConfig(
            call_sites=(CallSite(function="Db.query", sql_arg_index=1, bind_vars_arg_index=2),),
        )
        assert set(get_call_argument_analyzers(config)) == {"Db.query"}
        assert get_call_argument_analyzers(config)["Db.query"].call_site.method_name == "query"


class TestCallArgumentAnalyzer:
    """The generic call-argument analyzer."""

    def test_exec_sql_bind_vars(self):
        """Test bind variables at index 1."""
        analyzer = get_call_argument_analyzers()["Ora.execSql"]
        diagnostics = analyzer.analyze(
            call_args('f("SELECT a FROM t WHERE x = :x", {"y": 1})'),
            resolver(),
        )
        assert sorted(d.kind.identifier for d in diagnostics) == [
            "OraMissingBindVar",
            "OraUnexpectedBindVar",
        ]

    def test_exec_limit_sql_bind_vars(self):
        """Test bind variables at index 3."""
        analyzer = get_call_argument_analyzers()["Ora.execLimitSql"]
        diagnostics = analyzer.analyze(
            call_args('f("SELECT a FROM t WHERE x = :x", 0, 10, {"x": 1})'),
            resolver(),
        )
        assert diagnostics == []

    def test_omitted_bind_vars_skip_comparison(self):
        """Test that a call without the bind variable argument is not compared."""
        analyzer = get_call_argument_analyzers()["Ora.execSql"]
        diagnostics = analyzer.analyze(
            call_args('f("SELECT a FROM t WHERE x = :x")'),
            resolver(),
        )
        assert diagnostics == []

    def test_omitted_bind_vars_still_check_syntax(self):
        """Test that the syntax check runs without bind variables."""
        analyzer = get_call_argument_analyzers()["Ora.execSql"]
        diagnostics = analyzer.analyze(call_args('f("SELECT foo bar FROM")'), resolver())
        assert [d.kind for d in diagnostics] == [IssueKind.SQL_SYNTAX_ERROR]

    def test_keyword_arguments(self):
        """Test SQL and bind variables passed by parameter name."""
        analyzer = get_call_argument_analyzers()["Ora.execSql"]

        matching = analyzer.analyze(
            call_args('f("SELECT a FROM t WHERE x = :x", bind_vars={"x": 1})'),
            resolver(),
        )
        assert matching == []

        wrong = analyzer.analyze(
            call_args('f(sql="SELECT a FROM t WHERE x = :x", bind_vars={"y": 1})'),
            resolver(),
        )
        assert [d.kind for d in wrong] == [
            IssueKind.MISSING_BIND_VAR,
            IssueKind.UNEXPECTED_BIND_VAR,
        ]

    def test_unpacked_arguments_skip_comparison(self):
        """Test that bind variables behind *args or **kwargs are unknown."""
        analyzer = get_call_argument_analyzers()["Ora.execLimitSql"]
        for source in (
            'f("SELECT a FROM t WHERE x = :x", *rest)',
            'f("SELECT a FROM t WHERE x = :x", 0, *rest)',
            'f("SELECT a FROM t WHERE x = :x", 0, 10, **kwargs)',
            'f("SELECT a FROM t WHERE x = :x", *rest, {"y": 1})',
        ):
            assert analyzer.analyze(call_args(source), resolver()) == [], source

    def test_unresolved_bind_vars_skip_comparison(self):
        """Test that a non-literal mapping only gets the syntax check."""
        analyzer = get_call_argument_analyzers()["Ora.execSql"]
        diagnostics = analyzer.analyze(
            call_args('f("SELECT a FROM t WHERE x = :x", params)'),
            resolver(),
        )
        assert diagnostics == []

    def test_unresolved_sql_is_a_no_op(self):
        """Test that SQL which cannot be resolved is not checked."""
        analyzer = get_call_argument_analyzers()["Ora.execSql"]
        assert analyzer.analyze(call_args("f(sql, {})"), resolver()) == []
        assert analyzer.analyze(call_args("f()"), resolver()) == []

    def test_no_bind_var_position(self):
        """Test a call site configured without bind variables."""
        config = AnalyzerConfig(
            call_sites=(CallSite(function="Db.run", bind_vars_arg_index=None),),
        )
        analyzer = get_call_argument_analyzers(config)["Db.run"]
        diagnostics = analyzer.analyze(
            call_args('f("SELECT a FROM t WHERE x = :x")'),
            resolver(),
        )
        assert diagnostics == []


class TestCallArguments:
    """Locating a parameter slot in a call's arguments."""

    def test_positional_then_keyword(self):
        """Test that a position wins over a keyword, and a keyword fills the gap."""
        args = CallArguments(positional=("sql",), keywords={"bind_vars": "binds"})
        assert args.argument(0, "sql") == "sql"
        assert args.argument(1, "bind_vars") == "binds"

    def test_missing_slot(self):
        """Test slots that cannot be located."""
        args = CallArguments(positional=("sql",))
        assert args.argument(1, "bind_vars") is None
        assert args.argument(None, None) is None
        assert args.argument(3, None) is None


class TestReturnTypeAnalyzer:
    """The generic return-shape analyzer."""

    def test_infer_shape(self):
        """Test inferring the shape from the SQL argument."""
        analyzer = get_return_type_analyzers()["Ora.getSelectRows"]
        shape = analyzer.analyze(call_args('f("SELECT a, b c FROM t")'), resolver())
        assert shape.column_names == ["a", "c"]

    def test_unresolved_sql(self):
        """Test that unresolved SQL gives an unknown shape."""
        analyzer = get_return_type_analyzers()["Ora.execSql"]
        shape = analyzer.analyze(call_args("f(sql)"), resolver())
        assert not shape.is_known


class TestDegradedMode:
    """Behaviour when sqlglot is not installed."""

    def test_tables_are_empty(self, monkeypatch, reset_parser_check):
        """Test that both registration functions return nothing."""
        monkeypatch.setattr(registry, "find_spec", lambda name: None)

        assert get_call_argument_analyzers() == {}
        assert get_return_type_analyzers() == {}

    def test_missing_parser_is_reported_once(self, monkeypatch, reset_parser_check, log_messages):
        """Test that the missing dependency is logged a single time."""
        monkeypatch.setattr(registry, "find_spec", lambda name: None)

        get_call_argument_analyzers()
        get_return_type_analyzers()
        get_call_argument_analyzers()

        errors = [m for m in log_messages if m.startswith("ERROR") and "sqlglot" in m]
        assert len(errors) == 1

    def test_parser_available(self, reset_parser_check):
        """Test the normal case."""
        assert registry.sql_parser_available() is True

"""
Call-site locator for registered SQL functions.

Visits a module's CST, finds calls to the registered functions by their final
name segment (``ora.execSql(...)``, ``Ora.getSelectRows(...)``,
``execSql(...)``), resolves their arguments and runs the registered
analyzers on them.
"""

from dataclasses import dataclass

import libcst as cst
from libcst.metadata import PositionProvider

from ..diagnostics import Issue
from ..registry import CallArgumentAnalyzer, CallArguments, ReturnTypeAnalyzer
from ..sql_analysis.results import ShapeInference
from .value_resolver import ConstantCollector, LiteralResolver


@dataclass(frozen=True)
class RowShape:
    """Inferred return shape of one call."""

    function: str
    path: str
    line: int
    column: int
    shape: ShapeInference

    def format(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: {self.function} returns {self.shape.describe()}"


class SqlCallVisitor(cst.CSTVisitor):
    """
    Runs the SQL analyzers on every registered call in a module.

    Must be visited through a :class:`libcst.metadata.MetadataWrapper` that
    the ``constants`` collector has already visited.
    """

    METADATA_DEPENDENCIES = (PositionProvider,)

    def __init__(
        self,
        path: str,
        constants: ConstantCollector,
        call_argument_analyzers: dict[str, CallArgumentAnalyzer],
        return_type_analyzers: dict[str, ReturnTypeAnalyzer],
    ):
        super().__init__()
        self.path = path
        self.constants = constants
        self.call_argument_analyzers = call_argument_analyzers
        self.return_type_analyzers = return_type_analyzers

        self.functions_by_method = {
            function.rsplit(".", 1)[-1]: function
            for function in (*call_argument_analyzers, *return_type_analyzers)
        }

        self.issues: list[Issue] = []
        self.shapes: list[RowShape] = []
        self.calls_analyzed = 0
        self._scope: list[tuple[str, str]] = []

    def visit_ClassDef(self, node: cst.ClassDef) -> None:
        self._scope.append(("class", node.name.value))

    def leave_ClassDef(self, original_node: cst.ClassDef) -> None:
        self._scope.pop()

    def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
        self._scope.append(("def", node.name.value))

    def leave_FunctionDef(self, original_node: cst.FunctionDef) -> None:
        self._scope.pop()

    def visit_Call(self, node: cst.Call) -> None:
        function = self._registered_function(node)
        if function is None:
            return

        self.calls_analyzed += 1
        args = call_arguments(node)
        resolver = LiteralResolver(self.constants, tuple(self._scope))
        position = self.get_metadata(PositionProvider, node).start

        call_argument_analyzer = self.call_argument_analyzers.get(function)
        if call_argument_analyzer is not None:
            for diagnostic in call_argument_analyzer.analyze(args, resolver):
                self.issues.append(
                    Issue(
                        diagnostic=diagnostic,
                        path=self.path,
                        line=position.line,
                        column=position.column,
                        function=function,
                    ),
                )

        return_type_analyzer = self.return_type_analyzers.get(function)
        if return_type_analyzer is not None:
            self.shapes.append(
                RowShape(
                    function=function,
                    path=self.path,
                    line=position.line,
                    column=position.column,
                    shape=return_type_analyzer.analyze(args, resolver),
                ),
            )

    def _registered_function(self, node: cst.Call) -> str | None:
        if isinstance(node.func, cst.Attribute):
            name = node.func.attr.value
        elif isinstance(node.func, cst.Name):
            name = node.func.value
        else:
            return None
        return self.functions_by_method.get(name)


def positional_args(node: cst.Call) -> list[cst.BaseExpression]:
    """Positional argument expressions, up to the first ``*args``."""
    args = []
    for arg in node.args:
        if arg.star:
            break
        if arg.keyword is None:
            args.append(arg.value)
    return args


def call_arguments(node: cst.Call) -> CallArguments[cst.BaseExpression]:
    """Positional and keyword argument expressions of a call."""
    keywords = {
        arg.keyword.value: arg.value
        for arg in node.args
        if arg.keyword is not None and not arg.star
    }
    return CallArguments(positional=positional_args(node), keywords=keywords)

"""
Static resolution of call arguments.

Resolves the SQL text and the bind variable keys passed to a call without
running any code. Only values that are certain are resolved: string literals
and concatenations of them, dict displays with literal keys, and names bound
exactly once to such a value and never mutated. Everything else is unknown,
and unknown bind variables mean the comparison is skipped.
"""

from typing import Optional

import libcst as cst

# Scope = path of enclosing ("class" | "def", name) pairs; () is the module
Scope = tuple[tuple[str, str], ...]

MUTATING_METHODS = {"update", "setdefault", "pop", "popitem", "clear", "__setitem__"}
MAX_RESOLUTION_DEPTH = 25


class ConstantCollector(cst.CSTVisitor):
    """
    Records every name binding per scope, plus names that get mutated.

    A name bound more than once in a scope, or bound to something other than
    a plain expression (loop targets, parameters, augmented assignment), is
    recorded with a ``None`` value so it never resolves.
    """

    def __init__(self):
        self.assignments: dict[Scope, dict[str, list[Optional[cst.BaseExpression]]]] = {}
        self.mutated_names: set[str] = set()
        # (class name, attribute) pairs assigned outside the class body
        self.mutated_attributes: set[tuple[str, str]] = set()
        self._scope: list[tuple[str, str]] = []

    @property
    def current_scope(self) -> Scope:
        return tuple(self._scope)

    def _bind(self, name: str, value: Optional[cst.BaseExpression]) -> None:
        scope_assignments = self.assignments.setdefault(self.current_scope, {})
        scope_assignments.setdefault(name, []).append(value)

    def _bind_target(self, target: cst.BaseExpression, value) -> None:
        if isinstance(target, cst.Name):
            self._bind(target.value, value)
        elif isinstance(target, (cst.Tuple, cst.List)):
            for element in target.elements:
                self._bind_target(element.value, None)
        elif isinstance(target, cst.StarredElement):
            self._bind_target(target.value, None)
        elif isinstance(target, cst.Subscript):
            self._mark_mutated(target.value)
        elif isinstance(target, cst.Attribute):
            self._mark_attribute_mutated(target)

    def _mark_mutated(self, node: cst.BaseExpression) -> None:
        if isinstance(node, cst.Name):
            self.mutated_names.add(node.value)

    def _mark_attribute_mutated(self, target: cst.Attribute) -> None:
        if not isinstance(target.value, cst.Name):
            return
        owner = target.value.value
        if owner in ("self", "cls"):
            owner = enclosing_class(self.current_scope)
            if owner is None:
                return
        self.mutated_attributes.add((owner, target.attr.value))

    def visit_ClassDef(self, node: cst.ClassDef) -> None:
        self._bind(node.name.value, None)
        self._scope.append(("class", node.name.value))

    def leave_ClassDef(self, original_node: cst.ClassDef) -> None:
        self._scope.pop()

    def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
        self._bind(node.name.value, None)
        self._scope.append(("def", node.name.value))

    def leave_FunctionDef(self, original_node: cst.FunctionDef) -> None:
        self._scope.pop()

    def visit_Param(self, node: cst.Param) -> None:
        self._bind(node.name.value, None)

    def visit_Assign(self, node: cst.Assign) -> None:
        for target in node.targets:
            self._bind_target(target.target, node.value)

    def visit_AnnAssign(self, node: cst.AnnAssign) -> None:
        self._bind_target(node.target, node.value)

    def visit_AugAssign(self, node: cst.AugAssign) -> None:
        self._bind_target(node.target, None)

    def visit_For(self, node: cst.For) -> None:
        self._bind_target(node.target, None)

    def visit_WithItem(self, node: cst.WithItem) -> None:
        if node.asname is not None:
            self._bind_target(node.asname.name, None)

    def visit_Del(self, node: cst.Del) -> None:
        self._bind_target(node.target, None)

    def visit_Call(self, node: cst.Call) -> None:
        # params.update(...), params.pop(...) and friends
        if isinstance(node.func, cst.Attribute) and node.func.attr.value in MUTATING_METHODS:
            self._mark_mutated(node.func.value)

    def lookup(
        self,
        name: str,
        scope: Scope,
    ) -> Optional[tuple[cst.BaseExpression, Scope]]:
        """Find the single expression ``name`` is bound to, seen from ``scope``."""
        if name in self.mutated_names:
            return None

        for candidate in enclosing_scopes(scope):
            values = self.assignments.get(candidate, {}).get(name)
            if values is None:
                continue
            if len(values) != 1 or values[0] is None:
                return None
            return values[0], candidate
        return None

    def lookup_class_attribute(
        self,
        class_name: str,
        attribute: str,
    ) -> Optional[tuple[cst.BaseExpression, Scope]]:
        """Find ``ClassName.ATTRIBUTE`` when exactly one class body defines it."""
        if (class_name, attribute) in self.mutated_attributes:
            return None

        found = []
        for scope, scope_assignments in self.assignments.items():
            if scope and scope[-1] == ("class", class_name) and attribute in scope_assignments:
                found.append((scope, scope_assignments[attribute]))

        if len(found) != 1:
            return None
        scope, values = found[0]
        if len(values) != 1 or values[0] is None:
            return None
        return values[0], scope


def enclosing_scopes(scope: Scope):
    """Scopes searched for a name, innermost first; class bodies are skipped."""
    yield scope
    for depth in range(len(scope) - 1, -1, -1):
        candidate = scope[:depth]
        if candidate and candidate[-1][0] == "class":
            continue
        yield candidate


def enclosing_class(scope: Scope) -> Optional[str]:
    for kind, name in reversed(scope):
        if kind == "class":
            return name
    return None


class LiteralResolver:
    """
    Resolves argument expressions seen from one scope.

    Implements the host side of
    :class:`~sql_callsite_analyzer.registry.ArgumentResolver`.
    """

    def __init__(self, constants: ConstantCollector, scope: Scope = ()):
        self.constants = constants
        self.scope = scope

    def resolve_string(self, node: cst.BaseExpression) -> Optional[str]:
        """Statically known string value of ``node``, or None."""
        return self._resolve_string(node, self.scope, 0)

    def resolve_keys(self, node: cst.BaseExpression) -> Optional[list[str]]:
        """Keys of a dict whose keys are all statically known, or None."""
        return self._resolve_keys(node, self.scope, 0)

    def _resolve_string(self, node, scope: Scope, depth: int) -> Optional[str]:
        if depth > MAX_RESOLUTION_DEPTH:
            return None

        if isinstance(node, (cst.SimpleString, cst.ConcatenatedString)):
            value = node.evaluated_value
            return value if isinstance(value, str) else None

        if isinstance(node, cst.BinaryOperation) and isinstance(node.operator, cst.Add):
            left = self._resolve_string(node.left, scope, depth + 1)
            if left is None:
                return None
            right = self._resolve_string(node.right, scope, depth + 1)
            if right is None:
                return None
            return left + right

        binding = self._lookup_binding(node, scope)
        if binding is not None:
            value, value_scope = binding
            return self._resolve_string(value, value_scope, depth + 1)
        return None

    def _resolve_keys(self, node, scope: Scope, depth: int) -> Optional[list[str]]:
        if depth > MAX_RESOLUTION_DEPTH:
            return None

        if isinstance(node, cst.Dict):
            keys = []
            for element in node.elements:
                # **spread makes the key set unknowable
                if not isinstance(element, cst.DictElement):
                    return None
                key = self._resolve_string(element.key, scope, depth + 1)
                if key is None:
                    return None
                keys.append(key)
            return keys

        if (
            isinstance(node, cst.Call)
            and isinstance(node.func, cst.Name)
            and node.func.value == "dict"
        ):
            keys = []
            for arg in node.args:
                if arg.keyword is None or arg.star:
                    return None
                keys.append(arg.keyword.value)
            return keys

        binding = self._lookup_binding(node, scope)
        if binding is not None:
            value, value_scope = binding
            return self._resolve_keys(value, value_scope, depth + 1)
        return None

    def _lookup_binding(self, node, scope: Scope):
        if isinstance(node, cst.Name):
            return self.constants.lookup(node.value, scope)

        if isinstance(node, cst.Attribute) and isinstance(node.value, cst.Name):
            owner = node.value.value
            if owner in ("self", "cls"):
                owner = enclosing_class(scope)
                if owner is None:
                    return None
            return self.constants.lookup_class_attribute(owner, node.attr.value)

        return None

"""
Bind variable extraction and comparison.

Bind variables are compared case-insensitively: ``:Uid`` and ``:uid`` name
the same variable. A :class:`BindVarSet` keeps the spelling last seen for each
name so diagnostics can show what the code actually wrote.
"""

from typing import Iterable, Iterator, NamedTuple

from .normalizer import BIND_VAR_PATTERN, DEFAULT_PLACEHOLDER_PATTERN, normalize_sql


def canonical_bind_var_name(name: str) -> str:
    """Prefix a bind variable name with ``:`` unless it already has one."""
    if name.startswith(":"):
        return name
    return f":{name}"


class BindVarSet:
    """Immutable, case-insensitive set of bind variable names."""

    __slots__ = ("_by_key",)

    def __init__(self, names: Iterable[str] = ()):
        by_key: dict[str, str] = {}
        for name in names:
            name = canonical_bind_var_name(name)
            key = name.lower()
            # Latest spelling wins, position of the first one is kept
            by_key[key] = name
        self._by_key = by_key

    def by_key(self) -> dict[str, str]:
        """Lowercase name -> displayed spelling."""
        return dict(self._by_key)

    def names(self) -> list[str]:
        return list(self._by_key.values())

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return canonical_bind_var_name(name).lower() in self._by_key

    def __eq__(self, other):
        if not isinstance(other, BindVarSet):
            return NotImplemented
        return self._by_key.keys() == other._by_key.keys()

    def __hash__(self):
        return hash(frozenset(self._by_key))

    def __repr__(self):
        return f"BindVarSet({self.names()!r})"


class BindVarDiff(NamedTuple):
    """Result of comparing expected bind variables against supplied ones."""

    missing: BindVarSet
    unexpected: BindVarSet

    @property
    def is_empty(self) -> bool:
        return not self.missing and not self.unexpected


def extract_referenced_bind_vars(
    sql: str,
    placeholder_pattern: str = DEFAULT_PLACEHOLDER_PATTERN,
) -> BindVarSet:
    """
    Find the bind variables a SQL statement references.

    String literal contents are blanked first so that format strings like
    ``'DD-MON-YYYY HH24:MI:SS'`` are not mistaken for bind variables.

    Args:
        sql: Raw SQL text
        placeholder_pattern: Regex matching runtime template tokens

    Returns:
        BindVarSet of the distinct ``:name`` tokens, in first-seen order
    """
    scanned = normalize_sql(sql, placeholder_pattern=placeholder_pattern)
    distinct = dict.fromkeys(BIND_VAR_PATTERN.findall(scanned))
    return BindVarSet(distinct)


def compare_bind_vars(expected: BindVarSet, actual: BindVarSet) -> BindVarDiff:
    """
    Diff the bind variables a statement references against those supplied.

    Args:
        expected: Bind variables referenced by the SQL text
        actual: Bind variables supplied at the call site

    Returns:
        BindVarDiff with the missing and unexpected names
    """
    expected_by_key = expected.by_key()
    actual_by_key = actual.by_key()

    missing = [name for key, name in expected_by_key.items() if key not in actual_by_key]
    unexpected = [
        name for key, name in actual_by_key.items() if key not in expected_by_key
    ]
    return BindVarDiff(missing=BindVarSet(missing), unexpected=BindVarSet(unexpected))

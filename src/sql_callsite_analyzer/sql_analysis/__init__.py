"""
SQL bind variable and result shape analysis.

Works on SQL text alone: the caller supplies the SQL and, when known, the bind
variable names passed with it. The parser-backed parts (``syntax_validator``,
``shape_inference`` and the ``analyzer`` facade) require sqlglot and are
imported from their modules; everything exported here does not.
"""

from .bind_vars import (
    BindVarDiff,
    BindVarSet,
    canonical_bind_var_name,
    compare_bind_vars,
    extract_referenced_bind_vars,
)
from .normalizer import normalize_sql, restore_bind_vars, rewrite_bind_vars
from .results import (
    MIXED_TYPE,
    ParseErrorKind,
    ParseOutcome,
    ParseStatus,
    ShapeInference,
)

__all__ = [
    # Normalization
    "normalize_sql",
    "rewrite_bind_vars",
    "restore_bind_vars",
    # Bind variables
    "BindVarSet",
    "BindVarDiff",
    "canonical_bind_var_name",
    "extract_referenced_bind_vars",
    "compare_bind_vars",
    # Results
    "MIXED_TYPE",
    "ParseStatus",
    "ParseErrorKind",
    "ParseOutcome",
    "ShapeInference",
]

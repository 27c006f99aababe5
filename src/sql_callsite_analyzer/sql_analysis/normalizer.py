"""
SQL text normalization.

Raw SQL found at call sites carries things the grammar should never see:
runtime table/key templates, string literal contents that happen to look like
bind variables (``'HH24:MI:SS'``), and the ``:name`` bind variable syntax
itself. The helpers here strip or rewrite those before scanning or parsing.
"""

import re

from ..config import DEFAULT_PLACEHOLDER_PATTERN

BIND_VAR_PATTERN = re.compile(r":[a-zA-Z_0-9]+")
BIND_VAR_REWRITE_PREFIX = "bind__"

# '' inside a literal is an escaped quote
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^']|'')*'")
_REWRITTEN_BIND_VAR_PATTERN = re.compile(
    rf"\b{BIND_VAR_REWRITE_PREFIX}([a-zA-Z_0-9]+)",
    re.IGNORECASE,
)


def strip_placeholders(
    sql: str,
    placeholder_pattern: str = DEFAULT_PLACEHOLDER_PATTERN,
) -> str:
    """Remove ``{{pkey}}``/``{{tkey}}`` style templates resolved at runtime."""
    return re.sub(placeholder_pattern, "", sql, flags=re.IGNORECASE)


def blank_string_literals(sql: str) -> str:
    """Replace the contents of every single-quoted literal with ``''``."""
    return _STRING_LITERAL_PATTERN.sub("''", sql)


def rewrite_bind_vars(sql: str) -> str:
    """Turn ``:uid`` into the plain identifier ``bind__uid``."""
    return BIND_VAR_PATTERN.sub(
        lambda match: BIND_VAR_REWRITE_PREFIX + match.group(0)[1:],
        sql,
    )


def restore_bind_vars(text: str) -> str:
    """Inverse of :func:`rewrite_bind_vars`, used for display only."""
    return _REWRITTEN_BIND_VAR_PATTERN.sub(lambda match: ":" + match.group(1), text)


def normalize_sql(
    sql: str,
    rewrite_binds: bool = False,
    placeholder_pattern: str = DEFAULT_PLACEHOLDER_PATTERN,
) -> str:
    """
    Normalize SQL text for scanning or parsing.

    Args:
        sql: Raw SQL as written at the call site
        rewrite_binds: Also rewrite bind variables into identifiers. Needed
            before parsing, must be off before extracting bind variables.
        placeholder_pattern: Regex matching runtime template tokens

    Returns:
        The normalized SQL text
    """
    sql = strip_placeholders(sql, placeholder_pattern)
    sql = blank_string_literals(sql)
    if rewrite_binds:
        sql = rewrite_bind_vars(sql)
    return sql

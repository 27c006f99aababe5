"""
Analyzer configuration.

Every list that decides what counts as a false positive lives here as data:
the lists are known to be incomplete and differ between SQL dialects, so they
are meant to be tuned per project through a YAML file rather than edited in
code.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_PLACEHOLDER_PATTERN = r"\{\{[pt]key\}\}"


class ConfigError(ValueError):
    """Raised when a configuration file cannot be loaded or is invalid."""


class CallSite(BaseModel):
    """Where the SQL text and the bind variables sit in a registered call."""

    model_config = ConfigDict(frozen=True)

    function: str = Field(description="Fully qualified name, e.g. Ora.execSql")
    sql_arg_index: int = Field(default=0, ge=0)
    sql_keyword: Optional[str] = "sql"
    bind_vars_arg_index: Optional[int] = Field(default=1, ge=0)
    # Parameter name, for calls that pass the bind variables by keyword
    bind_vars_keyword: Optional[str] = "bind_vars"

    @property
    def method_name(self) -> str:
        """Last segment of the qualified name; what call sites are matched on."""
        return self.function.rsplit(".", 1)[-1]


DEFAULT_CALL_SITES = (
    CallSite(function="Ora.execSql", sql_arg_index=0, bind_vars_arg_index=1),
    CallSite(function="Ora.execLimitSql", sql_arg_index=0, bind_vars_arg_index=3),
    CallSite(function="Ora.getSelectRows", sql_arg_index=0, bind_vars_arg_index=1),
)


class SyntaxCheckConfig(BaseModel):
    """Settings for the syntax validator."""

    model_config = ConfigDict(frozen=True)

    dialect: str = "oracle"
    # Checked against the raw SQL before parsing; a match skips the statement
    give_up_patterns: tuple[str, ...] = (
        r"^\s*(BEGIN|DECLARE)\b",
        r"\bRETURNING\b",
        r"\bOVER\s*\(\s*\)",
    )
    # Offending tokens that are valid in the target dialect but not in the grammar.
    # Matched against the single token the parser stopped at.
    suppressed_tokens: tuple[str, ...] = (
        "MERGE",
        "RETURNING",
        "FETCH",
        "START",
        "WITH",
        "KEY",
        "UNION",
        "CONNECT",
        "PRIOR",
        "KEEP",
        "NOCYCLE",
    )

    @field_validator("suppressed_tokens")
    @classmethod
    def uppercase_tokens(cls, v):
        for token in v:
            if not token.strip() or len(token.split()) != 1:
                raise ValueError(f"Suppressed tokens must be single words, got {token!r}")
        return tuple(token.strip().upper() for token in v)


class ShapeInferenceConfig(BaseModel):
    """Settings for result shape inference."""

    model_config = ConfigDict(frozen=True)

    # Aliases that only show up when the grammar mis-tokenizes syntax as a column
    misparsed_aliases: tuple[str, ...] = (
        "over",
        "keep",
        "within",
        "partition",
        "trunc",
        "dense_rank",
    )

    @field_validator("misparsed_aliases")
    @classmethod
    def lowercase_aliases(cls, v):
        return tuple(alias.lower() for alias in v)


class AnalyzerConfig(BaseModel):
    """Top-level configuration for the SQL call-site analyzer."""

    model_config = ConfigDict(frozen=True)

    placeholder_pattern: str = DEFAULT_PLACEHOLDER_PATTERN
    syntax: SyntaxCheckConfig = SyntaxCheckConfig()
    shapes: ShapeInferenceConfig = ShapeInferenceConfig()
    call_sites: tuple[CallSite, ...] = DEFAULT_CALL_SITES


DEFAULT_CONFIG = AnalyzerConfig()


def load_config(path: Optional[str | Path] = None) -> AnalyzerConfig:
    """
    Load analyzer configuration from a YAML file.

    Args:
        path: YAML file to read. ``None`` returns the defaults.

    Returns:
        AnalyzerConfig with file values layered over the defaults

    Raises:
        ConfigError: If the file is missing, not valid YAML, or has invalid values
    """
    if path is None:
        return DEFAULT_CONFIG

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {config_path}")

    try:
        return AnalyzerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

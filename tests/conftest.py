"""Pytest configuration and shared fixtures for the SQL call-site analyzer."""

from pathlib import Path

import pytest
from loguru import logger

from sql_callsite_analyzer.config import AnalyzerConfig
from sql_callsite_analyzer.registry import sql_parser_available
from sql_callsite_analyzer.sql_analysis.analyzer import SqlAnalyzer
from sql_callsite_analyzer.static_analysis import SqlCallSiteAnalyzer

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def config():
    """Default analyzer configuration."""
    return AnalyzerConfig()


@pytest.fixture(scope="session")
def sql_analyzer(config):
    """
    Provides the SQL analyzer facade.

    The analyzer is stateless, so one instance is shared by the whole session.
    """
    return SqlAnalyzer(config)


@pytest.fixture(scope="function")
def host(config):
    """LibCST host wired to the default registration table."""
    return SqlCallSiteAnalyzer(config)


@pytest.fixture(scope="session")
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture(scope="function")
def log_messages():
    """Collects loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level}: {message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture(scope="function")
def reset_parser_check():
    """Clears the cached sqlglot availability check before and after a test."""
    sql_parser_available.cache_clear()
    yield
    sql_parser_available.cache_clear()

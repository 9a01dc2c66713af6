"""
Shared pytest fixtures for the EDGAR NC parser test suite.

This module provides common fixtures used across test modules:
- Project paths
- Parser configuration with explicit (environment-independent) values
- Parser instances

Usage:
    Fixtures are automatically discovered by pytest.
    Import them directly in test files - no explicit import needed.
"""

import sys
from pathlib import Path

import pytest

# Ensure edgar_nc is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent))

from edgar_nc.config import ParserConfig, clear_config_cache
from edgar_nc.parsing import GrammarTable, NcFilingParser


# ===========================
# Path Fixtures
# ===========================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def configs_dir(project_root: Path) -> Path:
    """Return the YAML configs directory."""
    return project_root / "configs"


# ===========================
# Configuration Fixtures
# ===========================

@pytest.fixture
def parser_config() -> ParserConfig:
    """Default parser settings, pinned so NC_PARSER_* env vars cannot leak in."""
    return ParserConfig(
        text_encoding="utf-8",
        fallback_encodings=["cp1252"],
        header_encoding="latin-1",
        strict_dates=True,
        close_reopened_blocks=True,
        decode_binary=True,
    )


@pytest.fixture
def lenient_config(parser_config: ParserConfig) -> ParserConfig:
    """Parser settings with strict_dates off."""
    return parser_config.model_copy(update={"strict_dates": False})


@pytest.fixture
def grammar() -> GrammarTable:
    """Built-in grammar without configured extensions."""
    return GrammarTable()


@pytest.fixture
def nc_parser(parser_config: ParserConfig, grammar: GrammarTable) -> NcFilingParser:
    """Parser with pinned settings."""
    return NcFilingParser(parser_config, grammar)


@pytest.fixture
def fresh_config_cache():
    """Clear the YAML cache before and after a test that reloads configuration."""
    clear_config_cache()
    yield
    clear_config_cache()

"""
EDGAR NC Parser Configuration Package.

This module uses Pydantic Settings to:
1. Define the schema for all configuration
2. Load defaults from configs/config.yaml and configs/grammar.yaml
3. Automatically override with environment variables from .env or CI/CD secrets

Usage:
    from edgar_nc.config import settings

    # Access parser settings
    encoding = settings.parser.text_encoding

    # Access grammar extensions
    extra_blocks = settings.grammar.block_tags
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from edgar_nc.config.parser import ParserConfig
from edgar_nc.config.grammar import GrammarConfig
from edgar_nc.config._loader import clear_config_cache


class Settings(BaseSettings):
    """
    Main settings class that combines all configuration sections.

    Usage:
        from edgar_nc.config import settings

        settings.parser.strict_dates
        settings.grammar.opaque_markup_tags
    """
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    parser: ParserConfig = Field(default_factory=ParserConfig)
    grammar: GrammarConfig = Field(default_factory=GrammarConfig)


# ===========================
# Global Settings Instance
# ===========================

settings = Settings()


__all__ = [
    "settings",
    "Settings",
    "ParserConfig",
    "GrammarConfig",
    "clear_config_cache",
]

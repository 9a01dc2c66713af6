"""Tag grammar extension configuration."""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from edgar_nc.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("grammar.yaml", "grammar")


class GrammarConfig(BaseSettings):
    """
    Extra tag classifications merged over the built-in grammar table.

    Loads from configs/grammar.yaml with environment variable overrides
    (JSON lists, e.g. NC_GRAMMAR_BLOCK_TAGS='["NEW-BLOCK"]').
    """
    model_config = SettingsConfigDict(
        env_prefix='NC_GRAMMAR_',
        case_sensitive=False
    )

    block_tags: List[str] = Field(
        default_factory=lambda: _get_config().get('block_tags') or []
    )
    value_tags: List[str] = Field(
        default_factory=lambda: _get_config().get('value_tags') or []
    )
    opaque_text_tags: List[str] = Field(
        default_factory=lambda: _get_config().get('opaque_text_tags') or []
    )
    opaque_markup_tags: List[str] = Field(
        default_factory=lambda: _get_config().get('opaque_markup_tags') or []
    )
    opaque_binary_tags: List[str] = Field(
        default_factory=lambda: _get_config().get('opaque_binary_tags') or []
    )

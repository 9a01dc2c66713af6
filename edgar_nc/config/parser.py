"""NC filing parser configuration."""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from edgar_nc.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("config.yaml").get("parser", {})


class ParserConfig(BaseSettings):
    """
    Parser behaviour settings.

    Attributes:
        text_encoding: Encoding tried first for text and markup payloads
        fallback_encodings: Encodings tried, in order, when text_encoding fails
        header_encoding: Encoding for tag names and header values (never fails
            for latin-1, which is the EDGAR default for pre-2000 filings)
        strict_dates: Treat any unparseable header date as fatal
        close_reopened_blocks: Opening a non-nesting block that is already open
            closes the open one first (repairs a missing </DOCUMENT>)
        decode_binary: Decode uuencoded payloads to raw bytes
    """
    model_config = SettingsConfigDict(
        env_prefix='NC_PARSER_',
        case_sensitive=False
    )

    text_encoding: str = Field(
        default_factory=lambda: _get_config().get('text_encoding', "utf-8")
    )
    fallback_encodings: List[str] = Field(
        default_factory=lambda: _get_config().get('fallback_encodings', ["cp1252"])
    )
    header_encoding: str = Field(
        default_factory=lambda: _get_config().get('header_encoding', "latin-1")
    )
    strict_dates: bool = Field(
        default_factory=lambda: _get_config().get('strict_dates', True)
    )
    close_reopened_blocks: bool = Field(
        default_factory=lambda: _get_config().get('close_reopened_blocks', True)
    )
    decode_binary: bool = Field(
        default_factory=lambda: _get_config().get('decode_binary', True)
    )

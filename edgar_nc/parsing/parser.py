"""
EDGAR NC submission parser.

Runs the full pipeline on the bytes of one ``.nc`` file:

    bytes → LineTokenizer → TreeBuilder → GenericNode tree → FilingMapper → Filing

The parser never reads files or the network; callers hand it bytes. It holds
only configuration, so one instance can parse any number of files, from any
number of threads.
"""

import logging
from typing import Optional, Union

from edgar_nc.config import ParserConfig

from .content import ContentClassifier
from .grammar import GrammarTable
from .mapper import FilingMapper
from .models.filing import Filing
from .tree_builder import TreeBuilder

logger = logging.getLogger(__name__)

RawInput = Union[bytes, bytearray, memoryview]


class NcFilingParser:
    """
    Parser for EDGAR NC submission archives.

    Features:
    - Tag nesting recovered despite optional close tags
    - Typed header (companies, series, dates) with lossless overflow
    - Documents classified as text, uuencoded binary, or embedded XBRL/XML
    - Recoverable irregularities reported as anomalies, not errors

    Example:
        >>> parser = NcFilingParser()
        >>> filing = parser.parse(Path("0000320193-21-000105.nc").read_bytes())
        >>> filing.header.accession_number
        '0000320193-21-000105'
        >>> print(f"Parsed {len(filing)} documents")
    """

    def __init__(self, config: Optional[ParserConfig] = None, grammar: Optional[GrammarTable] = None):
        """
        Args:
            config: Parser settings (default: ``settings.parser``)
            grammar: Tag grammar (default: built-in table plus configured extensions)
        """
        if config is None:
            from edgar_nc.config import settings  # pylint: disable=import-outside-toplevel
            config = settings.parser

        self.config = config
        self.grammar = grammar or GrammarTable.from_settings()
        self.builder = TreeBuilder(
            self.grammar,
            close_reopened_blocks=config.close_reopened_blocks,
            value_encoding=config.header_encoding,
        )
        self.mapper = FilingMapper(config, ContentClassifier(config))

    def parse(self, raw: RawInput) -> Filing:
        """
        Parse one submission.

        Args:
            raw: Complete file contents

        Returns:
            Filing with header, documents in source order, and anomalies

        Raises:
            TypeError: If raw is a str (decode nothing; pass the bytes)
            TokenizeError: Malformed tag syntax
            MappingError: No recoverable document structure
            DateParseError: Unparseable filing date (or any header date with
                strict_dates on)
        """
        if isinstance(raw, str):
            raise TypeError("parse() needs the raw bytes of the file, not str")
        data = bytes(raw)

        result = self.builder.build(data)
        filing = self.mapper.map(result.root, result.anomalies)

        logger.debug(
            "Parsed %s: %d documents, %d anomalies",
            filing.header.accession_number or "<no accession number>",
            len(filing.documents),
            len(filing.anomalies),
        )
        return filing

    def get_parser_info(self) -> dict:
        """Settings this parser runs with."""
        return {
            'text_encoding': self.config.text_encoding,
            'fallback_encodings': list(self.config.fallback_encodings),
            'strict_dates': self.config.strict_dates,
            'opaque_tags': sorted(self.grammar.opaque_tags()),
        }


def parse(raw_bytes: RawInput, config: Optional[ParserConfig] = None) -> Filing:
    """
    Convenience function to parse one NC submission

    Args:
        raw_bytes: Complete file contents
        config: Optional parser settings

    Returns:
        Filing object

    Example:
        >>> filing = parse(Path("submission.nc").read_bytes())
        >>> primary = filing.primary_document()
    """
    return NcFilingParser(config).parse(raw_bytes)

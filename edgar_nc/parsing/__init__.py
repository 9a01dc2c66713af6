"""Parsing modules for EDGAR NC submission archives

Pipeline Flow:
    1. Tokenize → LineTokenizer → TagOpen / TagClose / TagValue / RawLine
    2. Build    → TreeBuilder → GenericNode tree (+ anomalies)
    3. Map      → FilingMapper → Filing (header, documents)
    4. Classify → ContentClassifier → Text / Binary / Markup / Unclassified payload

Dates in the header go through the date normalizer (dates.py); uuencoded
attachments through the codec in uucodec.py.

Quick Start:
    >>> from edgar_nc.parsing import parse
    >>> filing = parse(Path("0000320193-21-000105.nc").read_bytes())
    >>> print(f"Type: {filing.header.filing_type}, CIK: {filing.header.cik}")
    >>> print(f"Documents: {len(filing)}")
"""

from .parser import NcFilingParser, parse
from .tokenizer import LineTokenizer, TagOpen, TagClose, TagValue, RawLine, OpaqueSpan
from .grammar import GrammarTable
from .tree_builder import TreeBuilder, GenericNode, BuildResult
from .mapper import FilingMapper
from .content import ContentClassifier
from .dates import Granularity, normalize, parse_date, parse_datetime, parse_month_day
from .errors import NcParseError, TokenizeError, MappingError, DateParseError
from .constants import TagKind
from .models import (
    Filing,
    Document,
    SubmissionHeader,
    Anomaly,
    AnomalyKind,
    TextPayload,
    BinaryPayload,
    MarkupPayload,
    UnclassifiedPayload,
)

__all__ = [
    # Entry point
    'NcFilingParser',
    'parse',
    # Tokenizer
    'LineTokenizer',
    'TagOpen',
    'TagClose',
    'TagValue',
    'RawLine',
    'OpaqueSpan',
    # Grammar / tree
    'GrammarTable',
    'TagKind',
    'TreeBuilder',
    'GenericNode',
    'BuildResult',
    # Mapping / content
    'FilingMapper',
    'ContentClassifier',
    # Dates
    'Granularity',
    'normalize',
    'parse_date',
    'parse_datetime',
    'parse_month_day',
    # Errors
    'NcParseError',
    'TokenizeError',
    'MappingError',
    'DateParseError',
    # Models
    'Filing',
    'Document',
    'SubmissionHeader',
    'Anomaly',
    'AnomalyKind',
    'TextPayload',
    'BinaryPayload',
    'MarkupPayload',
    'UnclassifiedPayload',
]

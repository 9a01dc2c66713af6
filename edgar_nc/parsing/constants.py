"""
Constants for EDGAR NC filing parsing

This module holds the empirically reconstructed tag grammar: which tags open
nested structure, which carry a single-line value, and which wrap opaque
content that must not be tag-parsed. It also names the structural tags the
mapper looks for.
"""

from enum import Enum
from typing import Dict, FrozenSet


# ===========================
# Tag Kinds
# ===========================

class TagKind(Enum):
    """
    Closure behaviour of a tag.

    Usage:
        >>> from edgar_nc.parsing.constants import TagKind
        >>> TagKind.BLOCK.is_opaque
        False
    """

    BLOCK = "block"                  # expects a matching close (or implicit close)
    VALUE = "value"                  # self-closing, value is the rest of the line
    OPAQUE_TEXT = "opaque_text"      # plain-text body, not tag-parsed
    OPAQUE_MARKUP = "opaque_markup"  # embedded XBRL/XML, kept verbatim
    OPAQUE_BINARY = "opaque_binary"  # encoded binary attachment

    @property
    def is_opaque(self) -> bool:
        return self in (TagKind.OPAQUE_TEXT, TagKind.OPAQUE_MARKUP, TagKind.OPAQUE_BINARY)


# ===========================
# Envelope / Structural Tags
# ===========================

SUBMISSION_TAG = "SUBMISSION"
SEC_DOCUMENT_TAG = "SEC-DOCUMENT"      # dissemination .txt variant of the envelope
DOCUMENT_TAG = "DOCUMENT"
TEXT_TAG = "TEXT"

ENVELOPE_TAGS: FrozenSet[str] = frozenset({SUBMISSION_TAG, SEC_DOCUMENT_TAG})

# Free-text "KEY: value" header blocks used by the .txt dissemination format
HEADER_TEXT_TAGS: FrozenSet[str] = frozenset({"SEC-HEADER", "IMS-HEADER"})


# ===========================
# Block Tags
# ===========================

BLOCK_TAGS: FrozenSet[str] = frozenset({
    # Envelope
    SUBMISSION_TAG,
    SEC_DOCUMENT_TAG,
    DOCUMENT_TAG,
    # Company roles
    "FILER",
    "SUBJECT-COMPANY",
    "REPORTING-OWNER",
    "ISSUER",
    "FILED-BY",
    "FILED-FOR",
    "DEPOSITOR",
    "SECURITIZER",
    # Company parts
    "COMPANY-DATA",
    "OWNER-DATA",
    "FILING-VALUES",
    "BUSINESS-ADDRESS",
    "MAIL-ADDRESS",
    "FORMER-COMPANY",
    "FORMER-NAME",
    # Investment company series / classes
    "SERIES-AND-CLASSES-CONTRACTS-DATA",
    "EXISTING-SERIES-AND-CLASSES-CONTRACTS",
    "MERGER-SERIES-AND-CLASSES-CONTRACTS",
    "NEW-SERIES-AND-CLASSES-CONTRACTS",
    "MERGER",
    "ACQUIRING-DATA",
    "TARGET-DATA",
    "SERIES",
    "NEW-SERIES",
    "NEW-CLASSES-CONTRACTS",
    "CLASS-CONTRACT",
})

# Block tags observed to contain themselves. None of the EDGAR structures do;
# the set exists so a grammar extension can declare one.
SELF_NESTING_TAGS: FrozenSet[str] = frozenset()


# ===========================
# Opaque Container Tags
# ===========================

OPAQUE_TEXT_TAGS: FrozenSet[str] = frozenset({TEXT_TAG}) | HEADER_TEXT_TAGS

# XBRL: financial-reporting payload; XML: structured form data (e.g. Form D, 13F)
OPAQUE_MARKUP_TAGS: FrozenSet[str] = frozenset({"XBRL", "XML"})

# Binary wrappers; contents are uuencoded by the filer agent
OPAQUE_BINARY_TAGS: FrozenSet[str] = frozenset({"PDF"})


# ===========================
# Value Tags
# ===========================

# Known value tags. Listing them is informational: unknown tags are VALUE
# tags anyway, but an explicit entry keeps a grammar extension from
# reclassifying them by accident.
VALUE_TAGS: FrozenSet[str] = frozenset({
    "ACCESSION-NUMBER", "TYPE", "PUBLIC-DOCUMENT-COUNT", "ITEMS", "PERIOD",
    "FILING-DATE", "DATE-OF-FILING-DATE-CHANGE", "EFFECTIVENESS-DATE",
    "GROUP-MEMBERS", "TIMESTAMP", "ACCEPTANCE-DATETIME",
    "SEQUENCE", "FILENAME", "DESCRIPTION", "FLAWED",
    "CONFORMED-NAME", "CIK", "ASSIGNED-SIC", "IRS-NUMBER",
    "STATE-OF-INCORPORATION", "FISCAL-YEAR-END", "RELATIONSHIP",
    "FORM-TYPE", "ACT", "FILE-NUMBER", "FILM-NUMBER",
    "STREET1", "STREET2", "CITY", "STATE", "ZIP", "PHONE",
    "FORMER-CONFORMED-NAME", "DATE-CHANGED",
    "OWNER-CIK", "SERIES-ID", "SERIES-NAME",
    "CLASS-CONTRACT-ID", "CLASS-CONTRACT-NAME", "CLASS-CONTRACT-TICKER-SYMBOL",
    "PAPER", "CONFIRMING-COPY", "PRIVATE-TO-PUBLIC", "DELETION", "CORRECTION",
})


def build_default_table() -> Dict[str, TagKind]:
    """Return a fresh tag → kind mapping for the built-in grammar."""
    table: Dict[str, TagKind] = {}
    for tag in VALUE_TAGS:
        table[tag] = TagKind.VALUE
    for tag in BLOCK_TAGS:
        table[tag] = TagKind.BLOCK
    for tag in OPAQUE_TEXT_TAGS:
        table[tag] = TagKind.OPAQUE_TEXT
    for tag in OPAQUE_MARKUP_TAGS:
        table[tag] = TagKind.OPAQUE_MARKUP
    for tag in OPAQUE_BINARY_TAGS:
        table[tag] = TagKind.OPAQUE_BINARY
    return table

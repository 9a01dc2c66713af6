"""
Reader for the free-text ``<SEC-HEADER>`` block of dissemination files.

The dissemination ``.txt`` variant repeats the submission header as indented
``KEY: value`` lines instead of SGML tags::

    ACCESSION NUMBER:		0000320193-21-000105
    CONFORMED SUBMISSION TYPE:	10-K
    FILER:
    	COMPANY DATA:
    		COMPANY CONFORMED NAME:	Apple Inc.
    		CENTRAL INDEX KEY:	0000320193

The block is translated into a GenericNode tree with the SGML tag names
(``COMPANY CONFORMED NAME`` → ``CONFORMED-NAME``), so the mapper reads it with
the same field tables as the tagged header. Indentation scopes the sections.
"""

import logging
import re
from typing import Dict, List, Tuple

from .constants import TagKind
from .tree_builder import GenericNode

logger = logging.getLogger(__name__)

# Section headings ("FILER:" with no value) → block tag
_SECTION_TAGS: Dict[str, str] = {
    'FILER':            'FILER',
    'SUBJECT COMPANY':  'SUBJECT-COMPANY',
    'REPORTING-OWNER':  'REPORTING-OWNER',
    'REPORTING OWNER':  'REPORTING-OWNER',
    'ISSUER':           'ISSUER',
    'FILED BY':         'FILED-BY',
    'FILED FOR':        'FILED-FOR',
    'DEPOSITOR':        'DEPOSITOR',
    'SECURITIZER':      'SECURITIZER',
    'COMPANY DATA':     'COMPANY-DATA',
    'OWNER DATA':       'OWNER-DATA',
    'FILING VALUES':    'FILING-VALUES',
    'BUSINESS ADDRESS': 'BUSINESS-ADDRESS',
    'MAIL ADDRESS':     'MAIL-ADDRESS',
    'FORMER COMPANY':   'FORMER-COMPANY',
    'FORMER NAME':      'FORMER-NAME',
}

# "KEY: value" lines → value tag
_VALUE_TAGS: Dict[str, str] = {
    'ACCESSION NUMBER':                   'ACCESSION-NUMBER',
    'CONFORMED SUBMISSION TYPE':          'TYPE',
    'PUBLIC DOCUMENT COUNT':              'PUBLIC-DOCUMENT-COUNT',
    'CONFORMED PERIOD OF REPORT':         'PERIOD',
    'FILED AS OF DATE':                   'FILING-DATE',
    'DATE AS OF CHANGE':                  'DATE-OF-FILING-DATE-CHANGE',
    'EFFECTIVENESS DATE':                 'EFFECTIVENESS-DATE',
    'ITEM INFORMATION':                   'ITEMS',
    'GROUP MEMBERS':                      'GROUP-MEMBERS',
    'COMPANY CONFORMED NAME':             'CONFORMED-NAME',
    'CENTRAL INDEX KEY':                  'CIK',
    'STANDARD INDUSTRIAL CLASSIFICATION': 'ASSIGNED-SIC',
    'IRS NUMBER':                         'IRS-NUMBER',
    'STATE OF INCORPORATION':             'STATE-OF-INCORPORATION',
    'FISCAL YEAR END':                    'FISCAL-YEAR-END',
    'FORM TYPE':                          'FORM-TYPE',
    'SEC ACT':                            'ACT',
    'SEC FILE NUMBER':                    'FILE-NUMBER',
    'FILM NUMBER':                        'FILM-NUMBER',
    'STREET 1':                           'STREET1',
    'STREET 2':                           'STREET2',
    'CITY':                               'CITY',
    'STATE':                              'STATE',
    'ZIP':                                'ZIP',
    'BUSINESS PHONE':                     'PHONE',
    'FORMER CONFORMED NAME':              'FORMER-CONFORMED-NAME',
    'DATE OF NAME CHANGE':                'DATE-CHANGED',
}

_KEY_LINE = re.compile(r"^(?P<indent>[ \t]*)(?P<key>[A-Z][A-Z0-9 .,&()/'-]*?)\s*:[ \t]*(?P<value>.*?)\s*$")
_TAG_LINE = re.compile(r"^\s*<(?P<name>[A-Za-z0-9][A-Za-z0-9_-]*)>(?P<value>.*?)\s*$")
_SIC_CODE = re.compile(r"\[(\d{3,4})\]")


def parse_sec_header_text(text: str) -> GenericNode:
    """
    Translate a SEC-HEADER text block into a tagged GenericNode tree.

    Args:
        text: Decoded interior of the ``<SEC-HEADER>`` container

    Returns:
        BLOCK node tagged SEC-HEADER; unrecognised keys become value nodes
        named after the key (spaces → hyphens) so the mapper can keep them.
    """
    root = GenericNode('SEC-HEADER', TagKind.BLOCK)
    # (indent, node); the root sits below any real indentation
    stack: List[Tuple[int, GenericNode]] = [(-1, root)]

    for line in text.splitlines():
        if not line.strip():
            continue

        tag_match = _TAG_LINE.match(line)
        if tag_match is not None:
            root.children.append(GenericNode(
                tag_match.group('name').upper(), TagKind.VALUE,
                inline_value=tag_match.group('value'),
            ))
            continue

        key_match = _KEY_LINE.match(line)
        if key_match is None:
            # e.g. "0000320193-21-000105.hdr.sgml : 20211029"
            continue

        indent = len(key_match.group('indent').expandtabs(8))
        key = _normalize_key(key_match.group('key'))
        value = key_match.group('value')

        while stack[-1][0] >= indent:
            stack.pop()
        parent = stack[-1][1]

        if not value and key in _SECTION_TAGS:
            section = GenericNode(_SECTION_TAGS[key], TagKind.BLOCK)
            parent.children.append(section)
            stack.append((indent, section))
            continue

        tag = _VALUE_TAGS.get(key, key.replace(' ', '-'))
        if tag == 'ASSIGNED-SIC':
            value = _sic_code(value)
        parent.children.append(GenericNode(tag, TagKind.VALUE, inline_value=value))

    logger.debug("SEC-HEADER text block: %d top-level entries", len(root.children))
    return root


def _normalize_key(key: str) -> str:
    return re.sub(r"\s+", " ", key.strip().upper())


def _sic_code(value: str) -> str:
    """``ELECTRONIC COMPUTERS [3571]`` → ``3571``; unbracketed values are kept."""
    m = _SIC_CODE.search(value)
    return m.group(1) if m else value

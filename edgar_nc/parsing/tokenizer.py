"""
Stage 1: Byte/line tokenizer for EDGAR NC submissions.

Splits the raw file into classified lines. Tag lines become TagOpen, TagClose
or TagValue tokens; anything else is a RawLine passed through verbatim.

The tokenizer is purely syntactic: it does not know which tags are blocks or
values. When the tree builder meets an opaque container (TEXT, XBRL, PDF, ...)
it calls ``read_opaque()``, which scans forward for the matching close tag and
returns the bytes in between as one undivided span. Payload bytes are never
line-classified, so uuencoded data or nested XBRL tags cannot be mistaken for
envelope tags.

Span rule
---------
The span starts right after the open tag's ``>``; if only a line break follows
on that line, it starts after the line break. It ends where the close tag
begins. For ``<TEXT>\\nabc\\n</TEXT>`` the span is ``abc\\n`` (the delimiter
lines are removed); for ``<XBRL><a>x</a></XBRL>`` it is ``<a>x</a>``.

A close tag counts only when it starts a line (after optional whitespace) or
ends one. This keeps a stray ``</TEXT>`` in the middle of a uuencoded line
from cutting the payload short.

Inside a span, container and stop tags match upper-case only. EDGAR writes
its structural tags in upper case, while the payload's own ``</xbrl>``,
``<document>`` or SVG ``</text>`` elements are lower case.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Iterator, Optional, Union

from .errors import TokenizeError

_WHITESPACE = b" \t\r\f\v"


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TagOpen:
    """``<NAME>`` alone on its line."""
    name: str
    offset: int   # byte position of '<'
    end: int      # byte position just after '>'


@dataclass(frozen=True)
class TagClose:
    """``</NAME>``."""
    name: str
    offset: int
    end: int


@dataclass(frozen=True)
class TagValue:
    """``<NAME>value`` on one line; value excludes surrounding whitespace."""
    name: str
    value: bytes
    offset: int
    end: int


@dataclass(frozen=True)
class RawLine:
    """A non-tag line, verbatim including its line ending."""
    data: bytes
    offset: int


Token = Union[TagOpen, TagClose, TagValue, RawLine]


@dataclass(frozen=True)
class OpaqueSpan:
    """Result of an opaque scan."""
    data: bytes
    start: int          # absolute offset of data[0]
    terminated: bool    # False when the close tag was missing
    resume: int         # where normal tokenizing continues


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

class LineTokenizer:
    """
    Lazy iterator of classified lines over one file's bytes.

    Not restartable: iterate once, calling ``read_opaque()`` whenever the
    consumer decides a just-returned tag opens an opaque container.

    Example:
        >>> tok = LineTokenizer(b"<DOCUMENT>\\n<TYPE>10-K\\n<TEXT>\\nbody\\n</TEXT>\\n")
        >>> next(tok)
        TagOpen(name='DOCUMENT', offset=0, end=10)
        >>> next(tok)
        TagValue(name='TYPE', value=b'10-K', offset=11, end=17)
        >>> text_open = next(tok)
        >>> tok.read_opaque(text_open).data
        b'body\\n'
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._data = bytes(data)
        self._pos = 0

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        data = self._data
        size = len(data)
        while self._pos < size:
            line_start = self._pos
            newline = data.find(b"\n", line_start)
            line_end = size if newline == -1 else newline
            self._pos = size if newline == -1 else newline + 1

            token = self._classify(line_start, line_end)
            if token is not None:
                return token
        raise StopIteration

    def read_opaque(
        self,
        token: Union[TagOpen, TagValue],
        stop_tags: Iterable[str] = (),
    ) -> OpaqueSpan:
        """
        Switch to opaque scan mode for the container opened by *token*.

        Args:
            token: The TagOpen/TagValue just returned for the container.
            stop_tags: Names of enclosing open blocks. A line-start open or
                close tag for one of them ends an unterminated container.

        Returns:
            OpaqueSpan; tokenizing resumes right after the close tag.
        """
        span = scan_opaque(self._data, token.end, token.name, stop_tags)
        self._pos = span.resume
        return span

    def _classify(self, line_start: int, line_end: int) -> Optional[Token]:
        data = self._data
        line = data[line_start:line_end]
        stripped = line.strip()
        if not stripped:
            return None

        if not stripped.startswith(b"<"):
            # Keep the line ending: stray text is preserved verbatim
            return RawLine(data[line_start:self._pos], line_start)

        tag_start = line_start + (len(line) - len(line.lstrip()))
        gt = stripped.find(b">")
        if gt == -1:
            raise TokenizeError(tag_start, "unterminated angle bracket")

        inner = stripped[1:gt]
        closing = inner.startswith(b"/")
        name = _decode_tag_name(inner[1:] if closing else inner, tag_start)
        tag_end = tag_start + gt + 1
        rest = stripped[gt + 1:].lstrip()

        if closing:
            if rest:
                # Anything after the close tag is tokenized as its own line
                self._pos = tag_end
            return TagClose(name, tag_start, tag_end)

        if not rest:
            return TagOpen(name, tag_start, tag_end)

        # Tolerate explicitly closed value tags: <DESCRIPTION>foo</DESCRIPTION>
        close = b"</" + name.encode("ascii") + b">"
        if rest.upper().endswith(close):
            rest = rest[:-len(close)].rstrip()
        return TagValue(name, rest, tag_start, tag_end)


# ---------------------------------------------------------------------------
# Opaque scanning
# ---------------------------------------------------------------------------

def scan_opaque(
    data: bytes,
    content_start: int,
    tag: str,
    stop_tags: Iterable[str] = (),
) -> OpaqueSpan:
    """
    Find the span of an opaque container whose open tag ends at *content_start*.

    Args:
        data: Buffer being scanned.
        content_start: Offset just after the open tag's '>'.
        tag: Container tag name; its close tag must be upper-case.
        stop_tags: Enclosing block names that end an unterminated container.

    Returns:
        OpaqueSpan with terminated=False if the container had to be closed at
        a stop tag or at the end of *data*.
    """
    start = _skip_line_break(data, content_start)
    close = _find_boundary_close(data, tag, start)

    stop_at = None
    stop_tags = [t for t in stop_tags if t]
    if stop_tags:
        m = _stop_pattern(tuple(sorted(t.upper() for t in stop_tags))).search(data, start)
        if m is not None:
            stop_at = m.start()

    if close is not None and (stop_at is None or close.start() < stop_at):
        return OpaqueSpan(data[start:close.start()], start, True, close.end())

    end = stop_at if stop_at is not None else len(data)
    return OpaqueSpan(data[start:end], start, False, end)


def split_inner_container(span: bytes, opaque_tags: Iterable[str]) -> Optional[tuple]:
    """
    Detect an opaque container wrapping the whole of a TEXT span.

    ``<TEXT>`` bodies often hold exactly one ``<XBRL>``, ``<XML>`` or ``<PDF>``
    wrapper. Returns ``(tag, OpaqueSpan)`` for that wrapper (offsets relative
    to *span*) or None when the span does not begin with one.
    """
    body = span.lstrip()
    if not body.startswith(b"<") or body.startswith(b"</"):
        return None
    gt = body.find(b">")
    if gt == -1:
        return None
    try:
        name = body[1:gt].decode("ascii").strip()
    except UnicodeDecodeError:
        return None
    if name not in {t.upper() for t in opaque_tags}:
        # Lower-case <xml> or <pdf> is payload, not a container
        return None

    content_start = (len(span) - len(body)) + gt + 1
    return name, scan_opaque(span, content_start, name)


def _decode_tag_name(raw: bytes, offset: int) -> str:
    name = raw.strip()
    if not name:
        raise TokenizeError(offset, "empty tag name")
    for i, byte in enumerate(name):
        if byte < 0x20 or byte >= 0x7F or byte == 0x3C:
            raise TokenizeError(offset + 1 + i, f"invalid byte 0x{byte:02x} in tag name")
    return name.decode("ascii").upper()


def _skip_line_break(data: bytes, pos: int) -> int:
    i = pos
    size = len(data)
    while i < size and data[i] in b" \t":
        i += 1
    if data.startswith(b"\r\n", i):
        return i + 2
    if data.startswith(b"\n", i):
        return i + 1
    if i == size:
        return i
    return pos


def _find_boundary_close(data: bytes, tag: str, start: int):
    for m in _close_pattern(tag.upper()).finditer(data, start):
        line_begin = data.rfind(b"\n", 0, m.start()) + 1
        if not data[max(line_begin, start):m.start()].strip(_WHITESPACE):
            return m
        line_stop = data.find(b"\n", m.end())
        if line_stop == -1:
            line_stop = len(data)
        if not data[m.end():line_stop].strip(_WHITESPACE):
            return m
    return None


@lru_cache(maxsize=64)
def _close_pattern(tag: str) -> "re.Pattern[bytes]":
    return re.compile(rb"</" + re.escape(tag.encode("ascii")) + rb">")


@lru_cache(maxsize=64)
def _stop_pattern(tags: tuple) -> "re.Pattern[bytes]":
    names = b"|".join(re.escape(t.encode("ascii")) for t in tags)
    return re.compile(rb"^[ \t]*</?(?:" + names + rb")>", re.MULTILINE)

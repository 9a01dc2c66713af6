"""
uuencode codec for EDGAR binary attachments.

EDGAR filer agents uuencode every non-text attachment (PDF, JPG, ZIP, ...)
inside the document body:

    begin 644 exhibit.pdf
    M)5!$1BTQ+C0*)>+CS],*...
    `
    end

Decoding is line-based on ``binascii``. Lines written by sloppy encoders
that carry trailing garbage are recovered by truncating to the length the
line's count character declares, as the old stdlib ``uu`` module did.
"""

import binascii
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

_BEGIN_PATTERN = re.compile(rb"^begin\s+([0-7]{3,4})\s+(.*?)\s*$")
_LINE_BYTES = 45


class UUDecodeError(ValueError):
    """The data is not a well-formed uuencoded stream."""


@dataclass(frozen=True)
class UUDecoded:
    data: bytes
    mode: str
    filename: str
    backtick: bool   # zero-length / zero-value characters written as '`'
    newline: bytes = b"\n"   # line terminator of the begin line


def looks_uuencoded(data: bytes) -> bool:
    """True when the first non-blank line is a ``begin <mode> <name>`` header."""
    line, _ = _first_line(data)
    return line is not None and _BEGIN_PATTERN.match(line) is not None


def uudecode(data: bytes) -> UUDecoded:
    """
    Decode a uuencoded stream.

    Args:
        data: Bytes starting (after optional blank lines) with the begin line.

    Returns:
        UUDecoded with the original bytes and the header metadata.

    Raises:
        UUDecodeError: No begin line, a corrupt data line, or no end line.
    """
    begin_line, end = _first_line(data)
    if begin_line is None:
        raise UUDecodeError("empty uuencoded stream")

    header = _BEGIN_PATTERN.match(begin_line)
    if header is None:
        raise UUDecodeError("missing 'begin' line")
    mode = header.group(1).decode("ascii")
    filename = header.group(2).decode("latin-1")
    newline = b"\r\n" if data[end - 1:end + 1] == b"\r\n" else b"\n"

    chunks: List[bytes] = []
    backtick = False
    for line in data[end + 1:].splitlines():
        if line.strip() == b"end":
            return UUDecoded(b"".join(chunks), mode, filename, backtick, newline)
        if not line:
            continue
        if b"`" in line:
            backtick = True
        chunks.append(_decode_line(line))

    raise UUDecodeError("missing 'end' line")


def uuencode(
    data: bytes,
    filename: str,
    mode: str = "644",
    backtick: bool = True,
    newline: bytes = b"\n",
) -> bytes:
    """
    Encode *data* in the layout EDGAR uses (45 bytes per line).

    ``uuencode(d.data, d.filename, d.mode, d.backtick, d.newline)`` reproduces
    the encoded stream that ``uudecode`` produced *d* from.
    """
    out = [f"begin {mode} {filename}".encode("latin-1") + newline]
    for i in range(0, len(data), _LINE_BYTES):
        # b2a_uu always ends the line with LF
        out.append(binascii.b2a_uu(data[i:i + _LINE_BYTES], backtick=backtick)[:-1] + newline)
    out.append((b"`" if backtick else b" ") + newline)
    out.append(b"end" + newline)
    return b"".join(out)


def _first_line(data: bytes) -> Tuple[Optional[bytes], int]:
    """First non-blank line (stripped) and the offset of its line break."""
    pos = 0
    size = len(data)
    while pos < size:
        end = data.find(b"\n", pos)
        if end == -1:
            end = size
        line = data[pos:end].strip()
        if line:
            return line, end
        pos = end + 1
    return None, size


def _decode_line(line: bytes) -> bytes:
    try:
        return binascii.a2b_uu(line)
    except binascii.Error as exc:
        # Workaround for broken encoders: keep only the declared byte count
        nbytes = (((line[0] - 32) & 63) * 4 + 5) // 3
        try:
            return binascii.a2b_uu(line[:nbytes])
        except binascii.Error:
            raise UUDecodeError(f"corrupt uuencoded line: {line[:20]!r}") from exc


"""
Fatal parse errors.

Each error aborts the parse of one file only; nothing here is raised for
recoverable irregularities, which are recorded as anomalies on the Filing.
"""

from typing import Optional


class NcParseError(Exception):
    """Base class for all fatal NC parse errors."""


class TokenizeError(NcParseError):
    """Malformed low-level tag syntax at a byte offset."""

    def __init__(self, offset: int, reason: str):
        self.offset = offset
        self.reason = reason
        super().__init__(f"{reason} at byte offset {offset}")


class MappingError(NcParseError):
    """The tree lacks a required structural element (e.g. any DOCUMENT block)."""

    def __init__(self, element: str, reason: str = ""):
        self.element = element
        self.reason = reason or f"no <{element}> found"
        super().__init__(f"Unrecoverable filing structure: {self.reason}")


class DateParseError(NcParseError):
    """A date or datetime string matched none of the known formats."""

    def __init__(self, raw: str, field: Optional[str] = None):
        self.raw = raw
        self.field = field
        where = f" in <{field}>" if field else ""
        super().__init__(f"Unrecognized date/time value {raw!r}{where}")

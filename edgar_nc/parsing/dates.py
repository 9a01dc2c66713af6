"""
Date/time normalization for EDGAR header values.

EDGAR has written the same date several ways since 1995: ``19950103`` in the
SGML header tags, ``1995-01-03`` in later dissemination files, and
``01/03/1995`` in some hand-keyed fields. Acceptance timestamps are
``YYYYMMDDHHMMSS`` with or without a colon after the date.

Formats are tried in priority order and the first match wins.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from .errors import DateParseError
from .models.header import MonthDay


class Granularity(Enum):
    DATE = "date"
    DATETIME = "datetime"


DATE_FORMATS = (
    "%Y%m%d",
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%Y/%m/%d",
)

DATETIME_FORMATS = (
    "%Y%m%d:%H%M%S",
    "%Y%m%d%H%M%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y%m%d:%H%M",
    "%Y%m%d%H%M",
)

_WIDTHS = {
    fmt: len(datetime(2000, 10, 10, 10, 10, 10).strftime(fmt))
    for fmt in DATE_FORMATS + DATETIME_FORMATS
}


def normalize(
    raw: str,
    granularity: Granularity = Granularity.DATE,
    field: Optional[str] = None,
) -> Union[date, datetime]:
    """
    Parse a header date or datetime string.

    Args:
        raw: Value as found in the file; surrounding whitespace is ignored
        granularity: DATE returns a date; DATETIME returns a datetime and
            accepts a bare date as midnight of that day
        field: Tag name, carried on the error for reporting

    Returns:
        date or datetime

    Raises:
        DateParseError: No known format matches

    Example:
        >>> normalize("19950103")
        datetime.date(1995, 1, 3)
        >>> normalize("20210104:163012", Granularity.DATETIME)
        datetime.datetime(2021, 1, 4, 16, 30, 12)
    """
    value = raw.strip()
    if granularity is Granularity.DATETIME:
        parsed = _first_match(value, DATETIME_FORMATS) or _first_match(value, DATE_FORMATS)
        if parsed is not None:
            return parsed
    else:
        parsed = _first_match(value, DATE_FORMATS)
        if parsed is not None:
            return parsed.date()
    raise DateParseError(raw, field)


def parse_date(raw: str, field: Optional[str] = None) -> date:
    return normalize(raw, Granularity.DATE, field)


def parse_datetime(raw: str, field: Optional[str] = None) -> datetime:
    return normalize(raw, Granularity.DATETIME, field)


def parse_month_day(raw: str, field: Optional[str] = None) -> MonthDay:
    """Parse a fiscal year end (``MMDD``, e.g. ``0930``)."""
    value = raw.strip()
    if len(value) != 4 or not value.isdigit():
        raise DateParseError(raw, field)
    try:
        return MonthDay(month=int(value[:2]), day=int(value[2:]))
    except ValueError as exc:
        raise DateParseError(raw, field) from exc


def parse_yes_no(raw: str, field: Optional[str] = None) -> bool:
    """Strict ``Y``/``N`` answer parser (case-insensitive)."""
    value = raw.strip().upper()
    if value == "Y":
        return True
    if value == "N":
        return False
    raise ValueError(f"expected Y or N{f' in <{field}>' if field else ''}, got {raw!r}")


def _first_match(value: str, formats) -> Optional[datetime]:
    for fmt in formats:
        # Zero-padded width only: strptime would otherwise read "1630" as 16:03:00
        if len(value) != _WIDTHS[fmt]:
            continue
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None

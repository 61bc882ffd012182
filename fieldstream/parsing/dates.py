"""Lenient date and datetime parsing for values written by language models.

Dates must be ISO ``YYYY-MM-DD``.  Datetimes are ``YYYY-MM-DD HH:MM`` with
optional seconds, a space or ``T`` separator, and an optional timezone that
may be an IANA name (``Europe/Berlin``), ``Z``/``UTC``/``GMT``, a common
abbreviation (``EST``, ``CET`` ...) or a numeric offset (``+05:30``).  A
datetime without a timezone is taken to be UTC.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import FieldValidationError

if TYPE_CHECKING:
    from ..schema import FieldSpec

__all__ = ["parse_llm_date", "parse_llm_datetime"]

DATE_FORMAT_HINT = 'Invalid date format. Please provide the date in "YYYY-MM-DD" format.'
DATETIME_FORMAT_HINT = (
    "Invalid date and time format. Please provide the date and time in "
    '"YYYY-MM-DD HH:mm" or "YYYY-MM-DD HH:mm:ss" format, followed by the timezone.'
)

_DATETIME_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[ T](?P<time>\d{2}:\d{2}(?::\d{2})?)\s*(?P<tz>.*)$"
)
_OFFSET_RE = re.compile(r"^(?:UTC|GMT)?\s*(?P<sign>[+-])(?P<hours>\d{1,2}):?(?P<minutes>\d{2})?$")

# Hours offset from UTC for abbreviations models commonly emit.
_TZ_ABBREVIATIONS: dict[str, float] = {
    "UTC": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
    "BST": 1,
    "CET": 1,
    "CEST": 2,
    "EET": 2,
    "EEST": 3,
    "IST": 5.5,
    "JST": 9,
    "AEST": 10,
    "AEDT": 11,
}


def _reject(field: FieldSpec, text: str, required: bool, message: str) -> None:
    if field.is_optional and not required:
        return None
    raise FieldValidationError(message, fields=[field], value=text)


def _resolve_timezone(raw: str) -> tzinfo | None:
    label = raw.strip()
    if not label:
        return timezone.utc
    upper = label.upper()
    try:
        if upper in _TZ_ABBREVIATIONS:
            return timezone(timedelta(hours=_TZ_ABBREVIATIONS[upper]))
        m = _OFFSET_RE.match(upper)
        if m:
            delta = timedelta(hours=int(m.group("hours")), minutes=int(m.group("minutes") or 0))
            # timezone() rejects offsets of 24 hours or more
            return timezone(-delta if m.group("sign") == "-" else delta)
        return ZoneInfo(label)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def parse_llm_date(field: FieldSpec, text: str, required: bool = False) -> date | None:
    """Parse a ``YYYY-MM-DD`` date.

    Returns ``None`` for unparsable text when the field is optional and the
    caller does not force it as required (array elements are always forced).
    """
    try:
        return datetime.strptime(text.strip(), "%Y-%m-%d").date()
    except ValueError:
        return _reject(field, text, required, DATE_FORMAT_HINT)


def parse_llm_datetime(field: FieldSpec, text: str, required: bool = False) -> datetime | None:
    """Parse a datetime with optional timezone into an aware ``datetime``."""
    m = _DATETIME_RE.match(text.strip())
    if not m:
        return _reject(field, text, required, DATETIME_FORMAT_HINT)

    time_part = m.group("time")
    fmt = "%Y-%m-%d %H:%M:%S" if time_part.count(":") == 2 else "%Y-%m-%d %H:%M"
    try:
        naive = datetime.strptime(f"{m.group('date')} {time_part}", fmt)
    except ValueError:
        return _reject(field, text, required, DATETIME_FORMAT_HINT)

    tz = _resolve_timezone(m.group("tz"))
    if tz is None:
        return _reject(field, text, required, f"Unknown timezone '{m.group('tz').strip()}'. {DATETIME_FORMAT_HINT}")
    return naive.replace(tzinfo=tz)

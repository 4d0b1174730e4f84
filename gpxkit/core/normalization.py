"""
Scalar codecs shared by the element parsers and writers.

GPX carries numbers, times and enumerations as element text. Parsing is
strict: anything that does not match the XML Schema lexical form raises
InvalidScalarValueError naming the field and the raw text. Formatting is the
inverse, chosen so that parse(format(x)) == x.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Tuple

from gpxkit.errors import InvalidScalarValueError, UnwritableValueError
from gpxkit.model import Fix


logger = logging.getLogger(__name__)

# xsd:decimal, plus an exponent part (several producers write 1.2e-05).
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_YEAR_RE = re.compile(r"^(-?\d{4,})(Z|[+-]\d{2}:\d{2})?$")
_DATETIME_RE = re.compile(
    r"^(?P<year>-?\d{4,})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})(?:\.(?P<fraction>\d+))?"
    r"(?P<tz>Z|[+-]\d{2}:\d{2})?$"
)

# Largest DGPS station id allowed by dgpsStationType.
MAX_DGPS_ID = 1023


def parse_decimal(text: str, field: str) -> float:
    raw = (text or "").strip()
    if not _DECIMAL_RE.match(raw):
        raise InvalidScalarValueError(field, text, "decimal")
    value = float(raw)
    if not math.isfinite(value):
        raise InvalidScalarValueError(field, text, "decimal")
    return value


def parse_integer(text: str, field: str) -> int:
    raw = (text or "").strip()
    if not _INTEGER_RE.match(raw):
        raise InvalidScalarValueError(field, text, "integer")
    return int(raw)


def parse_non_negative_integer(text: str, field: str) -> int:
    value = parse_integer(text, field)
    if value < 0:
        raise InvalidScalarValueError(field, text, "non-negative integer")
    return value


def parse_dgps_id(text: str, field: str) -> int:
    value = parse_integer(text, field)
    if not 0 <= value <= MAX_DGPS_ID:
        raise InvalidScalarValueError(field, text, f"DGPS station id (0..{MAX_DGPS_ID})")
    return value


def parse_year(text: str, field: str) -> int:
    """Parse xsd:gYear. A trailing timezone is accepted and dropped."""
    m = _YEAR_RE.match((text or "").strip())
    if not m:
        raise InvalidScalarValueError(field, text, "year")
    return int(m.group(1))


def parse_time(text: str, field: str) -> datetime:
    """
    Parse an ISO 8601 / xsd:dateTime value into an aware UTC datetime.

    - 'Z' and '+hh:mm' offsets are honoured and converted to UTC
    - fractional seconds beyond microseconds are truncated
    - a value without timezone is taken as UTC (common in older exports)
    """
    raw = (text or "").strip()
    m = _DATETIME_RE.match(raw)
    if not m:
        raise InvalidScalarValueError(field, text, "ISO 8601 time")

    fraction = (m.group("fraction") or "")[:6].ljust(6, "0")
    try:
        dt = datetime(
            int(m.group("year")),
            int(m.group("month")),
            int(m.group("day")),
            int(m.group("hour")),
            int(m.group("minute")),
            int(m.group("second")),
            int(fraction),
        )
    except ValueError:
        raise InvalidScalarValueError(field, text, "ISO 8601 time") from None

    tz = m.group("tz")
    if tz is None:
        logger.debug(f"<{field}> value {raw!r} has no timezone, assuming UTC")
        return dt.replace(tzinfo=timezone.utc)
    if tz == "Z":
        return dt.replace(tzinfo=timezone.utc)

    sign = -1 if tz[0] == "-" else 1
    offset = timedelta(hours=int(tz[1:3]), minutes=int(tz[4:6]))
    if offset >= timedelta(hours=24):
        raise InvalidScalarValueError(field, text, "ISO 8601 time")
    try:
        return dt.replace(tzinfo=timezone(sign * offset)).astimezone(timezone.utc)
    except OverflowError:
        raise InvalidScalarValueError(field, text, "ISO 8601 time") from None


def parse_fix(text: str, field: str) -> Fix:
    try:
        return Fix((text or "").strip())
    except ValueError:
        raise InvalidScalarValueError(field, text, "fix type (none|2d|3d|dgps|pps)") from None


def parse_email(email_id: str, domain: str, field: str = "email") -> str:
    """Join the 1.1 id/domain attributes. Either part containing @ is rejected."""
    if not email_id or not domain or "@" in email_id or "@" in domain:
        raise InvalidScalarValueError(field, f"{email_id}@{domain}", "email address")
    return f"{email_id}@{domain}"


def parse_email_address(text: str, field: str) -> str:
    """GPX 1.0 carries the address as element text; it must split into id and domain."""
    raw = (text or "").strip()
    email_id, sep, domain = raw.partition("@")
    if not sep:
        raise InvalidScalarValueError(field, text, "email address")
    return parse_email(email_id, domain, field)


def split_email(email: str, field: str = "email") -> Tuple[str, str]:
    """Split "id@domain" back into its two attributes."""
    email_id, sep, domain = (email or "").partition("@")
    if not sep or not email_id or not domain or "@" in domain:
        raise UnwritableValueError(field, email)
    return email_id, domain


def format_decimal(value: float, field: str) -> str:
    """
    Shortest text that parses back to the same float, never in exponent form.

    >>> format_decimal(4.46, "ele")
    '4.46'
    >>> format_decimal(1e-05, "hdop")
    '0.00001'
    """
    if isinstance(value, bool):
        raise UnwritableValueError(field, value)
    if isinstance(value, int):
        return str(value)
    value = float(value)
    if not math.isfinite(value):
        raise UnwritableValueError(field, value)
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def format_time(value: datetime) -> str:
    """Format as UTC xsd:dateTime with a 'Z' suffix. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    return text + "Z"

"""
Tests for the scalar codecs.

Tests cover:
- xsd:decimal parsing (exponents tolerated, NaN/Inf rejected)
- integer, DGPS id and year ranges
- ISO 8601 times with and without offsets
- fix enumeration
- writer-side formatting
"""

from datetime import datetime, timezone

import pytest

from gpxkit.core.normalization import (
    format_decimal,
    format_time,
    parse_decimal,
    parse_dgps_id,
    parse_email,
    parse_email_address,
    parse_fix,
    parse_non_negative_integer,
    parse_time,
    parse_year,
    split_email,
)
from gpxkit.errors import InvalidScalarValueError, UnwritableValueError
from gpxkit.model import Fix


@pytest.mark.parametrize(
    "text,expected",
    [
        ("4.46", 4.46),
        ("-121.1", -121.1),
        ("  12 ", 12.0),
        ("+.5", 0.5),
        ("1.2e-05", 1.2e-05),
        ("157", 157.0),
    ],
)
def test_parse_decimal_accepts_lexical_forms(text, expected):
    assert parse_decimal(text, "ele") == expected


@pytest.mark.parametrize("text", ["", "abc", "NaN", "INF", "-inf", "1,5", "1.2.3"])
def test_parse_decimal_rejects_garbage(text):
    with pytest.raises(InvalidScalarValueError, match="ele") as exc:
        parse_decimal(text, "ele")
    assert exc.value.field == "ele"
    assert exc.value.value == text


def test_non_negative_integer():
    assert parse_non_negative_integer("4", "sat") == 4
    assert parse_non_negative_integer("0", "sat") == 0
    with pytest.raises(InvalidScalarValueError):
        parse_non_negative_integer("-1", "sat")
    with pytest.raises(InvalidScalarValueError):
        parse_non_negative_integer("4.0", "sat")


def test_dgps_id_range():
    assert parse_dgps_id("1023", "dgpsid") == 1023
    with pytest.raises(InvalidScalarValueError, match="dgpsid"):
        parse_dgps_id("1024", "dgpsid")


def test_year():
    assert parse_year("2009", "year") == 2009
    assert parse_year("2009Z", "year") == 2009
    with pytest.raises(InvalidScalarValueError):
        parse_year("09", "year")


def test_parse_time_utc():
    assert parse_time("2009-10-17T22:58:43Z", "time") == datetime(2009, 10, 17, 22, 58, 43, tzinfo=timezone.utc)


def test_parse_time_offset_is_converted_to_utc():
    value = parse_time("2017-04-12T11:02:54+02:00", "time")
    assert value == datetime(2017, 4, 12, 9, 2, 54, tzinfo=timezone.utc)
    assert value.tzinfo == timezone.utc


def test_parse_time_fraction_and_missing_zone():
    value = parse_time("2017-04-12T09:02:53.2504567", "time")
    assert value.microsecond == 250456
    assert value.tzinfo == timezone.utc


@pytest.mark.parametrize("text", ["yesterday", "2009-13-01T00:00:00Z", "2009-10-17 22:58:43Z", "2009-10-17T25:00:00Z"])
def test_parse_time_rejects_invalid(text):
    with pytest.raises(InvalidScalarValueError, match="time"):
        parse_time(text, "time")


def test_parse_fix():
    assert parse_fix("3d", "fix") is Fix.THREE_D
    assert parse_fix(" dgps ", "fix") is Fix.DGPS
    with pytest.raises(InvalidScalarValueError, match="3d-ish"):
        parse_fix("3d-ish", "fix")


def test_email_roundtrip_parts():
    assert parse_email("jane", "example.com") == "jane@example.com"
    assert split_email("jane@example.com") == ("jane", "example.com")


@pytest.mark.parametrize("email", ["no-at-sign", "@example.com", "jane@", "a@b@c"])
def test_split_email_rejects(email):
    with pytest.raises(UnwritableValueError):
        split_email(email)


@pytest.mark.parametrize(
    "value,expected",
    [(4.46, "4.46"), (1e-05, "0.00001"), (157.0, "157.0"), (3, "3"), (-121.1, "-121.1"), (1e16, "10000000000000000")],
)
def test_format_decimal(value, expected):
    assert format_decimal(value, "ele") == expected
    assert parse_decimal(expected, "ele") == value


@pytest.mark.parametrize("value", [float("nan"), float("inf"), True])
def test_format_decimal_rejects_unwritable(value):
    with pytest.raises(UnwritableValueError):
        format_decimal(value, "ele")


def test_format_time():
    assert format_time(datetime(2009, 10, 17, 22, 58, 43, tzinfo=timezone.utc)) == "2009-10-17T22:58:43Z"
    assert format_time(datetime(2017, 4, 12, 9, 2, 53, 250000, tzinfo=timezone.utc)) == "2017-04-12T09:02:53.25Z"
    # naive values are taken as UTC
    assert format_time(datetime(2020, 1, 1)) == "2020-01-01T00:00:00Z"


def test_parse_email_address():
    assert parse_email_address(" jane@example.com ", "email") == "jane@example.com"


@pytest.mark.parametrize("text", ["nobody", "@example.com", "jane@", "a@b@c", ""])
def test_parse_email_address_rejects(text):
    with pytest.raises(InvalidScalarValueError, match="email address"):
        parse_email_address(text, "email")


def test_parse_email_rejects_at_sign_in_parts():
    with pytest.raises(InvalidScalarValueError):
        parse_email("jane@home", "example.com")

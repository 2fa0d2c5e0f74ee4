"""Form input validators."""

import datetime

import pytest

from schooldash.features import validators


@pytest.mark.parametrize(
    "value, valid",
    [("08:30", True), ("23:59", True), (" 07:05 ", True), ("24:00", False),
     ("8:30", False), ("08:60", False), ("", False)],
)
def test_time_validator(value: str, valid: bool) -> None:
    """Times are 24-hour HH:MM strings."""
    assert validators.TimeValidator().validate(value).is_valid == valid


@pytest.mark.parametrize(
    "value, valid",
    [("parent@example.com", True), ("a.b@school1.edu", True),
     ("parent@example", False), ("parent example.com", False), ("", False)],
)
def test_email_validator(value: str, valid: bool) -> None:
    """Addresses need a name, an @ sign, and a dotted domain."""
    assert validators.EmailValidator().validate(value).is_valid == valid


def test_date_validator() -> None:
    """Blank dates are accepted only when allowed."""
    assert validators.DateValidator().validate("2025-11-20").is_valid
    assert not validators.DateValidator().validate("not a date").is_valid
    assert not validators.DateValidator().validate("").is_valid
    assert validators.DateValidator(allow_blank=True).validate(" ").is_valid


def test_not_empty() -> None:
    assert validators.NotEmpty().validate("Omar").is_valid
    assert not validators.NotEmpty().validate("   ").is_valid


def test_parse_date() -> None:
    """Month comes before day in ambiguous dates."""
    assert validators.parse_date("2025-11-20") == datetime.date(2025, 11, 20)
    assert validators.parse_date("12/01/2025") == datetime.date(2025, 12, 1)

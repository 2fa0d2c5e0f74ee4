"""Data entry validator classes."""

import re
from collections.abc import Iterable

import dateutil.parser

from textual import validation, widgets


class NotEmpty(validation.Validator):
    def validate(self, value: str) -> validation.ValidationResult:
        if not value.strip():
            return self.failure("Field cannot be empty.")
        return self.success()


class DateValidator(validation.Validator):
    """Validate user input."""

    allow_blank: bool

    def __init__(self, allow_blank: bool = False) -> None:
        super().__init__()
        self.allow_blank = allow_blank

    def validate(self, value: str) -> validation.ValidationResult:
        """Verify input is a valid date."""
        if self.allow_blank and not value.strip():
            return self.success()
        try:
            dateutil.parser.parse(value, dayfirst=False).date()
            return self.success()
        except (dateutil.parser.ParserError, OverflowError) as err:
            return self.failure(str(err))


class TimeValidator(validation.Validator):
    """Accept 24-hour times written as HH:MM."""

    _time_pattern = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

    def validate(self, value: str) -> validation.ValidationResult:
        if self._time_pattern.match(value.strip()):
            return self.success()
        return self.failure("Enter a time as HH:MM, for example 08:30.")


class EmailValidator(validation.Validator):
    """Minimal check that an e-mail address has a name and a domain."""

    _email_pattern = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

    def validate(self, value: str) -> validation.ValidationResult:
        if self._email_pattern.match(value.strip()):
            return self.success()
        return self.failure("Enter a valid e-mail address.")


def parse_date(value: str):
    """Convert text accepted by DateValidator to a datetime.date."""
    return dateutil.parser.parse(value, dayfirst=False).date()


def first_failure(inputs: Iterable[widgets.Input]) -> str | None:
    """Message for the first input whose value fails its validators.

    Returns None if every input is valid.
    """
    for input_widget in inputs:
        result = input_widget.validate(input_widget.value)
        if result is not None and not result.is_valid:
            label = input_widget.placeholder or input_widget.id or "Field"
            return f"{label}: {result.failure_descriptions[0]}"
    return None

from typing import Optional

from worklog.models.schema import TimeField


class WorklogError(Exception):
    """Base exception for timeclock failures."""


class TimeParseError(WorklogError, ValueError):
    """Raised when text does not match the time or rounding grammar."""

    def __init__(self, text: str, expected: str):
        self.text = text
        self.expected = expected
        super().__init__(f"Could not parse {text!r}, expected {expected}")


class TimeRangeError(WorklogError, ValueError):
    """Raised when a parsed field cannot form a real date-time."""

    def __init__(self, field: TimeField, value: object):
        self.field = field
        self.value = value
        super().__init__(f"The specified {field.value} is invalid: {value!r}")


class TimeOverflowError(WorklogError, OverflowError):
    """Raised when an offset pushes an instant out of the representable range."""


class LedgerError(WorklogError):
    """Raised when a ledger row cannot be decoded."""

    def __init__(self, line_number: int, line: str, reason: Optional[str] = None):
        self.line_number = line_number
        self.line = line
        message = f"Malformed ledger row {line_number}: {line!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)

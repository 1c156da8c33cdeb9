"""
Free-form time expressions.

Three small languages are recognised here:

- rounding specs such as ``+15m``, ``D30s``, ``h1h`` or a bare ``7.5``
- relative offsets such as ``+2.3s``, ``-1.55h``, ``+2:22`` or ``_2:22``
- dates and times such as ``9:22pm``, ``4/2 9:22 Pm``, ``2017-4-30`` or
  ``2017-04-30 09:22:31.5 -05:00``

Parsing never range-checks hours, minutes or seconds; ``99:22`` is valid
syntax and only fails in :func:`apply_fields`, which names the offending
field. Every entry point takes the reference instant explicitly.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from worklog.core.exceptions import TimeOverflowError, TimeParseError, TimeRangeError
from worklog.models.schema import DateTimeFields, RoundingMode, RoundingSpec, TimeField

UNIT_SECONDS = {"s": 1.0, "m": 60.0, "h": 3600.0, "d": 86400.0}
DEFAULT_UNIT = "m"

# "e" is a legacy alias for half rounding; no other aliases are accepted
MODE_PREFIXES = {
    "+": RoundingMode.UP,
    "u": RoundingMode.UP,
    "U": RoundingMode.UP,
    "-": RoundingMode.DOWN,
    "_": RoundingMode.DOWN,
    "d": RoundingMode.DOWN,
    "D": RoundingMode.DOWN,
    "=": RoundingMode.HALF,
    "h": RoundingMode.HALF,
    "H": RoundingMode.HALF,
    "e": RoundingMode.HALF,
}
DEFAULT_MODE = RoundingMode.HALF

_NUMBER = r"(?:\d+(?:\.\d*)?|\.\d+)"
_UNIT = r"[sSmMhHdD]"

ROUNDING_PATTERN = re.compile(rf"(?P<prefix>[-+_=UuDdHhe])?(?P<number>{_NUMBER})(?P<unit>{_UNIT})?")

OFFSET_PATTERN = re.compile(
    rf"""
    (?P<sign>[-+_])
    (?:
        (?P<hours>\d+):(?P<minutes>\d{{2}})
      | (?P<number>{_NUMBER})(?P<unit>{_UNIT})?
    )
    """,
    re.VERBOSE,
)

_DATE = r"(?:(?P<year>\d{4})[-/])?(?P<month>\d{1,2})[-/](?P<day>\d{1,2})"
_TIME = r"""
    (?P<hour>\d{1,2}):(?P<minute>\d{1,2})
    (?::(?:(?P<second>\d{1,2})(?:\.(?P<fraction>\d*))?)?)?
    (?:\s*(?P<meridiem>[AaPp][Mm]))?
"""
_ZONE = r"(?P<zone>[Zz]|[-+]\d{2}(?::?\d{2})?)"

DATETIME_PATTERN = re.compile(rf"{_DATE}\s+{_TIME}(?:\s*{_ZONE})?", re.VERBOSE)
DATE_PATTERN = re.compile(rf"{_DATE}(?:\s+{_ZONE})?", re.VERBOSE)
TIME_PATTERN = re.compile(rf"{_TIME}(?:\s*{_ZONE})?", re.VERBOSE)

DATETIME_EXPECTED = "a date and/or time such as '9:30pm', '4/2 9:30' or '2017-04-30 09:30 -05:00'"
TIME_EXPECTED = "a time of day such as '9:30', '9:30:15.5' or '9:30pm'"


def parse_rounding(text: str) -> RoundingSpec:
    """Parse ``<prefix><number><unit>`` into a RoundingSpec.

    A number without a prefix rounds half, a number without a unit counts
    minutes.
    """
    match = ROUNDING_PATTERN.fullmatch(text.strip())
    if match is None:
        raise TimeParseError(text, "a rounding spec such as '+15m', 'D30s' or '=1h'")
    prefix = match.group("prefix")
    mode = MODE_PREFIXES[prefix] if prefix else DEFAULT_MODE
    unit = (match.group("unit") or DEFAULT_UNIT).lower()
    return RoundingSpec(mode=mode, granularity=float(match.group("number")) * UNIT_SECONDS[unit])


def parse_offset_seconds(text: str) -> float:
    """Parse a signed relative offset into seconds. ``_`` is a minus sign."""
    match = OFFSET_PATTERN.fullmatch(text.strip())
    if match is None:
        raise TimeParseError(text, "a signed offset such as '+2.5h', '-30m' or '_1:15'")

    if match.group("hours") is not None:
        seconds = int(match.group("hours")) * 3600.0 + int(match.group("minutes")) * 60.0
    else:
        unit = (match.group("unit") or DEFAULT_UNIT).lower()
        seconds = float(match.group("number")) * UNIT_SECONDS[unit]
    return seconds if match.group("sign") == "+" else -seconds


def parse_offset(text: str, reference: datetime) -> datetime:
    seconds = parse_offset_seconds(text)
    try:
        return reference + timedelta(seconds=seconds)
    except OverflowError as exc:
        raise TimeOverflowError(f"Offset {text!r} moves {reference.isoformat()} out of range") from exc


def _to_24_hour(hour: int, meridiem: Optional[str]) -> int:
    if meridiem is None:
        return hour
    if meridiem.lower() == "pm":
        return hour + 12 if hour < 12 else hour
    return 0 if hour == 12 else hour


def _zone_seconds(zone: Optional[str]) -> Optional[int]:
    if zone is None:
        return None
    if zone in ("Z", "z"):
        return 0
    digits = zone[1:].replace(":", "")
    seconds = int(digits[:2]) * 3600 + int(digits[2:] or 0) * 60
    return -seconds if zone[0] == "-" else seconds


def _fields_from_match(match: "re.Match") -> DateTimeFields:
    groups = match.groupdict()

    def number(name: str) -> Optional[int]:
        value = groups.get(name)
        return int(value) if value is not None else None

    fraction = groups.get("fraction") or ""
    return DateTimeFields(
        year=number("year"),
        month=number("month"),
        day=number("day"),
        hour=_to_24_hour(number("hour") or 0, groups.get("meridiem")),
        minute=number("minute") or 0,
        second=number("second") or 0,
        # truncated to what a datetime can hold
        microsecond=int(fraction[:6].ljust(6, "0")),
        utc_offset=_zone_seconds(groups.get("zone")),
    )


def parse_datetime_fields(text: str) -> DateTimeFields:
    """Split a date and/or time expression into its written fields.

    A date must be separated from its time by whitespace; ``2017-4-309:22``
    is rejected rather than guessed at.
    """
    stripped = text.strip()
    for pattern in (DATETIME_PATTERN, DATE_PATTERN, TIME_PATTERN):
        match = pattern.fullmatch(stripped)
        if match is not None:
            return _fields_from_match(match)
    raise TimeParseError(text, DATETIME_EXPECTED)


def parse_time_fields(text: str) -> DateTimeFields:
    match = TIME_PATTERN.fullmatch(text.strip())
    if match is None:
        raise TimeParseError(text, TIME_EXPECTED)
    return _fields_from_match(match)


def apply_fields(fields: DateTimeFields, reference: datetime) -> datetime:
    """Build a concrete datetime, defaulting missing fields from ``reference``.

    The date defaults to the reference's calendar date in its own offset,
    and the offset defaults to the reference's offset.
    """
    offset = reference.utcoffset() if fields.utc_offset is None else timedelta(seconds=fields.utc_offset)
    try:
        zone = timezone(offset)
    except ValueError as exc:
        raise TimeRangeError(TimeField.OFFSET, fields.utc_offset) from exc

    year = reference.year if fields.year is None else fields.year
    month = reference.month if fields.month is None else fields.month
    day = reference.day if fields.day is None else fields.day
    try:
        result = datetime(year, month, day, tzinfo=zone)
    except ValueError as exc:
        raise TimeRangeError(TimeField.DATE, f"{year:04d}-{month:02d}-{day:02d}") from exc

    for field, value in (
        (TimeField.HOUR, fields.hour),
        (TimeField.MINUTE, fields.minute),
        (TimeField.SECOND, fields.second),
        (TimeField.MICROSECOND, fields.microsecond),
    ):
        try:
            result = result.replace(**{field.value: value})
        except ValueError as exc:
            raise TimeRangeError(field, value) from exc
    return result


def parse_time(text: str, reference: datetime) -> datetime:
    """Set the time of day on ``reference``'s date."""
    return apply_fields(parse_time_fields(text), reference)


def parse_datetime(text: str, reference: datetime) -> datetime:
    return apply_fields(parse_datetime_fields(text), reference)


def parse_when(text: str, reference: datetime) -> datetime:
    """Resolve a clock action's time argument.

    ``now`` (or nothing) is the reference itself, a leading sign makes a
    relative offset, anything else is read as a date and/or time.
    """
    stripped = text.strip()
    if not stripped or stripped.lower() == "now":
        return reference
    if stripped[0] in "+-_":
        return parse_offset(stripped, reference)
    return parse_datetime(stripped, reference)

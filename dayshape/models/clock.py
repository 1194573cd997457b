"""Wall-clock time helpers for dayshape.

All times inside the engine are minute-of-day integers (0..1440) on a single
local day. At the boundary they are "HH:MM" 24-hour strings.
"""

import re

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class InvalidTimeError(ValueError):
    """Raised when a time string is not a valid same-day HH:MM value."""


def parse_time(value: str, allow_end_of_day: bool = False) -> int:
    """Parse an "HH:MM" string into minutes since midnight.

    Args:
        value: Time string in 24-hour format
        allow_end_of_day: Accept "24:00" (valid only as an end time)

    Returns:
        Minute of day

    Raises:
        InvalidTimeError: If the string is not a valid time
    """
    if not isinstance(value, str):
        raise InvalidTimeError(f"Expected HH:MM string, got {type(value).__name__}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeError(f"Unparsable time '{value}' (expected HH:MM)")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59:
        raise InvalidTimeError(f"Invalid minutes in '{value}'")
    if hours == 24 and minutes == 0 and allow_end_of_day:
        return MINUTES_PER_DAY
    if hours > 23:
        raise InvalidTimeError(f"Invalid hour in '{value}'")
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM"."""
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise InvalidTimeError(f"Minute of day out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def coerce_minutes(value, allow_end_of_day: bool = False) -> int:
    """Accept either a minute-of-day int or an "HH:MM" string."""
    # bool is an int subclass; a flag is never a time
    if isinstance(value, bool):
        raise InvalidTimeError("Boolean is not a valid time")
    if isinstance(value, int):
        upper = MINUTES_PER_DAY if allow_end_of_day else MINUTES_PER_DAY - 1
        if value < 0 or value > upper:
            raise InvalidTimeError(f"Minute of day out of range: {value}")
        return value
    return parse_time(value, allow_end_of_day=allow_end_of_day)

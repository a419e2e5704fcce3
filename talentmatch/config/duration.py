"""Duration strings for scoring windows.

The availability grace window and the commitment horizon are written in the
config file as ``30d``, ``2w``, ``1w3d`` or as ISO-8601 durations (``P30D``,
``P2W``, ``P1DT12H``). Matching only ever works in whole days.
"""

import re
from typing import Dict

SECONDS_PER_DAY = 86400

UNIT_SECONDS: Dict[str, int] = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": SECONDS_PER_DAY,
    "w": 7 * SECONDS_PER_DAY,
}

_SHORT_FORM = re.compile(r"(?:\d+[smhdw])+")
_SHORT_TOKEN = re.compile(r"(\d+)([smhdw])")
_ISO_FORM = re.compile(
    r"P(?:(?P<w>\d+)W)?(?:(?P<d>\d+)D)?"
    r"(?:T(?:(?P<h>\d+)H)?(?:(?P<m>\d+)M)?(?:(?P<s>\d+)S)?)?"
)


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed."""


def parse_duration(value: str) -> int:
    """
    Parse a duration string to seconds.

    Raises:
        DurationParseError: If the string is empty, malformed or zero

    Examples:
        >>> parse_duration("1w3d")
        864000
        >>> parse_duration("PT15M")
        900
    """
    if not isinstance(value, str):
        raise DurationParseError(f"Duration must be a string, got {type(value).__name__}")

    text = value.strip().lower()
    if not text:
        raise DurationParseError("Duration string cannot be empty")

    if text.startswith("p"):
        total = _iso_seconds(text.upper(), value)
    elif _SHORT_FORM.fullmatch(text):
        total = sum(int(n) * UNIT_SECONDS[unit] for n, unit in _SHORT_TOKEN.findall(text))
    else:
        raise DurationParseError(
            f"Invalid duration: '{value}'. Use a count and a unit "
            "(s, m, h, d, w) such as '30d' or '1w3d', or an ISO-8601 duration like 'P30D'"
        )

    if total == 0:
        raise DurationParseError(f"Duration cannot be zero: '{value}'")
    return total


def _iso_seconds(text: str, original: str) -> int:
    match = _ISO_FORM.fullmatch(text)
    if not match or text in ("P", "PT") or text.endswith("T"):
        raise DurationParseError(
            f"Invalid ISO-8601 duration: '{original}'. Expected e.g. 'P30D', 'P2W' or 'P1DT12H'"
        )
    return sum(
        int(count) * UNIT_SECONDS[unit]
        for unit, count in match.groupdict().items()
        if count
    )


def parse_duration_days(value: str) -> int:
    """
    Parse a duration string to whole days.

    Raises:
        DurationParseError: If the duration is invalid or not a whole number of days

    Examples:
        >>> parse_duration_days("P2W")
        14
    """
    seconds = parse_duration(value)
    days, remainder = divmod(seconds, SECONDS_PER_DAY)
    if remainder:
        raise DurationParseError(f"Duration must be a whole number of days: '{value}'")
    return days


def check_days_range(days: int, min_days: int, max_days: int, label: str = "Duration") -> None:
    """Raise DurationParseError when ``days`` is outside ``[min_days, max_days]``."""
    if days < min_days:
        raise DurationParseError(f"{label} too short: {_days(days)}. Minimum is {_days(min_days)}.")
    if days > max_days:
        raise DurationParseError(f"{label} too long: {_days(days)}. Maximum is {_days(max_days)}.")


def _days(count: int) -> str:
    return f"{count} day{'s' if count != 1 else ''}"

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

_RFC3339_RE = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)

_INTEGER_RE = re.compile(r"[+-]?\d+", re.ASCII)

# Ids are bound as SQLite INTEGER, a signed 64-bit value
_ID_MIN = -(2**63)
_ID_MAX = 2**63 - 1


# PUBLIC_INTERFACE
def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp into a timezone-aware datetime.

    Used to validate timestamps; the store keeps the original text, so
    truncating sub-microsecond digits in the returned value loses nothing.

    Raises:
        ValueError: if the text is not a valid RFC3339 timestamp.
    """
    match = _RFC3339_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")

    offset = match.group("offset")
    if offset == "Z":
        tz = timezone.utc
    else:
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"invalid UTC offset: {offset!r}")
        delta = timedelta(hours=hours, minutes=minutes)
        tz = timezone(-delta if offset[0] == "-" else delta)

    fraction = match.group("fraction") or ""
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0

    return datetime(
        int(match.group("year")),
        int(match.group("month")),
        int(match.group("day")),
        int(match.group("hour")),
        int(match.group("minute")),
        int(match.group("second")),
        microsecond,
        tzinfo=tz,
    )


# PUBLIC_INTERFACE
def parse_todo_id(value: str) -> Optional[int]:
    """
    Parse a decimal integer id (optional sign, ASCII digits).
    Return None if malformed or outside the signed 64-bit range.
    """
    if not _INTEGER_RE.fullmatch(value):
        return None
    todo_id = int(value)
    if not _ID_MIN <= todo_id <= _ID_MAX:
        return None
    return todo_id


"""
Clock-time arithmetic shared by the whole engine.

Times travel as "HH:MM" strings and are computed on as minutes since
midnight. Nothing here raises on bad input: malformed values degrade to 0 or
to an empty string so that an incomplete row stays visible instead of
crashing a recomputation.
"""

import re

MINUTES_PER_DAY = 24 * 60

_time_re = re.compile(r"^(\d{1,2})[:hH](\d{2})$", re.ASCII)
_quick_re = re.compile(r"^(\d{1,2})\s*[:hH]\s*(\d{0,2})$", re.ASCII)


def _split(value: str | None) -> tuple[int, int] | None:
    if not value:
        return None
    m = _time_re.match(value.strip())
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours, minutes


def is_valid_time(value: str | None) -> bool:
    """True for a well-formed clock time; lets callers tell "absent" from 00:00."""
    return _split(value) is not None


def time_to_minutes(value: str | None) -> int:
    """'07:30' → 450. Empty or malformed input gives 0."""
    parts = _split(value)
    if parts is None:
        return 0
    return parts[0] * 60 + parts[1]


def minutes_to_time(minutes: int) -> str:
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_to_duration(minutes: float) -> str:
    """450 → '7h30'. Zero or negative renders as '0h00'."""
    total = int(round(minutes or 0))
    if total <= 0:
        return "0h00"
    return f"{total // 60}h{total % 60:02d}"


def span_minutes(start: int, end: int) -> int:
    """
    Length of [start, end] in minutes with midnight rollover:
    an end at or before the start is taken on the next day.
    """
    if end <= start:
        end += MINUTES_PER_DAY
    return end - start


def overlap_minutes(a_start: int, a_end: int, b_start: int, b_end: int) -> int:
    return max(0, min(a_end, b_end) - max(a_start, b_start))


def clock_distance(a: int, b: int) -> int:
    """Distance between two minutes-of-day, measured around the clock."""
    d = abs(a - b) % MINUTES_PER_DAY
    return min(d, MINUTES_PER_DAY - d)


def parse_quick_time(raw: str | None) -> str:
    """
    Quick-entry parser for the time fields.

    Digit count decides the reading: "8" → 08:00, "14" → 14:00,
    "730" → 07:30, "1545" → 15:45. "7:30", "7h30" and "7h" are normalised
    too. Anything else (or an out-of-range hour/minute) gives "" so the
    field shows blank rather than a guess.
    """
    if not raw:
        return ""
    val = raw.strip()

    if val.isascii() and val.isdigit():
        if len(val) <= 2:
            hours, minutes = int(val), 0
        elif len(val) == 3:
            hours, minutes = int(val[0]), int(val[1:])
        elif len(val) == 4:
            hours, minutes = int(val[:2]), int(val[2:])
        else:
            return ""
    else:
        m = _quick_re.match(val)
        if not m:
            return ""
        hours = int(m.group(1))
        minutes = int(m.group(2)) if m.group(2) else 0
        if m.group(2) and len(m.group(2)) == 1:
            return ""

    if hours > 23 or minutes > 59:
        return ""
    return f"{hours:02d}:{minutes:02d}"

import re
from datetime import datetime, timedelta

from meeting_rooms.scheduling.errors import TimeFormatError

_TIME_RE = re.compile(r'^(\d{1,2}):(\d{2})$')

LAST_MINUTE_OF_DAY = 23 * 60 + 59
LAST_QUARTER_OF_DAY = "23:45"


def time_to_minutes(value: str) -> int:
    """Convert a wall-clock ``"HH:MM"`` string to minutes since midnight."""
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise TimeFormatError(f"Invalid time {value!r}, expected HH:MM.")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise TimeFormatError(f"Invalid time {value!r}, hour or minute out of range.")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Inverse of :func:`time_to_minutes` for a single day."""
    if not 0 <= minutes <= LAST_MINUTE_OF_DAY:
        raise TimeFormatError(f"{minutes} minutes is outside a single day.")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    """``"9:05"`` -> ``"09:05"``; raises on malformed input."""
    return minutes_to_time(time_to_minutes(value))


def add_minutes(value: str, delta: int) -> str:
    total = time_to_minutes(value) + delta
    return minutes_to_time(max(0, min(total, LAST_MINUTE_OF_DAY)))


def next_quarter_hour(now: datetime) -> str:
    """Next 15 minute boundary strictly after ``now``.

    A time already on a boundary advances a full quarter. Rolling past
    midnight clamps to 23:45 so the suggestion stays on the same day.
    """
    now = now.replace(second=0, microsecond=0)
    remainder = now.minute % 15
    candidate = now + timedelta(minutes=15 - remainder)
    if candidate.date() != now.date():
        return LAST_QUARTER_OF_DAY
    return candidate.strftime("%H:%M")

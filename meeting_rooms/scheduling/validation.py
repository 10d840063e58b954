from datetime import date, datetime, timedelta
from typing import Optional

import pytz

from meeting_rooms.scheduling.errors import PastStartError, TooShortDurationError, ValidationError
from meeting_rooms.scheduling.timeutils import time_to_minutes

MINIMUM_DURATION_MINUTES = 15


def client_now(timezone_offset: Optional[int], utc_now: Optional[datetime] = None,
               fallback_timezone: str = 'UTC') -> datetime:
    """Return the client's local wall-clock time as a naive datetime.

    ``timezone_offset`` follows the browser convention of
    ``Date.getTimezoneOffset()``: minutes to add to local time to get UTC
    (180 for UTC-3). Without an offset the organization timezone is used.
    """
    if utc_now is None:
        utc_now = datetime.now(pytz.utc)
    elif utc_now.tzinfo is None:
        utc_now = pytz.utc.localize(utc_now)

    if timezone_offset is None:
        tz = pytz.timezone(fallback_timezone)
        return utc_now.astimezone(tz).replace(tzinfo=None)

    try:
        offset = int(timezone_offset)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid timezone offset {timezone_offset!r}.")
    # Real offsets stay within UTC-12..UTC+14
    if not -14 * 60 <= offset <= 12 * 60:
        raise ValidationError(f"Timezone offset {offset} is out of range.")
    return (utc_now - timedelta(minutes=offset)).replace(tzinfo=None)


def validate_reservation_time(reservation_date: date, start_time: str, end_time: str,
                              now: datetime, minimum_minutes: int = MINIMUM_DURATION_MINUTES) -> None:
    """Check a single candidate booking against the time rules.

    Raises ``PastStartError`` when the start instant is before ``now``
    (starting exactly at ``now`` is allowed) and ``TooShortDurationError``
    when the booking is shorter than ``minimum_minutes``. Malformed times
    raise ``TimeFormatError``.
    """
    start_minutes = time_to_minutes(start_time)
    end_minutes = time_to_minutes(end_time)

    start_instant = datetime.combine(reservation_date, datetime.min.time()) + timedelta(minutes=start_minutes)
    if start_instant < now.replace(second=0, microsecond=0):
        raise PastStartError()

    if end_minutes - start_minutes < minimum_minutes:
        raise TooShortDurationError(minimum_minutes)

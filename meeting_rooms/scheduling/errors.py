"""Exceptions raised by the scheduling core.

The HTTP layer maps each family to a status code in
``meeting_rooms.api.helpers``.
"""


class SchedulingError(Exception):
    """Base class for every error the scheduling core raises."""


class ValidationError(SchedulingError, ValueError):
    """Malformed or missing input, rejected before anything is persisted."""


class TimeFormatError(ValidationError):
    pass


class RecurrenceRuleError(ValidationError):
    pass


class InvalidStatusTransition(ValidationError):
    pass


class ReservationTimeError(SchedulingError):
    """A well-formed booking that breaks a business rule on its time window."""

    outcome = 'invalid_time'


class PastStartError(ReservationTimeError):
    outcome = 'past_start'

    def __init__(self, message="Start time cannot be earlier than the current time."):
        super().__init__(message)


class TooShortDurationError(ReservationTimeError):
    outcome = 'too_short'

    def __init__(self, minimum_minutes=15):
        super().__init__(f"End time must be at least {minimum_minutes} minutes after start time.")
        self.minimum_minutes = minimum_minutes


class ReservationConflict(SchedulingError):
    outcome = 'conflict'

    def __init__(self, room_id, date, start_time, end_time, conflicting_id=None):
        super().__init__(
            f"Room {room_id} is already reserved on {date.isoformat()} "
            f"between {start_time} and {end_time}."
        )
        self.room_id = room_id
        self.date = date
        self.start_time = start_time
        self.end_time = end_time
        self.conflicting_id = conflicting_id


class ReservationNotFound(SchedulingError, LookupError):
    pass


class RoomNotFound(SchedulingError, LookupError):
    pass


class ReservationForbidden(SchedulingError):
    pass

from meeting_rooms.scheduling.availability import RoomAvailability, evaluate_room, overlaps
from meeting_rooms.scheduling.errors import (
    InvalidStatusTransition,
    PastStartError,
    RecurrenceRuleError,
    ReservationConflict,
    ReservationForbidden,
    ReservationNotFound,
    ReservationTimeError,
    RoomNotFound,
    SchedulingError,
    TimeFormatError,
    TooShortDurationError,
    ValidationError,
)
from meeting_rooms.scheduling.locks import ReservationLocks, reservation_locks
from meeting_rooms.scheduling.recurrence import RecurrenceRule, build_rrule, expand_recurrence
from meeting_rooms.scheduling.timeutils import minutes_to_time, next_quarter_hour, time_to_minutes
from meeting_rooms.scheduling.validation import client_now, validate_reservation_time

__all__ = [
    "RoomAvailability",
    "evaluate_room",
    "overlaps",
    "SchedulingError",
    "ValidationError",
    "TimeFormatError",
    "RecurrenceRuleError",
    "InvalidStatusTransition",
    "ReservationTimeError",
    "PastStartError",
    "TooShortDurationError",
    "ReservationConflict",
    "ReservationNotFound",
    "RoomNotFound",
    "ReservationForbidden",
    "ReservationLocks",
    "reservation_locks",
    "RecurrenceRule",
    "build_rrule",
    "expand_recurrence",
    "minutes_to_time",
    "next_quarter_hour",
    "time_to_minutes",
    "client_now",
    "validate_reservation_time",
]

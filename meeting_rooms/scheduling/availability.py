from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from meeting_rooms.scheduling.timeutils import minutes_to_time, time_to_minutes


@dataclass(frozen=True)
class RoomAvailability:
    room_id: int
    is_available: bool
    next_available_time: Optional[str] = None
    reserved_by_name: Optional[str] = None

    def to_dict(self):
        return {
            'roomId': self.room_id,
            'isAvailable': self.is_available,
            'nextAvailableTime': self.next_available_time,
            'reservedByName': self.reserved_by_name
        }


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap: touching endpoints do not overlap."""
    return start_a < end_b and end_a > start_b


def sort_by_start(reservations: Iterable) -> List:
    return sorted(reservations, key=lambda r: time_to_minutes(r.start_time))


def find_first_conflict(reservations: Sequence, start_time: str, end_time: str):
    """Return the earliest-starting reservation overlapping [start, end), or None.

    ``reservations`` must already be sorted by start time and hold only
    non-cancelled rows of a single room and date.
    """
    requested_start = time_to_minutes(start_time)
    requested_end = time_to_minutes(end_time)
    for reservation in reservations:
        if overlaps(requested_start, requested_end,
                    time_to_minutes(reservation.start_time), time_to_minutes(reservation.end_time)):
            return reservation
    return None


def next_available_after(conflict, reservations: Sequence) -> str:
    """Earliest minute the room frees up after ``conflict``.

    Starts at the conflict's end and walks the sorted list once, pushing the
    candidate past every reservation that still covers it, so back-to-back
    chains are skipped. Gaps before later reservations are not searched.
    """
    candidate = time_to_minutes(conflict.end_time)
    for reservation in reservations:
        res_start = time_to_minutes(reservation.start_time)
        res_end = time_to_minutes(reservation.end_time)
        if res_start <= candidate < res_end:
            candidate = res_end
    return minutes_to_time(candidate)


def evaluate_room(room_id: int, reservations: Iterable, start_time: str, end_time: str,
                  user_names: Optional[dict] = None) -> RoomAvailability:
    """Availability of one room given its reservations for the requested day."""
    ordered = sort_by_start(reservations)
    conflict = find_first_conflict(ordered, start_time, end_time)
    if conflict is None:
        return RoomAvailability(room_id=room_id, is_available=True)

    reserved_by = (user_names or {}).get(conflict.user_id)
    return RoomAvailability(
        room_id=room_id,
        is_available=False,
        next_available_time=next_available_after(conflict, ordered),
        reserved_by_name=reserved_by,
    )

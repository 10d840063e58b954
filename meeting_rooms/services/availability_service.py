from collections import defaultdict

from meeting_rooms.models import Reservation, Room, User, STATUS_CANCELLED
from meeting_rooms.scheduling.availability import evaluate_room
from meeting_rooms.scheduling.timeutils import normalize_time

class AvailabilityService:
    """Read-only availability views. Nothing here takes a lock."""

    @staticmethod
    def day_reservations(room_id, day):
        return Reservation.query.filter(
            Reservation.room_id == room_id,
            Reservation.date == day,
            Reservation.status != STATUS_CANCELLED
        ).all()

    @staticmethod
    def _user_names(user_ids):
        if not user_ids:
            return {}
        users = User.query.filter(User.id.in_(user_ids)).all()
        return {u.id: u.name for u in users}

    @staticmethod
    def check_room_availability(room_id, day, start_time, end_time):
        """Availability of one room. Unknown rooms have no reservations, so they read as free."""
        start_time, end_time = normalize_time(start_time), normalize_time(end_time)
        reservations = AvailabilityService.day_reservations(room_id, day)
        names = AvailabilityService._user_names({r.user_id for r in reservations})
        return evaluate_room(room_id, reservations, start_time, end_time, names)

    @staticmethod
    def check_all_rooms_availability(day, start_time, end_time):
        """Same answer as check_room_availability for every room, from a single day query."""
        start_time, end_time = normalize_time(start_time), normalize_time(end_time)
        rooms = Room.query.order_by(Room.id).all()
        reservations = Reservation.query.filter(
            Reservation.date == day,
            Reservation.status != STATUS_CANCELLED
        ).all()

        by_room = defaultdict(list)
        for reservation in reservations:
            by_room[reservation.room_id].append(reservation)
        names = AvailabilityService._user_names({r.user_id for r in reservations})

        return [
            evaluate_room(room.id, by_room.get(room.id, []), start_time, end_time, names)
            for room in rooms
        ]

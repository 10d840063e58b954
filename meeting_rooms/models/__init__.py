from meeting_rooms.models.user import User
from meeting_rooms.models.room import Room
from meeting_rooms.models.reservation import Reservation, STATUS_CONFIRMED, STATUS_CANCELLED

__all__ = ['User', 'Room', 'Reservation', 'STATUS_CONFIRMED', 'STATUS_CANCELLED']

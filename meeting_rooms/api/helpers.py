from flask import current_app, jsonify

from meeting_rooms.extensions import db
from meeting_rooms.scheduling.errors import (
    ReservationConflict,
    ReservationForbidden,
    ReservationNotFound,
    ReservationTimeError,
    RoomNotFound,
    SchedulingError,
)
from meeting_rooms.services.reservation_service import SchedulingContext

# Checked in order, first match wins
_STATUS_CODES = (
    (ReservationConflict, 409),
    (ReservationNotFound, 404),
    (RoomNotFound, 404),
    (ReservationForbidden, 403),
    (ReservationTimeError, 400),
    (ValueError, 400),
)


def error_response(exc):
    """Map a scheduling exception to a JSON error response."""
    for exc_type, status in _STATUS_CODES:
        if isinstance(exc, exc_type):
            body = {'message': str(exc)}
            if isinstance(exc, SchedulingError):
                body['error'] = type(exc).__name__
            if isinstance(exc, ReservationConflict):
                body['conflictingReservationId'] = exc.conflicting_id
            return jsonify(body), status

    db.session.rollback()
    current_app.logger.exception("Unhandled error in scheduling request")
    return jsonify({'message': 'Internal Server Error'}), 500


def build_context(current_user, timezone_offset=None):
    """Explicit acting-user context for the scheduling services."""
    if timezone_offset is not None and not isinstance(timezone_offset, int):
        try:
            timezone_offset = int(timezone_offset)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid clientTimezoneOffset {timezone_offset!r}.")
    return SchedulingContext(
        user_id=current_user.id,
        is_admin=current_user.role == 'admin',
        timezone_offset=timezone_offset
    )

from flask import Blueprint, request, jsonify
from meeting_rooms.api.helpers import build_context, error_response
from meeting_rooms.extensions import db
from meeting_rooms.models import Room
from meeting_rooms.scheduling.recurrence import parse_date
from meeting_rooms.scheduling.timeutils import add_minutes, next_quarter_hour
from meeting_rooms.services.availability_service import AvailabilityService
from meeting_rooms.utils.decorators import token_required

rooms_bp = Blueprint('rooms', __name__)

DEFAULT_SEARCH_MINUTES = 60

@rooms_bp.route('', methods=['GET'])
@token_required
def get_rooms(current_user):
    rooms = Room.query.filter(Room.is_active == True).order_by(Room.name).all()
    return jsonify([r.to_dict() for r in rooms])

@rooms_bp.route('/<int:room_id>', methods=['GET'])
@token_required
def get_room(current_user, room_id):
    room = db.session.get(Room, room_id)
    if not room:
        return jsonify({'message': 'Room not found'}), 404
    return jsonify(room.to_dict())

@rooms_bp.route('/availability', methods=['GET'])
@token_required
def check_availability(current_user):
    """
    Availability of every room (or of ?roomId) for a time window.
    Missing parameters default to the client's today, the next quarter
    hour, and a one hour meeting.
    """
    args = request.args
    try:
        ctx = build_context(current_user, args.get('clientTimezoneOffset'))
        now = ctx.client_now()
        day = parse_date(args['date']) if args.get('date') else now.date()
        start_time = args.get('startTime') or next_quarter_hour(now)
        end_time = args.get('endTime') or add_minutes(start_time, DEFAULT_SEARCH_MINUTES)

        if args.get('roomId'):
            result = AvailabilityService.check_room_availability(int(args['roomId']), day, start_time, end_time)
            return jsonify(result.to_dict())

        results = AvailabilityService.check_all_rooms_availability(day, start_time, end_time)
        return jsonify([r.to_dict() for r in results])
    except Exception as e:
        return error_response(e)

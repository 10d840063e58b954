from flask import Blueprint, request, jsonify
from meeting_rooms.api.helpers import build_context, error_response
from meeting_rooms.scheduling.recurrence import RecurrenceRule
from meeting_rooms.services.reservation_service import ReservationService
from meeting_rooms.utils.decorators import token_required

reservations_bp = Blueprint('reservations', __name__)

# Request body key -> service field
UPDATABLE_FIELDS = {
    'roomId': 'room_id',
    'date': 'date',
    'startTime': 'start_time',
    'endTime': 'end_time',
    'title': 'title',
    'description': 'description',
    'participantEmails': 'participant_emails',
    'status': 'status',
}

@reservations_bp.route('', methods=['GET'])
@token_required
def get_my_reservations(current_user):
    reservations = ReservationService.get_user_reservations(current_user.id)
    return jsonify([r.to_dict() for r in reservations])

@reservations_bp.route('/<int:reservation_id>', methods=['GET'])
@token_required
def get_reservation(current_user, reservation_id):
    try:
        reservation = ReservationService.get_reservation(reservation_id)
        return jsonify(reservation.to_dict())
    except Exception as e:
        return error_response(e)

@reservations_bp.route('', methods=['POST'])
@token_required
def create_reservation(current_user):
    data = request.get_json() or {}
    missing = [k for k in ('roomId', 'date', 'startTime', 'endTime') if not data.get(k)]
    if missing:
        return jsonify({'message': f"Incomplete reservation data: {', '.join(missing)}"}), 400

    try:
        ctx = build_context(current_user, data.get('clientTimezoneOffset'))
        reservation = ReservationService.create_reservation(
            ctx,
            room_id=int(data['roomId']),
            reservation_date=data['date'],
            start_time=data['startTime'],
            end_time=data['endTime'],
            title=data.get('title'),
            description=data.get('description'),
            participant_emails=data.get('participantEmails')
        )
        return jsonify(reservation.to_dict()), 201
    except Exception as e:
        return error_response(e)

@reservations_bp.route('/series', methods=['POST'])
@token_required
def create_series(current_user):
    data = request.get_json() or {}
    if not data.get('roomId') or not data.get('recurrenceRule'):
        return jsonify({'message': 'roomId and recurrenceRule are required'}), 400

    try:
        ctx = build_context(current_user, data.get('clientTimezoneOffset'))
        rule = RecurrenceRule.from_dict(data['recurrenceRule'])
        result = ReservationService.create_series(
            ctx,
            room_id=int(data['roomId']),
            rule=rule,
            title=data.get('title'),
            description=data.get('description'),
            participant_emails=data.get('participantEmails')
        )
    except Exception as e:
        return error_response(e)

    body = result.to_dict()
    body['message'] = f"{result.created_count} of {len(result.outcomes)} occurrences booked"
    # Nothing booked is reported like a single-booking conflict
    return jsonify(body), 201 if result.created_count else 409

@reservations_bp.route('/<int:reservation_id>', methods=['PUT'])
@token_required
def update_reservation(current_user, reservation_id):
    data = request.get_json() or {}
    changes = {field: data[key] for key, field in UPDATABLE_FIELDS.items() if key in data}
    try:
        ctx = build_context(current_user, data.get('clientTimezoneOffset'))
        reservation = ReservationService.update_reservation(ctx, reservation_id, changes)
        return jsonify(reservation.to_dict()), 200
    except Exception as e:
        return error_response(e)

@reservations_bp.route('/<int:reservation_id>', methods=['DELETE'])
@token_required
def cancel_reservation(current_user, reservation_id):
    try:
        reservation = ReservationService.cancel_reservation(build_context(current_user), reservation_id)
        return jsonify(reservation.to_dict()), 200
    except Exception as e:
        return error_response(e)

@reservations_bp.route('/series/<series_id>', methods=['DELETE'])
@token_required
def cancel_series(current_user, series_id):
    try:
        count = ReservationService.cancel_series(build_context(current_user), series_id)
        return jsonify({'message': f"{count} reservations cancelled", 'count': count}), 200
    except Exception as e:
        return error_response(e)

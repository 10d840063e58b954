from flask import Blueprint, request, jsonify
from meeting_rooms.api.helpers import build_context, error_response
from meeting_rooms.services.reservation_service import ReservationService
from meeting_rooms.utils.decorators import token_required, admin_required

admin_bp = Blueprint('admin', __name__)

# --- RESERVATIONS OVERSIGHT ---

@admin_bp.route('/reservations', methods=['GET'])
@token_required
@admin_required
def get_reservations(current_user):
    args = request.args
    try:
        reservations = ReservationService.list_reservations(
            room_id=int(args['roomId']) if args.get('roomId') else None,
            reservation_date=args.get('date') or None,
            sort_by=args.get('sortBy', 'date'),
            sort_order=args.get('sortOrder', 'desc')
        )
        return jsonify(reservations), 200
    except Exception as e:
        return error_response(e)

@admin_bp.route('/reservations/<int:reservation_id>/cancel', methods=['PUT'])
@token_required
@admin_required
def cancel_reservation(current_user, reservation_id):
    try:
        reservation = ReservationService.cancel_reservation(build_context(current_user), reservation_id)
        return jsonify(reservation.to_dict()), 200
    except Exception as e:
        return error_response(e)

@admin_bp.route('/reservations/<int:reservation_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_reservation(current_user, reservation_id):
    try:
        ReservationService.delete_reservation(build_context(current_user), reservation_id)
        return jsonify({'message': 'Reservation deleted'}), 200
    except Exception as e:
        return error_response(e)

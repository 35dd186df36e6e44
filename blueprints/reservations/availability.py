"""
Availability and pricing API routes.
"""

from flask import current_app, jsonify, request

from models.hotel_settings import get_hotel_settings
from models.reservation_availability import (
    EDIT_RESERVATION_EXCLUDED_STATUSES, NEW_RESERVATION_EXCLUDED_STATUSES,
    ConflictLookupError, get_available_rooms, query_conflicting_reservations
)
from models.reservation_crud import get_reservation_by_id
from models.reservation_errors import handle_api_error
from models.reservation_pricing import calculate_stay_pricing
from models.room import get_all_rooms, get_room_by_id
from utils.api_response import api_error, api_handled_error, api_success
from utils.helpers import format_currency
from utils.messages import get_message
from utils.validators import parse_id


def register_routes(bp):
    """Register availability and pricing routes on the blueprint."""

    @bp.route('/health')
    def health_check():
        """
        Health check endpoint.

        Returns:
            JSON with status and version
        """
        return jsonify({
            'status': 'ok',
            'version': current_app.config.get('APP_VERSION'),
            'app': current_app.config.get('APP_NAME')
        })

    @bp.route('/rooms/available')
    def available_rooms():
        """
        Get rooms free for a date range.

        Query params:
            check_in: YYYY-MM-DD (missing gives an empty list)
            check_out: YYYY-MM-DD (optional, open-ended when missing)
            exclude_reservation_id: Reservation being edited (optional)
        """
        check_in = request.args.get('check_in', '')
        check_out = request.args.get('check_out') or None
        exclude_id = request.args.get('exclude_reservation_id', type=int)

        current_room_id = None
        excluded_statuses = NEW_RESERVATION_EXCLUDED_STATUSES
        if exclude_id:
            editing = get_reservation_by_id(exclude_id)
            if not editing:
                return api_error(get_message('reservation_not_found'), status=404)
            current_room_id = editing['room_id']
            excluded_statuses = EDIT_RESERVATION_EXCLUDED_STATUSES

        try:
            rooms = get_available_rooms(
                check_in, check_out, get_all_rooms(), query_conflicting_reservations,
                exclude_reservation_id=exclude_id,
                current_room_id=current_room_id,
                excluded_statuses=excluded_statuses
            )
        except ConflictLookupError as e:
            return api_handled_error(handle_api_error(e, 'availability'), status=503)

        return api_success(data={'rooms': rooms, 'count': len(rooms)})

    @bp.route('/pricing/calculate', methods=['POST'])
    def calculate_pricing():
        """
        Calculate nights and total for a stay.

        Request JSON:
        {
            "room_id": 1,                 # or "nightly_rate": "150.00"
            "check_in_date": "2024-01-10",
            "check_out_date": "2024-01-13"  # optional
        }

        Response JSON:
        {
            "success": true,
            "data": {"nights": 3, "total": "450.00", "computable": true,
                     "total_display": "R$ 450,00"}
        }
        """
        data = request.get_json(silent=True) or {}

        nightly_rate = data.get('nightly_rate')
        if data.get('room_id') is not None:
            try:
                room_id = parse_id(data['room_id'], 'room_id')
            except ValueError as e:
                return api_error(str(e), status=400)
            room = get_room_by_id(room_id)
            if not room:
                return api_error(get_message('room_not_found'), status=404)
            nightly_rate = room['price_per_night']

        settings = get_hotel_settings()
        pricing = calculate_stay_pricing(
            nightly_rate,
            data.get('check_in_date'),
            data.get('check_out_date') or None,
            settings
        )

        return api_success(data={
            **pricing.to_dict(),
            'computable': pricing.computable,
            'total_display': format_currency(pricing.total, settings.currency)
        })

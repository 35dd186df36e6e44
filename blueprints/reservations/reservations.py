"""
Reservation API routes: create, detail, status changes and check-out dates.
"""

from datetime import date, datetime

from flask import current_app, request

from models.reservation_availability import ConflictLookupError
from models.reservation_crud import (
    RoomUnavailableError, change_reservation_status, create_reservation,
    get_reservation_by_id, get_status_history, set_check_out_date
)
from models.reservation_errors import (
    handle_api_error, handle_cancellation_error, handle_check_in_error,
    handle_check_out_error, handle_status_change_error
)
from models.reservation_status import (
    ReservationStatus, Severity, coerce_status, is_valid_status_transition
)
from utils.api_response import api_error, api_handled_error, api_success
from utils.audit import log_system_error
from utils.messages import get_message
from utils.validators import parse_id


def _serialize(record: dict) -> dict:
    """Convert date values to ISO strings for JSON output."""
    result = {}
    for key, value in record.items():
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        result[key] = value
    return result


def _serialize_reservation(reservation: dict) -> dict:
    data = _serialize(reservation)
    data['status_label'] = coerce_status(reservation['status']).label
    return data


# Operations with their own error category once the transition itself is allowed
OPERATION_ERROR_HANDLERS = {
    ReservationStatus.CHECKED_IN: handle_check_in_error,
    ReservationStatus.CHECKED_OUT: handle_check_out_error,
    ReservationStatus.CANCELLED: handle_cancellation_error,
}


def _handle_rejected_status(reservation: dict, target: ReservationStatus, result):
    """Pick the error payload for a rejected status change."""
    current = reservation['status']
    handler = OPERATION_ERROR_HANDLERS.get(target)
    if handler is None or not is_valid_status_transition(current, target):
        return handle_status_change_error(None, current, target, reservation['id'], result)
    return handler(None, reservation['id'], result)


def register_routes(bp):
    """Register reservation routes on the blueprint."""

    @bp.route('/reservations', methods=['POST'])
    def create():
        """
        Create a reservation.

        Request JSON:
        {
            "room_id": 1,
            "check_in_date": "2024-01-10",
            "check_out_date": "2024-01-13",   # optional
            "guest_name": "Maria Souza",
            "special_requests": "",
            "created_by": "recepcao"
        }
        """
        data = request.get_json(silent=True) or {}

        for field in ('room_id', 'check_in_date'):
            if not data.get(field):
                return api_error(get_message('field_required', field=field), status=400)

        try:
            room_id = parse_id(data['room_id'], 'room_id')
        except ValueError as e:
            return api_error(str(e), status=400)

        try:
            reservation_id, code = create_reservation(
                room_id=room_id,
                check_in_date=data['check_in_date'],
                check_out_date=data.get('check_out_date') or None,
                guest_name=data.get('guest_name', ''),
                special_requests=data.get('special_requests', ''),
                created_by=data.get('created_by')
            )
        except RoomUnavailableError as e:
            return api_error(str(e), status=409)
        except ValueError as e:
            return api_error(str(e), status=400)
        except ConflictLookupError as e:
            log_system_error(e, 'create_reservation', {'room_id': room_id})
            return api_handled_error(handle_api_error(e, 'availability'), status=503)

        reservation = get_reservation_by_id(reservation_id)
        return api_success(
            data={
                'id': reservation_id,
                'reservation_code': code,
                'total_amount': f"{reservation['total_amount']:.2f}"
            },
            message=get_message('reservation_created'),
            status=201
        )

    @bp.route('/reservations/<int:reservation_id>')
    def detail(reservation_id):
        """Get reservation details as JSON."""
        reservation = get_reservation_by_id(reservation_id)
        if not reservation:
            return api_error(get_message('reservation_not_found'), status=404)

        return api_success(data=_serialize_reservation(reservation))

    @bp.route('/reservations/<int:reservation_id>/history')
    def history(reservation_id):
        """Get reservation status change history."""
        if not get_reservation_by_id(reservation_id):
            return api_error(get_message('reservation_not_found'), status=404)

        return api_success(data={
            'history': [_serialize(h) for h in get_status_history(reservation_id)]
        })

    @bp.route('/reservations/<int:reservation_id>/status', methods=['POST'])
    def change_status(reservation_id):
        """
        Change reservation status.

        Request JSON:
        {
            "status": "checked_out",
            "reason": "",
            "changed_by": "recepcao",
            "consumptions": [{"id": 7, "status": "pending"}]   # optional, checked on check-out
        }

        Rejections answer 422 with code, title, message, suggestions and
        severity. Check-in, check-out and cancellation failures use their own
        error category; invalid transitions use the status-change category.
        """
        data = request.get_json(silent=True) or {}

        raw_status = data.get('status')
        if not raw_status:
            return api_error(get_message('field_required', field='status'), status=400)

        try:
            target = coerce_status(raw_status)
        except ValueError as e:
            return api_error(str(e), status=400)

        consumptions = data.get('consumptions') or []
        if not isinstance(consumptions, list) or not all(isinstance(c, dict) for c in consumptions):
            return api_error(get_message('invalid_field', field='consumptions'), status=400)

        reservation = get_reservation_by_id(reservation_id)
        if not reservation:
            return api_error(get_message('reservation_not_found'), status=404)

        result = change_reservation_status(
            reservation_id, target,
            changed_by=data.get('changed_by'),
            reason=data.get('reason', ''),
            consumptions=consumptions
        )

        if not result.valid:
            return api_handled_error(_handle_rejected_status(reservation, target, result), status=422)

        current_app.logger.info('Reservation %s status changed to %s', reservation_id, target.value)
        return api_success(
            data=_serialize_reservation(get_reservation_by_id(reservation_id)),
            message=get_message('status_updated', status=target.label),
            warning=result.message if result.severity is Severity.WARNING else None
        )

    @bp.route('/reservations/<int:reservation_id>/check-out-date', methods=['POST'])
    def update_check_out_date(reservation_id):
        """
        Set the check-out date of an open-ended stay and recompute the total.

        Request JSON:
        {"check_out_date": "2024-01-13"}
        """
        data = request.get_json(silent=True) or {}

        if not get_reservation_by_id(reservation_id):
            return api_error(get_message('reservation_not_found'), status=404)

        try:
            reservation = set_check_out_date(reservation_id, data.get('check_out_date'))
        except RoomUnavailableError as e:
            return api_error(str(e), status=409)
        except ValueError as e:
            return api_error(str(e), status=400)
        except ConflictLookupError as e:
            return api_handled_error(handle_api_error(e, 'availability'), status=503)

        return api_success(
            data=_serialize_reservation(reservation),
            message=get_message('check_out_date_updated')
        )

"""
Reservation CRUD operations.
Handles create, read, update and status changes for reservations.
"""

import logging
from decimal import Decimal

from database import get_db
from models.hotel_settings import get_hotel_settings
from models.reservation_availability import (
    EDIT_RESERVATION_EXCLUDED_STATUSES, NEW_RESERVATION_EXCLUDED_STATUSES,
    get_available_rooms, query_conflicting_reservations
)
from models.reservation_pricing import calculate_stay_pricing
from models.reservation_status import ReservationStatus, ValidationResult, coerce_status
from models.reservation_validation import validate_reservation_action, validate_reservation_modification
from models.room import get_room_by_id, set_room_status
from utils.audit import log_reservation_action
from utils.helpers import generate_reservation_code
from utils.messages import get_message
from utils.validators import parse_date, parse_optional_date

logger = logging.getLogger(__name__)

# Marks an argument the caller did not pass (None means open-ended check-out)
_UNCHANGED = object()

# Advisory room flag written after a status change
ROOM_STATUS_AFTER = {
    ReservationStatus.CHECKED_IN: 'occupied',
    ReservationStatus.CHECKED_OUT: 'available',
    ReservationStatus.CANCELLED: 'available',
    ReservationStatus.NO_SHOW: 'available',
}

RESERVATION_SELECT = '''
    SELECT r.*,
           rm.room_number, rm.room_type, rm.status AS room_status,
           rm.price_per_night
    FROM reservations r
    JOIN rooms rm ON r.room_id = rm.id
'''


class RoomUnavailableError(ValueError):
    """Raised when the requested room is taken for the requested dates."""


# =============================================================================
# CODE GENERATION
# =============================================================================

def _generate_unique_code(cursor, max_retries: int = 5) -> str:
    """
    Generate a reservation code not yet used.

    Raises:
        ValueError: If unable to generate unique code
    """
    for attempt in range(max_retries):
        code = generate_reservation_code()
        cursor.execute('SELECT id FROM reservations WHERE reservation_code = ?', (code,))
        if not cursor.fetchone():
            return code

    raise ValueError('Could not generate a unique reservation code')


def _parse_range(check_in_date, check_out_date):
    """Parse and check a stay range. Check-out must be after check-in."""
    if not check_in_date:
        raise ValueError(get_message('check_in_required'))

    check_in = parse_date(check_in_date)
    check_out = parse_optional_date(check_out_date)

    if check_out is not None and check_out <= check_in:
        raise ValueError(get_message('invalid_date_range'))

    return check_in, check_out


def _ensure_room_available(room: dict, check_in, check_out, reservation: dict = None) -> None:
    """
    Raise RoomUnavailableError if the room cannot take the stay.

    Editing uses the edit policy and ignores the reservation itself.
    """
    if reservation is None:
        candidates = get_available_rooms(
            check_in, check_out, [room], query_conflicting_reservations,
            excluded_statuses=NEW_RESERVATION_EXCLUDED_STATUSES
        )
    else:
        candidates = get_available_rooms(
            check_in, check_out, [room], query_conflicting_reservations,
            exclude_reservation_id=reservation['id'],
            current_room_id=reservation['room_id'],
            excluded_statuses=EDIT_RESERVATION_EXCLUDED_STATUSES
        )

    if not candidates:
        raise RoomUnavailableError(get_message('room_unavailable'))


# =============================================================================
# CREATE
# =============================================================================

def create_reservation(
    room_id: int,
    check_in_date,
    check_out_date=None,
    guest_name: str = '',
    status: str = 'confirmed',
    special_requests: str = '',
    created_by: str = None
) -> tuple:
    """
    Create a reservation with all validations.

    Availability check and insert are separate steps (see
    models.reservation_availability).

    Args:
        room_id: Room ID
        check_in_date: Check-in date (date or YYYY-MM-DD)
        check_out_date: Check-out date, or None for an open-ended stay
        guest_name: Guest name
        status: Initial status
        special_requests: Free text
        created_by: Username creating the reservation

    Returns:
        tuple: (reservation_id, reservation_code)

    Raises:
        ValueError: If validation fails
        RoomUnavailableError: If the room is taken for the dates
        ConflictLookupError: If existing reservations could not be read
    """
    check_in, check_out = _parse_range(check_in_date, check_out_date)
    status = coerce_status(status)

    room = get_room_by_id(room_id)
    if not room:
        raise ValueError(get_message('room_not_found'))

    _ensure_room_available(room, check_in, check_out)

    pricing = calculate_stay_pricing(room['price_per_night'], check_in, check_out, get_hotel_settings())

    db = get_db()
    cursor = db.cursor()

    try:
        code = _generate_unique_code(cursor)

        cursor.execute('''
            INSERT INTO reservations
            (reservation_code, room_id, guest_name, check_in_date, check_out_date,
             status, total_amount, special_requests, created_by)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            code, room_id, guest_name, check_in.isoformat(),
            check_out.isoformat() if check_out else None,
            status.value, float(pricing.total), special_requests, created_by
        ))
        reservation_id = cursor.lastrowid

        cursor.execute('''
            INSERT INTO reservation_status_history
            (reservation_id, status_type, action, changed_by, notes)
            VALUES (?, ?, 'created', ?, '')
        ''', (reservation_id, status.value, created_by))

        db.commit()

    except Exception:
        db.rollback()
        raise

    log_reservation_action('create', reservation_id, {
        'reservation_code': code,
        'room_id': room_id,
        'check_in_date': check_in.isoformat(),
        'check_out_date': check_out.isoformat() if check_out else None,
        'nights': pricing.nights,
        'total_amount': str(pricing.total),
    })

    return reservation_id, code


# =============================================================================
# READ
# =============================================================================

def get_reservation_by_id(reservation_id: int) -> dict:
    """
    Get reservation with its room columns.

    Args:
        reservation_id: Reservation ID

    Returns:
        Reservation dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(RESERVATION_SELECT + ' WHERE r.id = ?', (reservation_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_reservations(status: str = None, room_id: int = None) -> list:
    """
    Get reservations with optional filters, ordered by check-in date.

    Args:
        status: Filter by status
        room_id: Filter by room

    Returns:
        List of reservation dicts
    """
    db = get_db()
    cursor = db.cursor()

    query = RESERVATION_SELECT + ' WHERE 1=1'
    params = []

    if status:
        query += ' AND r.status = ?'
        params.append(coerce_status(status).value)

    if room_id:
        query += ' AND r.room_id = ?'
        params.append(room_id)

    query += ' ORDER BY r.check_in_date, r.id'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_status_history(reservation_id: int) -> list:
    """
    Get status history of a reservation, oldest first.

    Returns:
        List of history dicts
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT * FROM reservation_status_history
        WHERE reservation_id = ?
        ORDER BY id
    ''', (reservation_id,))
    return [dict(row) for row in cursor.fetchall()]


# =============================================================================
# UPDATE
# =============================================================================

def update_reservation(
    reservation_id: int,
    room_id: int = None,
    check_in_date=_UNCHANGED,
    check_out_date=_UNCHANGED,
    guest_name: str = None,
    special_requests: str = None,
    recalculate: bool = False
) -> dict:
    """
    Edit a reservation.

    Room and date changes are checked with the edit availability policy,
    ignoring the reservation itself. The stored total is kept unless
    recalculate is True.

    Args:
        reservation_id: Reservation ID
        room_id: New room (None keeps the current one)
        check_in_date: New check-in date
        check_out_date: New check-out date (None makes the stay open-ended)
        guest_name: New guest name
        special_requests: New special requests
        recalculate: Recompute total_amount from the new values

    Returns:
        Updated reservation dict

    Raises:
        ValueError: If the reservation cannot be modified or input is invalid
        RoomUnavailableError: If the room is taken for the new dates
    """
    reservation = get_reservation_by_id(reservation_id)
    if not reservation:
        raise ValueError(get_message('reservation_not_found'))

    modification = validate_reservation_modification(reservation)
    if not modification.valid:
        raise ValueError(modification.message)

    new_room_id = room_id or reservation['room_id']
    check_in, check_out = _parse_range(
        reservation['check_in_date'] if check_in_date is _UNCHANGED else check_in_date,
        reservation['check_out_date'] if check_out_date is _UNCHANGED else check_out_date
    )

    room = get_room_by_id(new_room_id)
    if not room:
        raise ValueError(get_message('room_not_found'))

    if (new_room_id != reservation['room_id']
            or check_in != parse_date(reservation['check_in_date'])
            or check_out != parse_optional_date(reservation['check_out_date'])):
        _ensure_room_available(room, check_in, check_out, reservation)

    total = reservation['total_amount']
    if recalculate:
        pricing = calculate_stay_pricing(room['price_per_night'], check_in, check_out, get_hotel_settings())
        total = float(pricing.total)

    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('''
            UPDATE reservations
            SET room_id = ?, check_in_date = ?, check_out_date = ?,
                guest_name = ?, special_requests = ?, total_amount = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (
            new_room_id, check_in.isoformat(),
            check_out.isoformat() if check_out else None,
            reservation['guest_name'] if guest_name is None else guest_name,
            reservation['special_requests'] if special_requests is None else special_requests,
            total, reservation_id
        ))
        db.commit()

    except Exception:
        db.rollback()
        raise

    log_reservation_action('update', reservation_id, {
        'room_id': new_room_id,
        'check_in_date': check_in.isoformat(),
        'check_out_date': check_out.isoformat() if check_out else None,
        'recalculated': recalculate,
    })

    return get_reservation_by_id(reservation_id)


def recalculate_reservation_total(reservation_id: int) -> Decimal:
    """
    Recompute and store the total of a reservation from its room rate and dates.

    Args:
        reservation_id: Reservation ID

    Returns:
        Decimal: New total

    Raises:
        ValueError: If reservation not found
    """
    reservation = get_reservation_by_id(reservation_id)
    if not reservation:
        raise ValueError(get_message('reservation_not_found'))

    pricing = calculate_stay_pricing(
        reservation['price_per_night'],
        reservation['check_in_date'],
        reservation['check_out_date'],
        get_hotel_settings()
    )

    db = get_db()
    try:
        db.execute('''
            UPDATE reservations SET total_amount = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (float(pricing.total), reservation_id))
        db.commit()
    except Exception:
        db.rollback()
        raise

    return pricing.total


def set_check_out_date(reservation_id: int, check_out_date) -> dict:
    """
    Give an open-ended stay (or any editable stay) its check-out date and
    recompute the total with the pricing calculator.

    Args:
        reservation_id: Reservation ID
        check_out_date: New check-out date

    Returns:
        Updated reservation dict

    Raises:
        ValueError: If the reservation is not editable or the date is invalid
        RoomUnavailableError: If the extended stay collides with another reservation
    """
    if not check_out_date:
        raise ValueError(get_message('check_out_required'))

    reservation = get_reservation_by_id(reservation_id)
    if not reservation:
        raise ValueError(get_message('reservation_not_found'))

    modification = validate_reservation_modification(reservation)
    if not modification.valid:
        raise ValueError(modification.message)

    check_in, check_out = _parse_range(reservation['check_in_date'], check_out_date)
    room = get_room_by_id(reservation['room_id'])
    _ensure_room_available(room, check_in, check_out, reservation)

    # Date and total are written in one statement
    pricing = calculate_stay_pricing(room['price_per_night'], check_in, check_out, get_hotel_settings())

    db = get_db()
    try:
        db.execute('''
            UPDATE reservations
            SET check_out_date = ?, total_amount = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (check_out.isoformat(), float(pricing.total), reservation_id))
        db.commit()
    except Exception:
        db.rollback()
        raise

    log_reservation_action('set_check_out_date', reservation_id, {
        'previous_check_out_date': str(reservation['check_out_date']) if reservation['check_out_date'] else None,
        'check_out_date': check_out.isoformat(),
        'total_amount': str(pricing.total),
    })

    return get_reservation_by_id(reservation_id)


# =============================================================================
# STATUS
# =============================================================================

def change_reservation_status(
    reservation_id: int,
    new_status,
    changed_by: str = None,
    reason: str = '',
    enforce: bool = True,
    consumptions=(),
    today=None
) -> ValidationResult:
    """
    Change reservation status.

    Behavior:
    1. Validates the transition and the target operation
    2. Stops on an invalid result unless enforce is False
    3. Updates status and the room's advisory flag
    4. Records in history

    Args:
        reservation_id: Reservation ID
        new_status: Target status
        changed_by: Username making change
        reason: Optional notes
        enforce: Reject invalid transitions (False writes anyway)
        consumptions: Consumptions of the reservation (for check-out)
        today: Reference date for date-based checks

    Returns:
        ValidationResult: the validation outcome; valid results may carry a warning

    Raises:
        ValueError: If reservation not found or status unknown
    """
    reservation = get_reservation_by_id(reservation_id)
    if not reservation:
        raise ValueError(get_message('reservation_not_found'))

    current = coerce_status(reservation['status'])
    target = coerce_status(new_status)

    result = validate_reservation_action(current, target, reservation, consumptions, today)

    if enforce and not result.valid:
        log_reservation_action('status_change', reservation_id, {
            'previous_status': current.value,
            'new_status': target.value,
        }, success=False, error_details=result.message)
        return result

    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('''
            UPDATE reservations
            SET status = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (target.value, reservation_id))

        room_status = ROOM_STATUS_AFTER.get(target)
        if room_status:
            set_room_status(reservation['room_id'], room_status, cursor)

        cursor.execute('''
            INSERT INTO reservation_status_history
            (reservation_id, status_type, action, changed_by, notes)
            VALUES (?, ?, 'changed', ?, ?)
        ''', (reservation_id, target.value, changed_by, reason))

        db.commit()

    except Exception:
        db.rollback()
        raise

    if not result.valid:
        logger.warning('Reservation %s forced from %s to %s: %s',
                       reservation_id, current.value, target.value, result.message)

    log_reservation_action('status_change', reservation_id, {
        'previous_status': current.value,
        'new_status': target.value,
        'room_id': reservation['room_id'],
        'forced': not result.valid,
        'warning': result.message or None,
    })

    return result

"""
Room availability checking.
Filters a room catalog against reservations that overlap a date range.

The conflict lookup is delegated to a conflict source: any callable
``(check_in_date, check_out_date, excluded_statuses, exclude_reservation_id)``
returning records with ``room_id``, ``check_in_date``, ``check_out_date`` and
optionally ``id`` and ``status``. ``query_conflicting_reservations`` is the
SQLite-backed source.

Availability check and reservation insert are separate steps: two concurrent
creators can both see a room as free and both insert. A storage-level
exclusion constraint on (room_id, date range) would close that gap.
"""

import logging
from enum import Enum

from database import get_db
from models.reservation_status import ReservationStatus
from utils.validators import parse_date, parse_optional_date

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# The create and edit flows exclude different statuses from conflict checks
NEW_RESERVATION_EXCLUDED_STATUSES = (
    ReservationStatus.CANCELLED,
    ReservationStatus.CHECKED_OUT,
)
EDIT_RESERVATION_EXCLUDED_STATUSES = (
    ReservationStatus.CANCELLED,
)


class ConflictLookupError(Exception):
    """Raised when existing reservations could not be retrieved."""


def _status_value(status):
    return status.value if isinstance(status, Enum) else status


def _field(record, name):
    """Read a field from a dict, sqlite3.Row or plain object."""
    if isinstance(record, dict):
        return record.get(name)
    try:
        return record[name]
    except (KeyError, IndexError, TypeError):
        return getattr(record, name, None)


# =============================================================================
# CONFLICT PREDICATE
# =============================================================================

def reservation_conflicts(existing_check_in, existing_check_out, target_check_in, target_check_out=None) -> bool:
    """
    Check whether an existing reservation overlaps a target stay.

    An existing reservation without check-out occupies the room indefinitely.

    Args:
        existing_check_in: Existing reservation check-in date
        existing_check_out: Existing reservation check-out date or None
        target_check_in: Requested check-in date
        target_check_out: Requested check-out date or None (open-ended)

    Returns:
        True if the reservations conflict
    """
    if target_check_out is not None:
        # Inclusive bounds on both ends
        return (
            existing_check_in <= target_check_out
            and (existing_check_out is None or existing_check_out >= target_check_in)
        )

    if existing_check_in == target_check_in:
        return True
    return (
        existing_check_in <= target_check_in
        and (existing_check_out is None or existing_check_out > target_check_in)
    )


def find_conflicting_room_ids(
    check_in_date,
    check_out_date,
    conflict_source,
    excluded_statuses=NEW_RESERVATION_EXCLUDED_STATUSES,
    exclude_reservation_id=None
) -> set:
    """
    Get ids of rooms with a reservation that conflicts with the range.

    The status and self-exclusion policy is re-applied to whatever the source
    returns, so a source that over-fetches cannot leak released reservations.

    Args:
        check_in_date: Requested check-in date
        check_out_date: Requested check-out date or None
        conflict_source: Callable returning candidate reservations
        excluded_statuses: Statuses that never block a room
        exclude_reservation_id: Reservation being edited

    Returns:
        set: Conflicting room ids

    Raises:
        ConflictLookupError: If the source fails or returns unreadable records
    """
    check_in = parse_date(check_in_date)
    check_out = parse_optional_date(check_out_date)
    excluded = {_status_value(s) for s in excluded_statuses}

    try:
        records = conflict_source(check_in, check_out, tuple(excluded_statuses), exclude_reservation_id)
    except Exception as e:
        logger.error('Conflict lookup failed for %s..%s: %s', check_in, check_out, e)
        raise ConflictLookupError(str(e)) from e

    conflicting = set()
    for record in records or []:
        if _status_value(_field(record, 'status')) in excluded:
            continue
        record_id = _field(record, 'id')
        if (exclude_reservation_id is not None and record_id is not None
                and str(record_id) == str(exclude_reservation_id)):
            continue

        try:
            existing_in = parse_date(_field(record, 'check_in_date'))
            existing_out = parse_optional_date(_field(record, 'check_out_date'))
        except ValueError as e:
            raise ConflictLookupError(f'Invalid reservation record {record_id}: {e}') from e

        if reservation_conflicts(existing_in, existing_out, check_in, check_out):
            conflicting.add(_field(record, 'room_id'))

    return conflicting


# =============================================================================
# AVAILABLE ROOMS
# =============================================================================

def get_available_rooms(
    check_in_date,
    check_out_date,
    rooms,
    conflict_source,
    exclude_reservation_id=None,
    current_room_id=None,
    excluded_statuses=NEW_RESERVATION_EXCLUDED_STATUSES
) -> list:
    """
    Get rooms that can be booked for a date range.

    A room qualifies when its base status is 'available' (or it is the room
    currently assigned to the reservation being edited) and no conflicting
    reservation holds it.

    Args:
        check_in_date: Requested check-in date (date or YYYY-MM-DD)
        check_out_date: Requested check-out date or None for open-ended
        rooms: Room catalog (dicts or rows with 'id' and 'status')
        conflict_source: Callable returning candidate reservations
        exclude_reservation_id: Reservation being edited, ignored as a conflict
        current_room_id: Room of the reservation being edited
        excluded_statuses: Statuses that never block a room

    Returns:
        list: Candidate rooms, empty when check-in is missing or invalid

    Raises:
        ConflictLookupError: If existing reservations could not be retrieved
    """
    try:
        check_in = parse_date(check_in_date)
        check_out = parse_optional_date(check_out_date)
    except ValueError:
        return []

    conflicting = find_conflicting_room_ids(
        check_in, check_out, conflict_source,
        excluded_statuses=excluded_statuses,
        exclude_reservation_id=exclude_reservation_id
    )

    available = []
    for room in rooms:
        room_id = _field(room, 'id')
        is_current = current_room_id is not None and room_id == current_room_id
        if _field(room, 'status') != 'available' and not is_current:
            continue
        if room_id in conflicting:
            continue
        available.append(room)

    return available


# =============================================================================
# SQLITE CONFLICT SOURCE
# =============================================================================

def query_conflicting_reservations(
    check_in_date,
    check_out_date=None,
    excluded_statuses=NEW_RESERVATION_EXCLUDED_STATUSES,
    exclude_reservation_id=None
) -> list:
    """
    Fetch reservations that overlap a date range from the database.

    Args:
        check_in_date: Requested check-in date
        check_out_date: Requested check-out date or None
        excluded_statuses: Statuses to leave out
        exclude_reservation_id: Reservation id to leave out

    Returns:
        list: Dicts with id, room_id, check_in_date, check_out_date, status
    """
    check_in = parse_date(check_in_date).isoformat()
    check_out = parse_optional_date(check_out_date)

    db = get_db()
    cursor = db.cursor()

    query = '''
        SELECT id, room_id, check_in_date, check_out_date, status
        FROM reservations
    '''

    if check_out is not None:
        query += ' WHERE check_in_date <= ? AND (check_out_date IS NULL OR check_out_date >= ?)'
        params = [check_out.isoformat(), check_in]
    else:
        query += '''
            WHERE (check_in_date = ?
                   OR (check_in_date <= ? AND (check_out_date IS NULL OR check_out_date > ?)))
        '''
        params = [check_in, check_in, check_in]

    statuses = [_status_value(s) for s in excluded_statuses]
    if statuses:
        placeholders = ','.join('?' * len(statuses))
        query += f' AND status NOT IN ({placeholders})'
        params.extend(statuses)

    # Exclude specific reservation (for updates)
    if exclude_reservation_id:
        query += ' AND id != ?'
        params.append(exclude_reservation_id)

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]

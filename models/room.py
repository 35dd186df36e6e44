"""
Room model and data access functions.
"""

from database import get_db


ROOM_STATUSES = ('available', 'occupied', 'maintenance', 'reserved')


def get_all_rooms(status: str = None) -> list:
    """
    Get rooms ordered by number.

    Args:
        status: Optional status filter

    Returns:
        List of room dicts
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM rooms'
    params = []

    if status:
        query += ' WHERE status = ?'
        params.append(status)

    query += ' ORDER BY room_number'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def get_room_by_id(room_id: int) -> dict:
    """
    Get room by ID.

    Args:
        room_id: Room ID

    Returns:
        Room dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM rooms WHERE id = ?', (room_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def set_room_status(room_id: int, status: str, cursor=None) -> None:
    """
    Update the advisory status flag of a room.

    Args:
        room_id: Room ID
        status: New status
        cursor: Active transaction cursor; the caller commits

    Raises:
        ValueError: If status is unknown
    """
    if status not in ROOM_STATUSES:
        raise ValueError(f'Invalid room status: {status}')

    cur = cursor or get_db().cursor()
    cur.execute('''
        UPDATE rooms SET status = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (status, room_id))

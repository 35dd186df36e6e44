"""
Database seed data.
Initial data population for fresh database installations.
"""

from decimal import Decimal, InvalidOperation

from flask import current_app


def seed_database(db):
    """Insert initial seed data."""

    # 1. Hotel settings singleton, taken from configuration defaults
    db.execute('''
        INSERT INTO hotel_settings (id, name, check_in_time, check_out_time, currency, timezone)
        VALUES (1, ?, ?, ?, ?, ?)
    ''', (
        current_app.config.get('APP_NAME', 'Hotel'),
        current_app.config.get('DEFAULT_CHECK_IN_TIME', '14:00'),
        current_app.config.get('DEFAULT_CHECK_OUT_TIME', '12:00'),
        current_app.config.get('CURRENCY', 'BRL'),
        current_app.config.get('TIMEZONE', 'America/Sao_Paulo'),
    ))

    # 2. A few rooms so a fresh install is usable
    rooms_data = [
        ('101', 'standard', 150.00),
        ('102', 'standard', 150.00),
        ('201', 'deluxe', 250.00),
        ('301', 'suite', 400.00),
    ]

    for room_number, room_type, price in rooms_data:
        db.execute('''
            INSERT INTO rooms (room_number, room_type, price_per_night, status)
            VALUES (?, ?, ?, 'available')
        ''', (room_number, room_type, price))


def seed_demo_rooms(count: int, price: str) -> int:
    """
    Insert demo rooms numbered after the highest existing room.

    Args:
        count: Number of rooms to create
        price: Nightly rate as a decimal string

    Returns:
        Number of rooms created

    Raises:
        ValueError: If count or price is invalid
    """
    from database.connection import get_db

    if count <= 0:
        raise ValueError('count must be positive')
    try:
        rate = Decimal(str(price))
    except InvalidOperation:
        raise ValueError(f'invalid price: {price}')
    if rate < 0:
        raise ValueError('price must not be negative')

    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('SELECT MAX(CAST(room_number AS INTEGER)) AS max_number FROM rooms')
        row = cursor.fetchone()
        next_number = max((row['max_number'] or 0) + 1, 900)

        for offset in range(count):
            cursor.execute('''
                INSERT INTO rooms (room_number, room_type, price_per_night, status)
                VALUES (?, 'standard', ?, 'available')
            ''', (str(next_number + offset), float(rate)))

        db.commit()
        return count

    except Exception:
        db.rollback()
        raise

"""
Hotel settings model.
Loads the singleton hotel_settings row into an immutable HotelSettings value.
"""

from flask import current_app

from database import get_db
from models.reservation_pricing import HotelSettings
from utils.validators import parse_time


def get_hotel_settings() -> HotelSettings:
    """
    Get hotel settings, falling back to configuration defaults when the
    settings row does not exist.

    Returns:
        HotelSettings

    Raises:
        ValueError: If a stored check-in/check-out time is invalid
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM hotel_settings WHERE id = 1')
    row = cursor.fetchone()

    if not row:
        return HotelSettings.from_strings(
            current_app.config.get('DEFAULT_CHECK_IN_TIME', '14:00'),
            current_app.config.get('DEFAULT_CHECK_OUT_TIME', '12:00'),
            name=current_app.config.get('APP_NAME', 'Hotel'),
            currency=current_app.config.get('CURRENCY', 'BRL'),
            timezone=current_app.config.get('TIMEZONE', 'America/Sao_Paulo'),
        )

    return HotelSettings.from_strings(
        row['check_in_time'],
        row['check_out_time'],
        name=row['name'],
        currency=row['currency'],
        timezone=row['timezone'],
    )


def update_hotel_settings(
    check_in_time: str = None,
    check_out_time: str = None,
    name: str = None,
    currency: str = None
) -> HotelSettings:
    """
    Update hotel settings, creating the row if needed.

    Args:
        check_in_time: HH:MM
        check_out_time: HH:MM
        name: Hotel name
        currency: Currency code

    Returns:
        Updated HotelSettings

    Raises:
        ValueError: If a time is invalid
    """
    current = get_hotel_settings()

    new_check_in = parse_time(check_in_time) if check_in_time else current.check_in_time
    new_check_out = parse_time(check_out_time) if check_out_time else current.check_out_time

    db = get_db()
    cursor = db.cursor()

    try:
        cursor.execute('''
            INSERT INTO hotel_settings (id, name, check_in_time, check_out_time, currency, timezone)
            VALUES (1, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                check_in_time = excluded.check_in_time,
                check_out_time = excluded.check_out_time,
                currency = excluded.currency,
                updated_at = CURRENT_TIMESTAMP
        ''', (
            name or current.name,
            new_check_in.strftime('%H:%M'),
            new_check_out.strftime('%H:%M'),
            currency or current.currency,
            current.timezone,
        ))
        db.commit()

    except Exception:
        db.rollback()
        raise

    return get_hotel_settings()

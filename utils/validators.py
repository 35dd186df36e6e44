"""
Input validation helper functions.
Parses dates, times and amounts coming from forms, JSON bodies and the database.
"""

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from utils.messages import get_message


def parse_date(value) -> date:
    """
    Parse a calendar date.

    Args:
        value: date, datetime or ISO string (YYYY-MM-DD)

    Returns:
        date

    Raises:
        ValueError: If the value is missing or not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValueError(get_message('invalid_date', value=value))
    try:
        return datetime.strptime(value.strip()[:10], '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(get_message('invalid_date', value=value)) from None


def parse_optional_date(value):
    """Parse a date, treating None and empty strings as absent."""
    if value is None or value == '':
        return None
    return parse_date(value)


def parse_time(value) -> time:
    """
    Parse a time of day.

    Accepts HH:MM and HH:MM:SS (as returned by TIME columns).

    Raises:
        ValueError: If the value is not a valid time
    """
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        for fmt in ('%H:%M', '%H:%M:%S'):
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
    raise ValueError(get_message('invalid_time', value=value))


def parse_amount(value) -> Decimal:
    """
    Parse a non-negative monetary amount.

    Args:
        value: int, float, Decimal or numeric string

    Returns:
        Decimal

    Raises:
        ValueError: If the value is missing, non-numeric, non-finite or negative
    """
    if value is None or isinstance(value, bool):
        raise ValueError(get_message('invalid_amount', value=value))
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(get_message('invalid_amount', value=value)) from None
    if not amount.is_finite() or amount < 0:
        raise ValueError(get_message('invalid_amount', value=value))
    return amount


def parse_id(value, field: str = 'id') -> int:
    """
    Parse a positive record ID from an int or a digit string.

    Raises:
        ValueError: If the value is a bool, list, object or not a positive integer
    """
    if isinstance(value, bool):
        raise ValueError(get_message('invalid_field', field=field))
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if not isinstance(value, int) or value < 1:
        raise ValueError(get_message('invalid_field', field=field))
    return value


def validate_date_range(check_in_date, check_out_date) -> bool:
    """
    Validate that check-out is strictly after check-in.

    An absent check-out (open-ended stay) is always valid.

    Args:
        check_in_date: Check-in date (date or YYYY-MM-DD)
        check_out_date: Check-out date or None

    Returns:
        True if the range is valid
    """
    try:
        check_in = parse_date(check_in_date)
        check_out = parse_optional_date(check_out_date)
    except ValueError:
        return False

    return check_out is None or check_out > check_in

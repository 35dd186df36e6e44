"""
Miscellaneous utility helper functions.
Provides common functionality used across the application.
"""

import random
import string
from decimal import Decimal


def generate_reservation_code(length: int = 8) -> str:
    """
    Generate a random reservation code.

    Args:
        length: Number of characters

    Returns:
        Uppercase alphanumeric code, e.g. 'K7Q2M9XA'
    """
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


def format_currency(amount, currency: str = 'BRL') -> str:
    """
    Format an amount for display.

    Args:
        amount: Decimal, float or numeric string
        currency: Currency code

    Returns:
        Formatted string, e.g. 'R$ 1.234,50' for BRL
    """
    value = Decimal(str(amount or 0)).quantize(Decimal('0.01'))
    formatted = f'{value:,.2f}'

    if currency == 'BRL':
        # Brazilian separators: 1.234,50
        formatted = formatted.replace(',', 'X').replace('.', ',').replace('X', '.')
        return f'R$ {formatted}'

    return f'{currency} {formatted}'

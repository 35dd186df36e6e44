"""
Stay pricing calculation.
Derives night count and total from a nightly rate, a date range and the hotel's
check-in/check-out times.
"""

import math
from dataclasses import dataclass
from datetime import datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from utils.validators import parse_date, parse_optional_date, parse_time


SECONDS_PER_DAY = 86400
TWO_PLACES = Decimal('0.01')


# =============================================================================
# VALUE OBJECTS
# =============================================================================

@dataclass(frozen=True)
class HotelSettings:
    """Hotel-wide settings consumed by pricing. Always passed explicitly."""
    check_in_time: time = time(14, 0)
    check_out_time: time = time(12, 0)
    name: str = 'Hotel'
    currency: str = 'BRL'
    timezone: str = 'America/Sao_Paulo'

    @classmethod
    def from_strings(
        cls,
        check_in_time: str = '14:00',
        check_out_time: str = '12:00',
        **kwargs
    ) -> 'HotelSettings':
        """
        Build settings from HH:MM strings.

        Raises:
            ValueError: If either time string is invalid
        """
        return cls(
            check_in_time=parse_time(check_in_time),
            check_out_time=parse_time(check_out_time),
            **kwargs
        )

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'check_in_time': self.check_in_time.strftime('%H:%M'),
            'check_out_time': self.check_out_time.strftime('%H:%M'),
            'currency': self.currency,
            'timezone': self.timezone,
        }


DEFAULT_HOTEL_SETTINGS = HotelSettings()


@dataclass(frozen=True)
class StayPricing:
    """Night count and total for a stay. nights == 0 means not computable."""
    nights: int
    total: Decimal

    @property
    def computable(self) -> bool:
        return self.nights > 0

    def to_dict(self) -> dict:
        return {'nights': self.nights, 'total': str(self.total)}


NOT_COMPUTABLE = StayPricing(0, Decimal('0.00'))


# =============================================================================
# CALCULATION
# =============================================================================

def _to_rate(nightly_rate):
    """Convert a nightly rate to Decimal, or None if it is unusable."""
    if nightly_rate is None or isinstance(nightly_rate, bool):
        return None
    try:
        rate = Decimal(str(nightly_rate))
    except InvalidOperation:
        return None
    if not rate.is_finite() or rate < 0:
        return None
    return rate


def count_nights(check_in_date, check_out_date, settings: HotelSettings = DEFAULT_HOTEL_SETTINGS) -> int:
    """
    Count billable nights between two dates.

    The stay starts at check-in date + hotel check-in time and ends at
    check-out date + hotel check-out time. Partial days round up and the
    result is never below 1.

    Args:
        check_in_date: Check-in date
        check_out_date: Check-out date
        settings: Hotel settings providing the check-in/check-out times

    Returns:
        int: Number of nights (>= 1)
    """
    start = datetime.combine(check_in_date, settings.check_in_time)
    end = datetime.combine(check_out_date, settings.check_out_time)
    elapsed = (end - start).total_seconds()
    return max(1, math.ceil(elapsed / SECONDS_PER_DAY))


def calculate_stay_pricing(
    nightly_rate,
    check_in_date,
    check_out_date=None,
    settings: HotelSettings = DEFAULT_HOTEL_SETTINGS
) -> StayPricing:
    """
    Calculate nights and total for a stay.

    Called speculatively while a form is being filled, so missing or invalid
    input yields StayPricing(0, 0.00) instead of raising.

    Args:
        nightly_rate: Room nightly rate (non-negative)
        check_in_date: Check-in date (date or YYYY-MM-DD)
        check_out_date: Check-out date, or None for an open-ended stay
        settings: Hotel settings

    Returns:
        StayPricing: nights and total rounded to 2 decimal places
    """
    rate = _to_rate(nightly_rate)
    if rate is None:
        return NOT_COMPUTABLE

    try:
        check_in = parse_date(check_in_date)
        check_out = parse_optional_date(check_out_date)
    except ValueError:
        return NOT_COMPUTABLE

    # Open-ended stay is billed one starter night
    if check_out is None:
        nights = 1
    else:
        nights = count_nights(check_in, check_out, settings)

    try:
        total = (rate * nights).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Rate too large for two-place precision
        return NOT_COMPUTABLE
    return StayPricing(nights, total)

"""Timezone-aware date/time helpers for the hotel back-office."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """Get the configured hotel timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'America/Sao_Paulo')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the hotel timezone."""
    return datetime.now(get_timezone()).date()


def get_now() -> datetime:
    """Get current datetime in the hotel timezone."""
    return datetime.now(get_timezone())


def format_date_br(value: date) -> str:
    """Format a date as DD/MM/YYYY."""
    return value.strftime('%d/%m/%Y')

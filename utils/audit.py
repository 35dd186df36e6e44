"""
Audit logging utility functions.
Writes structured records to the system_logs table without ever failing the
operation being audited.
"""

import logging
from collections import deque
from enum import Enum

from utils.datetime_helpers import get_now

# Configure logger for audit operations
logger = logging.getLogger(__name__)

FALLBACK_BUFFER_SIZE = 500

# Records that could not reach the database sink
_fallback_records = deque(maxlen=FALLBACK_BUFFER_SIZE)
_sink_failure_reported = False


class LogLevel(str, Enum):
    DEBUG = 'debug'
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'
    CRITICAL = 'critical'


class LogCategory(str, Enum):
    RESERVATION = 'reservation'
    PAYMENT = 'payment'
    USER = 'user'
    SYSTEM = 'system'
    CONSUMPTION = 'consumption'
    ROOM = 'room'
    GUEST = 'guest'


_PYTHON_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL,
}


def _value(item):
    return item.value if isinstance(item, Enum) else item


def log_event(
    level,
    category,
    message: str,
    details: dict = None,
    entity_type: str = None,
    entity_id=None,
    tags: list = None,
    source: str = 'web'
) -> int:
    """
    Log an audit event to the system_logs table.

    When the sink is unreachable (no app context, database error) the record
    is kept in a bounded local buffer and sent to the Python logger instead.

    Args:
        level: LogLevel or its string value
        category: LogCategory or its string value
        message: Short description
        details: Extra structured data
        entity_type: Related entity type (reservation, payment, ...)
        entity_id: Related entity ID
        tags: List of tags
        source: Origin of the record

    Returns:
        New system log ID, or None if the sink was unavailable
    """
    global _sink_failure_reported

    level = _value(level)
    category = _value(category)

    try:
        from models.system_log import create_system_log

        return create_system_log(
            level=level,
            category=category,
            message=message,
            details=details,
            entity_type=entity_type,
            entity_id=entity_id,
            source=source,
            tags=tags
        )

    except Exception as e:
        # Audit logging should never fail the main operation
        _record_fallback(level, category, message, details, entity_type, entity_id, tags, source)

        if not _sink_failure_reported:
            _sink_failure_reported = True
            logger.error(f"Audit sink unavailable, using local fallback: {e}", exc_info=True)
        else:
            logger.debug(f"Audit sink unavailable: {e}")
        return None


def _record_fallback(level, category, message, details, entity_type, entity_id, tags, source):
    try:
        timestamp = get_now().isoformat()
    except (RuntimeError, KeyError):
        # Outside application context, or unknown timezone setting
        timestamp = None

    _fallback_records.append({
        'level': level,
        'category': category,
        'message': message,
        'details': details or {},
        'entity_type': entity_type,
        'entity_id': str(entity_id) if entity_id is not None else None,
        'tags': list(tags or []),
        'source': source,
        'created_at': timestamp,
    })
    logger.log(_PYTHON_LEVELS.get(level, logging.INFO), '%s: %s %s', str(level).upper(), message, details or '')


def get_fallback_records() -> list:
    """Get a copy of the records held by the local fallback buffer."""
    return list(_fallback_records)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def log_reservation_action(
    action: str,
    reservation_id,
    details: dict = None,
    success: bool = True,
    error_details=None
) -> int:
    """
    Log the outcome of a reservation action (create, check_in, status_change...).

    Returns:
        System log ID or None
    """
    payload = {'action': action, 'success': success, **(details or {})}
    if error_details:
        payload['error'] = error_details

    return log_event(
        level=LogLevel.INFO if success else LogLevel.ERROR,
        category=LogCategory.RESERVATION,
        message=(f"Reservation action '{action}' completed successfully" if success
                 else f"Reservation action '{action}' failed"),
        details=payload,
        entity_type='reservation',
        entity_id=reservation_id,
        tags=[action, 'success' if success else 'failure']
    )


def log_validation_error(context: str, details: dict, entity_type: str = None, entity_id=None) -> int:
    """Log a failed validation (status transition, check-in, payment...)."""
    return log_event(
        level=LogLevel.WARNING,
        category=LogCategory.SYSTEM,
        message=f'Validation error in {context}',
        details=details,
        entity_type=entity_type,
        entity_id=entity_id,
        tags=['validation', 'error', context]
    )


def log_system_error(error, context: str, details: dict = None) -> int:
    """Log an unexpected error raised while serving a request."""
    error_message = str(error)
    payload = {'error': error_message, 'context': context, **(details or {})}
    if isinstance(error, BaseException):
        payload['error_type'] = type(error).__name__

    return log_event(
        level=LogLevel.ERROR,
        category=LogCategory.SYSTEM,
        message=f'System error in {context}: {error_message}',
        details=payload,
        tags=['system', 'error', context]
    )


# Export public API
__all__ = [
    'LogLevel',
    'LogCategory',
    'log_event',
    'get_fallback_records',
    'log_reservation_action',
    'log_validation_error',
    'log_system_error',
]

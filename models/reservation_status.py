"""
Reservation status model.
Closed status set, allowed transitions, display labels and transition checks.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional, Tuple

from utils.messages import get_message


# =============================================================================
# STATUS TYPES
# =============================================================================

class ReservationStatus(str, Enum):
    """Lifecycle status of a reservation."""
    CONFIRMED = 'confirmed'
    CHECKED_IN = 'checked_in'
    CHECKED_OUT = 'checked_out'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no_show'

    @property
    def label(self) -> str:
        """Localized display label."""
        return get_message(f'status_{self.value}')


class Severity(str, Enum):
    """Severity attached to validation results and handled errors."""
    ERROR = 'error'
    WARNING = 'warning'
    INFO = 'info'
    SUCCESS = 'success'


TERMINAL_STATUSES = frozenset({
    ReservationStatus.CHECKED_OUT,
    ReservationStatus.CANCELLED,
    ReservationStatus.NO_SHOW,
})

ALLOWED_TRANSITIONS = MappingProxyType({
    ReservationStatus.CONFIRMED: frozenset({
        ReservationStatus.CHECKED_IN,
        ReservationStatus.CANCELLED,
        ReservationStatus.NO_SHOW,
    }),
    # checked_in -> no_show is rejected while checked_in -> cancelled is accepted
    ReservationStatus.CHECKED_IN: frozenset({
        ReservationStatus.CHECKED_OUT,
        ReservationStatus.CANCELLED,
    }),
    ReservationStatus.CHECKED_OUT: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
})

TRANSITION_SUGGESTIONS = (
    'Verifique o status atual da reserva',
    'Siga o fluxo correto de transições de status',
)


# =============================================================================
# VALIDATION RESULT
# =============================================================================

@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation: invalid outcomes are data, not exceptions."""
    valid: bool
    message: str = ''
    severity: Optional[Severity] = None
    suggestions: Tuple[str, ...] = ()

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def error(cls, message: str, suggestions=()) -> 'ValidationResult':
        return cls(False, message, Severity.ERROR, tuple(suggestions))

    @classmethod
    def warning(cls, message: str, suggestions=()) -> 'ValidationResult':
        return cls(True, message, Severity.WARNING, tuple(suggestions))

    def to_dict(self) -> dict:
        return {
            'valid': self.valid,
            'message': self.message,
            'severity': self.severity.value if self.severity else None,
            'suggestions': list(self.suggestions),
        }


# =============================================================================
# TRANSITIONS
# =============================================================================

def coerce_status(value) -> ReservationStatus:
    """
    Convert a raw status value into a ReservationStatus.

    Args:
        value: ReservationStatus member or its string value

    Returns:
        ReservationStatus

    Raises:
        ValueError: If the value is not a known status
    """
    if isinstance(value, ReservationStatus):
        return value
    try:
        return ReservationStatus(value)
    except ValueError:
        raise ValueError(get_message('invalid_status', value=value)) from None


def get_status_label(status) -> str:
    """Get the localized label for a status value."""
    return coerce_status(status).label


def is_valid_status_transition(current, target) -> bool:
    """
    Check a transition against the allowed transitions table.

    Args:
        current: Current status
        target: Target status

    Returns:
        True if the transition is allowed
    """
    return coerce_status(target) in ALLOWED_TRANSITIONS[coerce_status(current)]


def get_transition_error_message(current, target) -> str:
    """
    Get a localized explanation for an invalid transition.

    The message always names both status labels. Returns an empty string
    when the transition is valid.
    """
    current = coerce_status(current)
    target = coerce_status(target)

    if is_valid_status_transition(current, target):
        return ''

    key = 'transition_invalid'
    if current is ReservationStatus.CONFIRMED and target is ReservationStatus.CHECKED_OUT:
        key = 'transition_check_in_first'
    elif current is ReservationStatus.CHECKED_IN and target is ReservationStatus.CONFIRMED:
        key = 'transition_back_to_confirmed'
    elif current is ReservationStatus.CHECKED_IN and target is ReservationStatus.NO_SHOW:
        key = 'transition_no_show_after_check_in'
    elif current is ReservationStatus.CHECKED_OUT:
        key = 'transition_from_checked_out'
    elif current is ReservationStatus.CANCELLED:
        key = 'transition_from_cancelled'
    elif current is ReservationStatus.NO_SHOW:
        key = 'transition_from_no_show'

    return get_message(key, current=current.label, target=target.label)


def validate_status_transition(current, target) -> ValidationResult:
    """
    Validate a status transition.

    Args:
        current: Current status
        target: Target status

    Returns:
        ValidationResult: valid with no message, or invalid with a message
        naming both statuses and ordered suggestions
    """
    if is_valid_status_transition(current, target):
        return ValidationResult.ok()

    return ValidationResult.error(
        get_transition_error_message(current, target),
        TRANSITION_SUGGESTIONS,
    )

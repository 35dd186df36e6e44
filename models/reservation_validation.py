"""
Reservation operation validators.
Business checks run before check-in, check-out, cancellation, no-show,
modification and payment. Every validator returns a ValidationResult and
records failed validations in the audit log.

Reservations are dicts as returned by models.reservation_crud (flat
room_number/room_status columns); consumptions are dicts with id, status
and total_amount.
"""

from decimal import Decimal, InvalidOperation

from models.reservation_status import (
    ReservationStatus, Severity, TERMINAL_STATUSES, TRANSITION_SUGGESTIONS,
    ValidationResult, coerce_status, get_transition_error_message,
    is_valid_status_transition
)
from utils.audit import log_validation_error
from utils.datetime_helpers import format_date_br, get_today
from utils.validators import parse_date, parse_optional_date


# =============================================================================
# CONSTANTS
# =============================================================================

MAX_EARLY_CHECK_IN_DAYS = 7
MAX_LATE_CHECK_IN_DAYS = 3
CHECK_IN_WARNING_DAYS = 1
NO_SHOW_WARNING_DAYS = 7

BLOCKING_ROOM_STATUSES = {
    'occupied': (
        'O quarto {room} está ocupado. Não é possível realizar check-in.',
        ('Verifique se há outra reserva ativa para este quarto',
         'Atualize o status do quarto manualmente se necessário'),
    ),
    'out_of_service': (
        'O quarto {room} está fora de serviço. Não é possível realizar check-in.',
        ('Verifique se o quarto está disponível para uso',
         'Considere trocar o quarto da reserva'),
    ),
    'maintenance': (
        'O quarto {room} está em manutenção. Não é possível realizar check-in.',
        ('Verifique se a manutenção já foi concluída',
         'Considere trocar o quarto da reserva'),
    ),
}

PAYABLE_STATUSES = {
    ReservationStatus.CONFIRMED,
    ReservationStatus.CHECKED_IN,
    ReservationStatus.CHECKED_OUT,
}

MODIFICATION_BLOCKED_TEXT = {
    ReservationStatus.CHECKED_OUT: 'finalizada (check-out)',
    ReservationStatus.CANCELLED: 'cancelada',
    ReservationStatus.NO_SHOW: 'marcada como não compareceu',
}


def _rejected(context: str, reservation: dict, message: str, suggestions=(), **details) -> ValidationResult:
    """Build an error result and record it in the audit log."""
    log_validation_error(
        context,
        {'reservation_id': reservation.get('id'), 'error': message, **details},
        'reservation',
        reservation.get('id')
    )
    return ValidationResult.error(message, suggestions)


def _pending(consumptions) -> list:
    return [c for c in consumptions or [] if c.get('status') == 'pending']


# =============================================================================
# OPERATION VALIDATORS
# =============================================================================

def validate_check_in(reservation: dict, today=None) -> ValidationResult:
    """
    Validate a check-in.

    The reservation must be confirmed and its room usable. Checking in more
    than 7 days early or more than 3 days late is rejected; more than 1 day
    either way is accepted with a warning.

    Args:
        reservation: Reservation dict
        today: Reference date (defaults to today in the hotel timezone)

    Returns:
        ValidationResult
    """
    today = today or get_today()
    status = coerce_status(reservation.get('status'))

    if status is not ReservationStatus.CONFIRMED:
        return _rejected(
            'check-in', reservation,
            f'Não é possível realizar check-in para uma reserva com status "{status.label}". '
            'A reserva deve estar confirmada.',
            current_status=status.value, target_status=ReservationStatus.CHECKED_IN.value
        )

    room_status = reservation.get('room_status')
    if room_status in BLOCKING_ROOM_STATUSES:
        template, suggestions = BLOCKING_ROOM_STATUSES[room_status]
        return _rejected(
            'check-in', reservation,
            template.format(room=reservation.get('room_number', '')),
            suggestions,
            room_id=reservation.get('room_id'), room_status=room_status
        )

    check_in = parse_date(reservation.get('check_in_date'))
    days = (today - check_in).days
    shown = format_date_br(check_in)

    if days < -MAX_EARLY_CHECK_IN_DAYS:
        return _rejected(
            'check-in', reservation,
            f'O check-in está agendado para {shown}, que é mais de {MAX_EARLY_CHECK_IN_DAYS} dias no futuro. '
            'Não é possível realizar check-in com tanta antecedência.',
            ('Ajuste a data da reserva se necessário',
             'Entre em contato com o hóspede para confirmar a nova data'),
            check_in_date=check_in.isoformat(), days_difference=days
        )

    if days > MAX_LATE_CHECK_IN_DAYS:
        return _rejected(
            'check-in', reservation,
            f'O check-in estava agendado para {shown}, que foi há mais de {MAX_LATE_CHECK_IN_DAYS} dias. '
            'Considere marcar como no-show ou cancelar a reserva.',
            ('Marque a reserva como no-show',
             'Cancele a reserva',
             'Entre em contato com o hóspede para verificar a situação'),
            check_in_date=check_in.isoformat(), days_difference=days
        )

    if days < -CHECK_IN_WARNING_DAYS:
        return ValidationResult.warning(
            f'O check-in está sendo realizado {abs(days)} dias antes da data prevista ({shown}).',
            ('Verifique se há cobrança adicional para check-in antecipado',
             'Confirme a disponibilidade do quarto para o período adicional')
        )

    if days > CHECK_IN_WARNING_DAYS:
        return ValidationResult.warning(
            f'O check-in está sendo realizado com {days} dias de atraso em relação à data prevista ({shown}).',
            ('Verifique se o período da reserva precisa ser ajustado',
             'Confirme a data de check-out com o hóspede')
        )

    return ValidationResult.ok()


def validate_check_out(reservation: dict, consumptions=(), today=None) -> ValidationResult:
    """
    Validate a check-out.

    The reservation must be checked in with no pending consumptions. Leaving
    more than a day early, or after the planned date, gives a warning.
    An open-ended stay has no planned date to compare against.
    """
    today = today or get_today()
    status = coerce_status(reservation.get('status'))

    if status is not ReservationStatus.CHECKED_IN:
        return _rejected(
            'check-out', reservation,
            f'Não é possível realizar check-out para uma reserva com status "{status.label}". '
            'A reserva deve ter check-in realizado.',
            current_status=status.value, target_status=ReservationStatus.CHECKED_OUT.value
        )

    pending = _pending(consumptions)
    if pending:
        return _rejected(
            'check-out', reservation,
            f'Existem {len(pending)} consumo(s) pendente(s) que precisam ser finalizados antes do check-out.',
            ('Finalize os consumos pendentes',
             'Verifique se todos os itens consumidos foram registrados'),
            pending_consumptions=len(pending), consumption_ids=[c.get('id') for c in pending]
        )

    check_out = parse_optional_date(reservation.get('check_out_date'))
    if check_out is None:
        return ValidationResult.ok()

    days = (today - check_out).days
    shown = format_date_br(check_out)

    if days < -1:
        return ValidationResult.warning(
            f'O check-out está sendo realizado {abs(days)} dias antes da data prevista ({shown}). '
            'Verifique se há cobranças adicionais a serem aplicadas.',
            ('Verifique a política de check-out antecipado',
             'Ajuste o valor da reserva se necessário')
        )

    if days > 0:
        return ValidationResult.warning(
            f'O check-out está sendo realizado com {days} dia(s) de atraso em relação à data prevista ({shown}). '
            'Verifique se há cobranças adicionais a serem aplicadas.',
            ('Aplique a taxa de late check-out se aplicável',
             'Verifique se o quarto já está reservado para outro hóspede')
        )

    return ValidationResult.ok()


def validate_cancellation(reservation: dict, today=None) -> ValidationResult:
    """Validate a cancellation of a confirmed or checked-in reservation."""
    today = today or get_today()
    status = coerce_status(reservation.get('status'))

    if status not in (ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN):
        return _rejected(
            'cancellation', reservation,
            f'Não é possível cancelar uma reserva com status "{status.label}". '
            'A reserva deve estar confirmada ou com check-in realizado.',
            current_status=status.value, target_status=ReservationStatus.CANCELLED.value
        )

    if status is ReservationStatus.CHECKED_IN:
        return ValidationResult.warning(
            'Atenção: Esta reserva já teve check-in realizado. '
            'O cancelamento após check-in pode exigir procedimentos especiais de faturamento.',
            ('Verifique a política de cancelamento após check-in',
             'Considere aplicar taxas de cancelamento',
             'Verifique se há consumos a serem faturados')
        )

    if today > parse_date(reservation.get('check_in_date')):
        return ValidationResult.warning(
            'Esta reserva está sendo cancelada após a data de check-in prevista. '
            'Considere aplicar uma política de cancelamento tardio.',
            ('Verifique a política de cancelamento tardio',
             'Considere aplicar taxas de no-show',
             'Avalie se é mais adequado marcar como no-show em vez de cancelar')
        )

    return ValidationResult.ok()


def validate_no_show(reservation: dict, today=None) -> ValidationResult:
    """Validate marking a confirmed reservation as no-show."""
    today = today or get_today()
    status = coerce_status(reservation.get('status'))

    if status is not ReservationStatus.CONFIRMED:
        return _rejected(
            'no-show', reservation,
            f'Não é possível marcar como no-show uma reserva com status "{status.label}". '
            'A reserva deve estar confirmada.',
            current_status=status.value, target_status=ReservationStatus.NO_SHOW.value
        )

    check_in = parse_date(reservation.get('check_in_date'))
    if today < check_in:
        return _rejected(
            'no-show', reservation,
            f'Não é possível marcar como no-show antes da data de check-in prevista ({format_date_br(check_in)}).',
            ('Aguarde até a data de check-in',
             'Se necessário, cancele a reserva em vez de marcá-la como no-show'),
            check_in_date=check_in.isoformat(), current_date=today.isoformat()
        )

    days = (today - check_in).days
    if days > NO_SHOW_WARNING_DAYS:
        return ValidationResult.warning(
            f'A data de check-in foi há {days} dias. '
            'Considere cancelar a reserva em vez de marcá-la como no-show.',
            ('Verifique se o hóspede fez contato',
             'Considere aplicar a política de no-show para liberar o quarto')
        )

    return ValidationResult.ok()


def validate_finalize_consumptions(consumptions) -> ValidationResult:
    """Check whether there are pending consumptions to finalize."""
    if not consumptions:
        return ValidationResult(False, 'Não há consumos para finalizar.', Severity.INFO)

    pending = _pending(consumptions)
    if not pending:
        return ValidationResult(
            False,
            'Não há consumos pendentes para finalizar. Todos os consumos já foram processados.',
            Severity.INFO
        )

    return ValidationResult(True, f'{len(pending)} consumo(s) pendente(s) serão finalizados.', Severity.INFO)


def validate_reservation_modification(reservation: dict) -> ValidationResult:
    """Terminal reservations cannot be edited; checked-in ones only partially."""
    status = coerce_status(reservation.get('status'))

    if status in TERMINAL_STATUSES:
        return _rejected(
            'reservation-modification', reservation,
            f'Esta reserva está {MODIFICATION_BLOCKED_TEXT[status]} e não pode ser modificada.',
            current_status=status.value
        )

    if status is ReservationStatus.CHECKED_IN:
        return ValidationResult.warning(
            'Esta reserva já teve check-in realizado. Algumas informações não podem ser alteradas.',
            ('Você pode modificar consumos e observações',
             'Para alterar datas ou quarto, considere cancelar e criar uma nova reserva')
        )

    return ValidationResult.ok()


def validate_payment(reservation: dict, amount) -> ValidationResult:
    """Payments need a confirmed, checked-in or checked-out reservation and a positive amount."""
    status = coerce_status(reservation.get('status'))

    if status not in PAYABLE_STATUSES:
        return _rejected(
            'payment', reservation,
            f'Não é possível processar pagamentos para uma reserva com status "{status.label}".',
            current_status=status.value, amount=str(amount)
        )

    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        value = None

    if value is None or not value.is_finite() or value <= 0:
        return _rejected(
            'payment', reservation,
            'O valor do pagamento deve ser maior que zero.',
            amount=str(amount)
        )

    return ValidationResult.ok()


# =============================================================================
# COMBINED
# =============================================================================

def validate_reservation_action(current_status, target_status, reservation: dict,
                                consumptions=(), today=None) -> ValidationResult:
    """
    Validate a status change end to end.

    The transition table is checked first; allowed transitions then go
    through the validator of the target status.

    Args:
        current_status: Current status
        target_status: Requested status
        reservation: Reservation dict
        consumptions: Consumptions of the reservation (for check-out)
        today: Reference date

    Returns:
        ValidationResult
    """
    current = coerce_status(current_status)
    target = coerce_status(target_status)

    if not is_valid_status_transition(current, target):
        message = get_transition_error_message(current, target)
        return _rejected(
            'status-transition', reservation, message, TRANSITION_SUGGESTIONS,
            current_status=current.value, target_status=target.value
        )

    if target is ReservationStatus.CHECKED_IN:
        return validate_check_in(reservation, today)
    if target is ReservationStatus.CHECKED_OUT:
        return validate_check_out(reservation, consumptions, today)
    if target is ReservationStatus.CANCELLED:
        return validate_cancellation(reservation, today)
    if target is ReservationStatus.NO_SHOW:
        return validate_no_show(reservation, today)
    return ValidationResult.ok()

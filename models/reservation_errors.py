"""
Reservation error taxonomy.
Canned titles, messages and suggestions per error category, correlation codes,
and the handlers that turn failures into user-facing error payloads.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Optional, Tuple

from models.reservation_status import (
    ReservationStatus, Severity, TERMINAL_STATUSES, ValidationResult,
    coerce_status, get_transition_error_message
)
from utils.audit import LogCategory, LogLevel, log_event

logger = logging.getLogger(__name__)


# =============================================================================
# CATEGORIES
# =============================================================================

class ErrorCategory(str, Enum):
    CHECK_IN = 'check-in'
    CHECK_OUT = 'check-out'
    CANCEL = 'cancel'
    STATUS_CHANGE = 'status-change'
    PAYMENT = 'payment'
    CONSUMPTION = 'consumption'
    VALIDATION = 'validation'
    SERVER = 'server'
    NETWORK = 'network'
    PERMISSION = 'permission'
    NOT_FOUND = 'not-found'
    GENERAL = 'general'


@dataclass(frozen=True)
class ErrorMessageConfig:
    title: str
    message: str
    suggestions: Tuple[str, ...]
    severity: Severity = Severity.ERROR


ERROR_MESSAGES = MappingProxyType({
    ErrorCategory.CHECK_IN: ErrorMessageConfig(
        title='Erro ao realizar check-in',
        message='Não foi possível realizar o check-in para esta reserva.',
        suggestions=(
            'Verifique se o quarto está disponível',
            'Confirme os dados do hóspede',
            'Verifique se a reserva está no status correto',
        ),
    ),
    ErrorCategory.CHECK_OUT: ErrorMessageConfig(
        title='Erro ao realizar check-out',
        message='Não foi possível realizar o check-out para esta reserva.',
        suggestions=(
            'Verifique se todos os consumos foram finalizados',
            'Confirme se o pagamento foi processado',
            'Verifique se a reserva está no status correto',
        ),
    ),
    ErrorCategory.CANCEL: ErrorMessageConfig(
        title='Erro ao cancelar reserva',
        message='Não foi possível cancelar esta reserva.',
        suggestions=(
            'Verifique se a reserva está em um status que permite cancelamento',
            'Confirme se não há operações pendentes',
            'Tente novamente em alguns instantes',
        ),
    ),
    ErrorCategory.STATUS_CHANGE: ErrorMessageConfig(
        title='Erro ao alterar status',
        message='Não foi possível alterar o status da reserva.',
        suggestions=(
            'Verifique se a transição de status é permitida',
            'Confirme se todas as condições para a mudança de status foram atendidas',
            'Verifique se há operações pendentes que impedem a mudança',
        ),
    ),
    ErrorCategory.PAYMENT: ErrorMessageConfig(
        title='Erro no processamento do pagamento',
        message='Ocorreu um erro ao processar o pagamento.',
        suggestions=(
            'Verifique os dados de pagamento',
            'Confirme se o valor está correto',
            'Tente utilizar outro método de pagamento',
        ),
    ),
    ErrorCategory.CONSUMPTION: ErrorMessageConfig(
        title='Erro ao gerenciar consumos',
        message='Ocorreu um erro ao gerenciar os consumos da reserva.',
        suggestions=(
            'Verifique se os itens foram registrados corretamente',
            'Confirme os valores antes de finalizar',
            'Tente atualizar a página e tentar novamente',
        ),
    ),
    ErrorCategory.VALIDATION: ErrorMessageConfig(
        title='Erro de validação',
        message='Os dados fornecidos não são válidos.',
        suggestions=(
            'Verifique se todos os campos obrigatórios foram preenchidos',
            'Confirme se os valores estão no formato correto',
            'Corrija os erros indicados e tente novamente',
        ),
    ),
    ErrorCategory.SERVER: ErrorMessageConfig(
        title='Erro no servidor',
        message='Ocorreu um erro no servidor ao processar sua solicitação.',
        suggestions=(
            'Tente novamente em alguns instantes',
            'Se o problema persistir, entre em contato com o suporte',
            'Verifique os logs do sistema para mais detalhes',
        ),
    ),
    ErrorCategory.NETWORK: ErrorMessageConfig(
        title='Erro de conexão',
        message='Não foi possível conectar ao servidor.',
        suggestions=(
            'Verifique sua conexão com a internet',
            'Tente novamente em alguns instantes',
            'Se o problema persistir, entre em contato com o suporte',
        ),
    ),
    ErrorCategory.PERMISSION: ErrorMessageConfig(
        title='Permissão negada',
        message='Você não tem permissão para realizar esta operação.',
        suggestions=(
            'Verifique se você está logado corretamente',
            'Entre em contato com o administrador para solicitar acesso',
            'Tente acessar a funcionalidade através do menu principal',
        ),
    ),
    ErrorCategory.NOT_FOUND: ErrorMessageConfig(
        title='Recurso não encontrado',
        message='O recurso solicitado não foi encontrado.',
        suggestions=(
            'Verifique se o ID ou referência está correto',
            'A reserva pode ter sido removida ou alterada',
            'Retorne à lista de reservas e tente novamente',
        ),
    ),
    ErrorCategory.GENERAL: ErrorMessageConfig(
        title='Erro inesperado',
        message='Ocorreu um erro inesperado ao processar sua solicitação.',
        suggestions=(
            'Atualize a página e tente novamente',
            'Limpe o cache do navegador',
            'Se o problema persistir, entre em contato com o suporte',
        ),
    ),
})

CATEGORY_CODES = MappingProxyType({
    ErrorCategory.CHECK_IN: 'CI',
    ErrorCategory.CHECK_OUT: 'CO',
    ErrorCategory.CANCEL: 'CA',
    ErrorCategory.STATUS_CHANGE: 'SC',
    ErrorCategory.PAYMENT: 'PA',
    ErrorCategory.CONSUMPTION: 'CN',
    ErrorCategory.VALIDATION: 'VA',
    ErrorCategory.SERVER: 'SV',
    ErrorCategory.NETWORK: 'NW',
    ErrorCategory.PERMISSION: 'PM',
    ErrorCategory.NOT_FOUND: 'NF',
    ErrorCategory.GENERAL: 'GE',
})

ERROR_CODE_PREFIX = 'RES'

CHECK_IN_FIRST_SUGGESTIONS = (
    'Realize o check-in da reserva primeiro',
    'Após o check-in, você poderá realizar o check-out',
    'Verifique o fluxo correto de status da reserva',
)

TERMINAL_STATUS_SUGGESTIONS = (
    'Esta reserva está em um status final e não pode ser alterada',
    'Se necessário, crie uma nova reserva',
    'Entre em contato com o suporte para casos excepcionais',
)

SEVERITY_ICONS = MappingProxyType({
    Severity.ERROR: '❌',
    Severity.WARNING: '⚠️',
    Severity.INFO: 'ℹ️',
    Severity.SUCCESS: '✅',
})


# =============================================================================
# HANDLED ERROR
# =============================================================================

@dataclass(frozen=True)
class HandledError:
    """User-facing error payload produced by handle_error."""
    error_code: str
    title: str
    message: str
    suggestions: Tuple[str, ...]
    severity: Severity
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'code': self.error_code,
            'title': self.title,
            'message': self.message,
            'suggestions': list(self.suggestions),
            'severity': self.severity.value,
            'details': self.details,
        }


# =============================================================================
# LOOKUPS
# =============================================================================

def coerce_category(value) -> ErrorCategory:
    """Convert a category value, falling back to GENERAL for unknown ones."""
    if isinstance(value, ErrorCategory):
        return value
    try:
        return ErrorCategory(value)
    except ValueError:
        return ErrorCategory.GENERAL


def _optional_status(value) -> Optional[ReservationStatus]:
    if value is None:
        return None
    try:
        return coerce_status(value)
    except ValueError:
        return None


def get_error_message_config(category) -> ErrorMessageConfig:
    """Get the canned configuration for an error category."""
    return ERROR_MESSAGES[coerce_category(category)]


def get_error_suggestions(category, current_status=None, target_status=None) -> Tuple[str, ...]:
    """
    Get suggestions for resolving an error.

    Status-change errors with known statuses get status-specific suggestions;
    everything else gets the category defaults.

    Args:
        category: Error category
        current_status: Current reservation status (optional)
        target_status: Target reservation status (optional)

    Returns:
        Ordered tuple of suggestions
    """
    category = coerce_category(category)
    current = _optional_status(current_status)
    target = _optional_status(target_status)

    if category is ErrorCategory.STATUS_CHANGE and current and target:
        if current is ReservationStatus.CONFIRMED and target is ReservationStatus.CHECKED_OUT:
            return CHECK_IN_FIRST_SUGGESTIONS
        if current in TERMINAL_STATUSES:
            return TERMINAL_STATUS_SUGGESTIONS

    return ERROR_MESSAGES[category].suggestions


def generate_error_code(category, context: str = None) -> str:
    """
    Generate a correlation code for support traceability.

    Format: RES-<CC>[-<CTX4>]-<NNNN>, e.g. RES-SC-STAT-0421. The random
    suffix makes codes unsuitable for comparisons.

    Args:
        category: Error category
        context: Optional context string, first 4 characters are used

    Returns:
        Error code string
    """
    type_code = CATEGORY_CODES[coerce_category(category)]
    context_code = f'-{context[:4].upper()}' if context else ''
    random_code = f'{random.randint(0, 9999):04d}'
    return f'{ERROR_CODE_PREFIX}-{type_code}{context_code}-{random_code}'


def create_validation_result_from_error_type(category, custom_message: str = None) -> ValidationResult:
    """Build an invalid ValidationResult from a category's defaults."""
    config = get_error_message_config(category)
    return ValidationResult(
        valid=False,
        message=custom_message or config.message,
        severity=config.severity,
        suggestions=config.suggestions
    )


# =============================================================================
# HANDLERS
# =============================================================================

def _describe_error(error):
    if error is None:
        return None
    if isinstance(error, BaseException):
        return {'message': str(error), 'name': type(error).__name__}
    return str(error)


def handle_error(
    category,
    error=None,
    context: str = 'general',
    reservation_id=None,
    current_status=None,
    target_status=None,
    custom_message: str = None,
    custom_title: str = None,
    custom_suggestions=None,
    validation_result: ValidationResult = None,
    log_error: bool = True
) -> HandledError:
    """
    Turn a failure into a user-facing error payload.

    Message precedence: custom message, then the validation result's message,
    then the transition message for status-change errors with both statuses,
    then the category default. Suggestions: custom, then the validation
    result's, then status-aware defaults. Severity: the validation result's,
    then the category default.

    Args:
        category: ErrorCategory or its string value
        error: Original exception or message, if any
        context: Where the error happened, also used in the error code
        reservation_id: Related reservation
        current_status: Current reservation status
        target_status: Requested reservation status
        custom_message: Message override
        custom_title: Title override
        custom_suggestions: Suggestions override
        validation_result: Prior validation result to surface
        log_error: Whether to log and audit the error

    Returns:
        HandledError
    """
    category = coerce_category(category)
    config = ERROR_MESSAGES[category]
    error_code = generate_error_code(category, context)
    current = _optional_status(current_status)
    target = _optional_status(target_status)

    if custom_suggestions is not None:
        suggestions = tuple(custom_suggestions)
    elif validation_result is not None and validation_result.suggestions:
        suggestions = tuple(validation_result.suggestions)
    else:
        suggestions = get_error_suggestions(category, current, target)

    message = custom_message
    if not message and validation_result is not None and validation_result.message:
        message = validation_result.message
    if not message and category is ErrorCategory.STATUS_CHANGE and current and target:
        message = get_transition_error_message(current, target)
    if not message:
        message = config.message

    severity = config.severity
    if validation_result is not None and validation_result.severity:
        severity = validation_result.severity

    details = {
        'error_type': category.value,
        'error_code': error_code,
        'context': context,
        'reservation_id': reservation_id,
        'current_status': current.value if current else None,
        'target_status': target.value if target else None,
        'original_error': _describe_error(error),
    }

    if log_error:
        logger.warning('Error in %s:%s [%s] %s', context, category.value, error_code, message)
        log_event(
            level=LogLevel.ERROR,
            category=LogCategory.RESERVATION if reservation_id is not None else LogCategory.SYSTEM,
            message=f'Error in {context}:{category.value}',
            details=details,
            entity_type='reservation' if reservation_id is not None else None,
            entity_id=reservation_id,
            tags=[category.value, context]
        )

    return HandledError(
        error_code=error_code,
        title=custom_title or config.title,
        message=message,
        suggestions=suggestions,
        severity=severity,
        details=details
    )


def handle_status_change_error(error, current_status, target_status, reservation_id=None,
                               validation_result: ValidationResult = None) -> HandledError:
    return handle_error(
        ErrorCategory.STATUS_CHANGE, error,
        context='status-change',
        reservation_id=reservation_id,
        current_status=current_status,
        target_status=target_status,
        validation_result=validation_result
    )


def handle_check_in_error(error, reservation_id=None, validation_result: ValidationResult = None) -> HandledError:
    return handle_error(ErrorCategory.CHECK_IN, error, context='check-in',
                        reservation_id=reservation_id, validation_result=validation_result)


def handle_check_out_error(error, reservation_id=None, validation_result: ValidationResult = None) -> HandledError:
    return handle_error(ErrorCategory.CHECK_OUT, error, context='check-out',
                        reservation_id=reservation_id, validation_result=validation_result)


def handle_cancellation_error(error, reservation_id=None, validation_result: ValidationResult = None) -> HandledError:
    return handle_error(ErrorCategory.CANCEL, error, context='cancellation',
                        reservation_id=reservation_id, validation_result=validation_result)


def handle_payment_error(error, reservation_id=None, context: str = 'payment') -> HandledError:
    return handle_error(ErrorCategory.PAYMENT, error, context=context, reservation_id=reservation_id)


def classify_api_error(error, status_code: int = None) -> ErrorCategory:
    """
    Pick an error category for a failed API call.

    The HTTP status code wins when given; otherwise the exception type and
    keywords in its message decide. Anything unrecognized is a server error.
    """
    if status_code is not None:
        if status_code in (401, 403):
            return ErrorCategory.PERMISSION
        if status_code == 404:
            return ErrorCategory.NOT_FOUND
        if status_code in (400, 422):
            return ErrorCategory.VALIDATION
        if status_code >= 500:
            return ErrorCategory.SERVER

    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.NETWORK
    if isinstance(error, PermissionError):
        return ErrorCategory.PERMISSION

    text = str(error).lower() if error is not None else ''
    if any(word in text for word in ('network', 'fetch', 'connection')):
        return ErrorCategory.NETWORK
    if any(word in text for word in ('permission', 'unauthorized', 'forbidden')):
        return ErrorCategory.PERMISSION
    if 'not found' in text or '404' in text:
        return ErrorCategory.NOT_FOUND
    if 'validation' in text:
        return ErrorCategory.VALIDATION
    return ErrorCategory.SERVER


def handle_api_error(error, context: str, status_code: int = None) -> HandledError:
    """
    Handle a failed API call, classifying it by status code or message.

    Exceptions keep their own message as the displayed message.
    """
    category = classify_api_error(error, status_code)
    custom_message = str(error) if isinstance(error, BaseException) and str(error) else None
    return handle_error(category, error, context=context, custom_message=custom_message)


# =============================================================================
# RENDERING
# =============================================================================

def render_error(handled: HandledError) -> str:
    """Render a handled error as icon + title, message, bulleted suggestions and code."""
    lines = [f'{SEVERITY_ICONS[handled.severity]} {handled.title}', handled.message]
    if handled.suggestions:
        lines.append('Sugestões:')
        lines.extend(f'  • {suggestion}' for suggestion in handled.suggestions)
    lines.append(f'Código: {handled.error_code}')
    return '\n'.join(lines)


def render_error_compact(handled: HandledError) -> str:
    """Render a handled error on a single line: icon + message."""
    return f'{SEVERITY_ICONS[handled.severity]} {handled.message}'

"""
Centralized Portuguese (pt-BR) UI messages.
All user-facing text in Portuguese for consistency.
"""

MESSAGES = {
    # Success messages
    'reservation_created': 'Reserva criada com sucesso',
    'reservation_updated': 'Reserva atualizada com sucesso',
    'status_updated': 'Status da reserva atualizado para {status}',
    'check_out_date_updated': 'Data de check-out definida e valor recalculado',
    'settings_updated': 'Configurações do hotel atualizadas',

    # HTTP errors
    'invalid_request': 'Requisição inválida',
    'not_found': 'Recurso não encontrado',
    'method_not_allowed': 'Método não permitido',
    'server_error': 'Erro interno do servidor',

    # Error messages
    'reservation_not_found': 'Reserva não encontrada',
    'room_not_found': 'Quarto não encontrado',
    'room_unavailable': 'O quarto não está disponível para as datas selecionadas',
    'check_in_required': 'A data de check-in é obrigatória',
    'check_out_required': 'A data de check-out é obrigatória',
    'invalid_date': 'Data inválida: {value}',
    'invalid_time': 'Horário inválido: {value}',
    'invalid_amount': 'Valor inválido: {value}',
    'invalid_date_range': 'A data de check-out deve ser posterior à data de check-in',
    'invalid_status': 'Status inválido: {value}',
    'field_required': 'Campo obrigatório: {field}',
    'invalid_field': 'Valor inválido para o campo: {field}',
    'availability_lookup_failed': 'Não foi possível verificar a disponibilidade dos quartos',
    'reservation_not_modifiable': 'Esta reserva não pode ser modificada',

    # Reservation status labels
    'status_confirmed': 'confirmada',
    'status_checked_in': 'check-in realizado',
    'status_checked_out': 'check-out realizado',
    'status_cancelled': 'cancelada',
    'status_no_show': 'não compareceu',

    # Status transition messages (both labels always present)
    'transition_check_in_first': (
        'Não é possível alterar o status de {current} para {target} diretamente. '
        'É necessário realizar o check-in primeiro.'
    ),
    'transition_back_to_confirmed': (
        'Não é possível voltar ao status {target} com {current}.'
    ),
    'transition_no_show_after_check_in': (
        'Não é possível marcar como {target} uma reserva com {current}.'
    ),
    'transition_from_checked_out': (
        'Esta reserva está com {current} e não pode ser alterada para {target}.'
    ),
    'transition_from_cancelled': (
        'Esta reserva foi {current} e não pode ser alterada para {target}.'
    ),
    'transition_from_no_show': (
        'Esta reserva foi marcada como {current} e não pode ser alterada para {target}.'
    ),
    'transition_invalid': 'Transição de status inválida: {current} → {target}',
}


def get_message(key: str, **kwargs) -> str:
    """
    Get message with optional formatting.

    Args:
        key: Message key
        **kwargs: Format parameters

    Returns:
        Formatted message or key if not found
    """
    message = MESSAGES.get(key, key)
    if kwargs:
        return message.format(**kwargs)
    return message

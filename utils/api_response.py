"""
JSON response helpers shared by the API blueprint.

    Success:  {"success": true, "data": {...}, "message": "...", "warning": "..."}
    Error:    {"success": false, "error": "mensagem em português"}
    Handled:  {"success": false, "error": "...", "code": "RES-SC-STAT-0421",
               "title": "...", "suggestions": [...], "severity": "error"}
"""

from typing import Any

from flask import jsonify


def api_success(
    data: dict | None = None,
    message: str | None = None,
    warning: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Build a success response.

    Args:
        data: Payload placed under 'data'
        message: Confirmation shown to the user
        warning: Non-blocking warning (e.g. late cancellation)
        status: HTTP status code
        **extra_fields: Additional top-level keys

    Returns:
        Tuple of (Response, status_code)
    """
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    if warning:
        body['warning'] = warning
    body.update(extra_fields)
    return jsonify(body), status


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """Build an error response with a localized message."""
    body = {'success': False, 'error': error}
    body.update(extra_fields)
    return jsonify(body), status


def api_handled_error(handled, status: int = 422) -> tuple:
    """
    Build an error response from a models.reservation_errors.HandledError.

    The handled message becomes 'error'; code, title, suggestions and
    severity are added at the top level.
    """
    payload = handled.to_dict()
    return api_error(
        payload['message'],
        status=status,
        code=payload['code'],
        title=payload['title'],
        suggestions=payload['suggestions'],
        severity=payload['severity'],
    )

"""
System log model and data access functions.
Stores structured audit records in the system_logs table.
"""

import json
from database import get_db


# =============================================================================
# CREATE
# =============================================================================

def create_system_log(
    level: str,
    category: str,
    message: str,
    details: dict = None,
    entity_type: str = None,
    entity_id: str = None,
    source: str = 'web',
    tags: list = None
) -> int:
    """
    Insert a system log record.

    Args:
        level: Log level (debug, info, warning, error, critical)
        category: Log category (reservation, payment, system, ...)
        message: Short description
        details: Extra structured data, stored as JSON
        entity_type: Type of the related entity
        entity_id: ID of the related entity
        source: Origin of the record
        tags: List of tags, stored as JSON

    Returns:
        New system log ID
    """
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO system_logs
            (level, category, message, details, entity_type, entity_id, source, tags)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ''', (
            level,
            category,
            message,
            json.dumps(details or {}, default=str, ensure_ascii=False),
            entity_type,
            str(entity_id) if entity_id is not None else None,
            source,
            json.dumps(tags or [], ensure_ascii=False),
        ))
        return cursor.lastrowid


# =============================================================================
# READ
# =============================================================================

def get_system_logs(
    category: str = None,
    level: str = None,
    entity_type: str = None,
    entity_id=None,
    limit: int = 100
) -> list:
    """
    Get system logs with optional filtering, newest first.

    Returns:
        List of log dicts with details and tags decoded
    """
    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM system_logs WHERE 1=1'
    params = []

    if category:
        query += ' AND category = ?'
        params.append(category)

    if level:
        query += ' AND level = ?'
        params.append(level)

    if entity_type:
        query += ' AND entity_type = ?'
        params.append(entity_type)

    if entity_id is not None:
        query += ' AND entity_id = ?'
        params.append(str(entity_id))

    query += ' ORDER BY id DESC LIMIT ?'
    params.append(limit)

    cursor.execute(query, params)

    logs = []
    for row in cursor.fetchall():
        log = dict(row)
        log['details'] = json.loads(log['details']) if log['details'] else {}
        log['tags'] = json.loads(log['tags']) if log['tags'] else []
        logs.append(log)

    return logs

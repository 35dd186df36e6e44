"""
SQLite connection handling.
One connection per application context, stored on flask.g and closed on teardown.
"""

import os
import sqlite3

from flask import current_app, g

IN_MEMORY = ':memory:'


def _connect(path: str) -> sqlite3.Connection:
    """Open a connection with typed DATE/TIMESTAMP columns and dict-like rows."""
    if path != IN_MEMORY:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

    conn = sqlite3.connect(path, detect_types=sqlite3.PARSE_DECLTYPES)
    conn.row_factory = sqlite3.Row
    conn.execute('PRAGMA foreign_keys = ON')
    if path != IN_MEMORY:
        # Readers do not block the single writer
        conn.execute('PRAGMA journal_mode = WAL')
    return conn


def get_db() -> sqlite3.Connection:
    """
    Get the connection of the current application context.

    Returns:
        sqlite3.Connection

    Raises:
        RuntimeError: Outside an application context
    """
    if 'db' not in g:
        g.db = _connect(current_app.config.get('DATABASE_PATH', 'instance/hotel.db'))
    return g.db


def close_db(e=None):
    """Close the context's connection, if one was opened."""
    conn = g.pop('db', None)
    if conn is not None:
        conn.close()


def init_db():
    """
    Recreate the schema and insert seed data.
    Existing data is lost.
    """
    from database.schema import create_indexes, create_tables, drop_tables
    from database.seed import seed_database

    conn = get_db()
    drop_tables(conn)
    create_tables(conn)
    create_indexes(conn)
    seed_database(conn)
    conn.commit()

    current_app.logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))

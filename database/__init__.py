"""
SQLite data layer for the hotel back-office.

- connection: per-app-context connection, init_db
- schema: tables and indexes
- seed: settings row, starter rooms and demo rooms
"""

from database.connection import get_db, close_db, init_db
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database, seed_demo_rooms

__all__ = [
    'get_db', 'close_db', 'init_db',
    'drop_tables', 'create_tables', 'create_indexes',
    'seed_database', 'seed_demo_rooms',
]

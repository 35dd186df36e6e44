"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'system_logs',
        'reservation_status_history',
        'reservations',
        'rooms',
        'hotel_settings',
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Hotel settings (singleton row, id = 1)
    db.execute('''
        CREATE TABLE hotel_settings (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            name TEXT NOT NULL DEFAULT 'Hotel',
            check_in_time TEXT NOT NULL DEFAULT '14:00',
            check_out_time TEXT NOT NULL DEFAULT '12:00',
            currency TEXT NOT NULL DEFAULT 'BRL',
            timezone TEXT NOT NULL DEFAULT 'America/Sao_Paulo',
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 2. Rooms
    db.execute('''
        CREATE TABLE rooms (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            room_number TEXT UNIQUE NOT NULL,
            room_type TEXT NOT NULL DEFAULT 'standard',
            price_per_night REAL NOT NULL DEFAULT 0 CHECK (price_per_night >= 0),
            status TEXT NOT NULL DEFAULT 'available'
                CHECK (status IN ('available', 'occupied', 'maintenance', 'reserved')),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 3. Reservations (check_out_date NULL = open-ended stay)
    db.execute('''
        CREATE TABLE reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_code TEXT UNIQUE NOT NULL,
            room_id INTEGER NOT NULL REFERENCES rooms(id),
            guest_name TEXT,
            check_in_date DATE NOT NULL,
            check_out_date DATE,
            status TEXT NOT NULL DEFAULT 'confirmed'
                CHECK (status IN ('confirmed', 'checked_in', 'checked_out', 'cancelled', 'no_show')),
            total_amount REAL NOT NULL DEFAULT 0,
            special_requests TEXT,
            created_by TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (check_out_date IS NULL OR check_out_date > check_in_date)
        )
    ''')

    # 4. Status history
    db.execute('''
        CREATE TABLE reservation_status_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER NOT NULL REFERENCES reservations(id) ON DELETE CASCADE,
            status_type TEXT NOT NULL,
            action TEXT NOT NULL,
            changed_by TEXT,
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 5. System logs (audit sink)
    db.execute('''
        CREATE TABLE system_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            level TEXT NOT NULL,
            category TEXT NOT NULL,
            message TEXT NOT NULL,
            details TEXT,
            entity_type TEXT,
            entity_id TEXT,
            source TEXT DEFAULT 'web',
            tags TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_indexes(db):
    """Create indexes used by availability and log queries."""
    db.execute('CREATE INDEX idx_reservations_room_dates ON reservations(room_id, check_in_date, check_out_date)')
    db.execute('CREATE INDEX idx_reservations_status ON reservations(status)')
    db.execute('CREATE INDEX idx_reservations_open_checkout ON reservations(check_in_date) WHERE check_out_date IS NULL')
    db.execute('CREATE INDEX idx_status_history_reservation ON reservation_status_history(reservation_id)')
    db.execute('CREATE INDEX idx_system_logs_entity ON system_logs(entity_type, entity_id)')

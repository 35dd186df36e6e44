"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.
"""

import os
import pytest

# Select test configuration BEFORE importing app
os.environ['FLASK_ENV'] = 'test'


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated database file."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = str(tmp_path / 'hotel_test.db')

    with app.app_context():
        init_db()
        yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def rooms(app):
    """Seeded rooms keyed by room number (101, 102, 201, 301)."""
    from models.room import get_all_rooms

    return {room['room_number']: room for room in get_all_rooms()}

"""
Configuration for the hotel back-office.
One class per environment; create_app picks one by name (FLASK_ENV).
"""

import os


def _env(name: str, default=None):
    """Read an environment variable, treating empty values as unset."""
    return os.environ.get(name) or default


class Config:
    """Settings shared by every environment."""

    APP_NAME = 'Hotel Back-Office'
    APP_VERSION = '1.0.0'
    API_PREFIX = '/api'

    SECRET_KEY = _env('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Raw SQLite file, one connection per app context
    DATABASE_PATH = _env('DATABASE_PATH', 'instance/hotel.db')

    LOG_DIR = _env('LOG_DIR', 'logs')

    # Hotel defaults; the hotel_settings row takes precedence
    TIMEZONE = _env('TIMEZONE', 'America/Sao_Paulo')
    CURRENCY = _env('CURRENCY', 'BRL')
    DEFAULT_CHECK_IN_TIME = _env('DEFAULT_CHECK_IN_TIME', '14:00')
    DEFAULT_CHECK_OUT_TIME = _env('DEFAULT_CHECK_OUT_TIME', '12:00')

    # Flask-WTF
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False


class DevelopmentConfig(Config):
    """Local development."""

    DEBUG = True
    TESTING = False
    WTF_CSRF_SSL_STRICT = False


class ProductionConfig(Config):
    """Production behind gunicorn (see gunicorn.conf.py)."""

    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = _env('SESSION_COOKIE_SECURE', 'true').lower() == 'true'
    WTF_CSRF_SSL_STRICT = SESSION_COOKIE_SECURE
    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    MIN_SECRET_KEY_LENGTH = 32

    @classmethod
    def validate(cls) -> None:
        """
        Check the environment before serving traffic.

        Raises:
            ValueError: If SECRET_KEY or DATABASE_PATH is missing, or the key is too short
        """
        secret_key = _env('SECRET_KEY')
        if not secret_key:
            raise ValueError('SECRET_KEY environment variable must be set in production')
        if len(secret_key) < cls.MIN_SECRET_KEY_LENGTH:
            raise ValueError(f'SECRET_KEY must be at least {cls.MIN_SECRET_KEY_LENGTH} characters in production')
        if not _env('DATABASE_PATH'):
            raise ValueError('DATABASE_PATH environment variable must be set in production')


class TestConfig(Config):
    """pytest runs; tests point DATABASE_PATH at a temporary file."""

    DEBUG = True
    TESTING = True
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'test-secret-key'
    DATABASE_PATH = _env('DATABASE_PATH', ':memory:')


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
}


def get_config(name: str = None):
    """Get the configuration class for a name, defaulting to development."""
    return config.get(name or _env('FLASK_ENV', 'development'), DevelopmentConfig)

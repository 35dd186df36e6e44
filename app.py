"""
Hotel Back-Office - reservation management core.
Flask application factory, JSON error handlers and CLI commands.
"""

import logging
import os

import click
from dotenv import load_dotenv
from flask import Flask, g

load_dotenv()

from config import get_config
from database import close_db, init_db
from extensions import csrf

# HTTP errors answered with the standard JSON error body
JSON_ERRORS = {
    400: 'invalid_request',
    404: 'not_found',
    405: 'method_not_allowed',
    500: 'server_error',
}


def create_app(config_name=None):
    """
    Build the Flask application.

    Args:
        config_name: 'development', 'production' or 'test'
            (defaults to FLASK_ENV, then development)

    Returns:
        Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    csrf.init_app(app)

    from blueprints.reservations import reservations_bp
    # JSON-only API, no form posts to protect
    csrf.exempt(reservations_bp)
    app.register_blueprint(reservations_bp, url_prefix=app.config['API_PREFIX'])

    register_error_handlers(app)
    register_cli_commands(app)
    app.teardown_appcontext(close_db)
    configure_logging(app)

    return app


def register_error_handlers(app):
    """Answer HTTP errors with JSON instead of HTML pages."""
    from utils.api_response import api_error
    from utils.messages import get_message

    def make_handler(status, message_key):
        def handler(error):
            if status == 500:
                db = g.get('db')
                if db is not None:
                    db.rollback()
            return api_error(get_message(message_key), status=status)
        return handler

    for status, message_key in JSON_ERRORS.items():
        app.register_error_handler(status, make_handler(status, message_key))


def register_cli_commands(app):
    """Register the init-db and seed-demo commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Drop and recreate the schema with seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('seed-demo')
    @click.option('--rooms', default=10, show_default=True, help='Number of demo rooms')
    @click.option('--price', default='150.00', show_default=True, help='Nightly rate')
    def seed_demo_command(rooms, price):
        """Add demo rooms to an initialized database."""
        from database.seed import seed_demo_rooms

        with app.app_context():
            try:
                created = seed_demo_rooms(rooms, price)
            except Exception as e:
                click.echo(f'Error seeding rooms: {e}', err=True)
                return
        click.echo(f'{created} rooms created')


def configure_logging(app):
    """File logging in production, DEBUG on the console otherwise."""
    if app.debug or app.testing:
        app.logger.setLevel(logging.DEBUG)
        return

    log_dir = app.config['LOG_DIR']
    os.makedirs(log_dir, exist_ok=True)

    handler = logging.FileHandler(os.path.join(log_dir, 'hotel.log'))
    handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
    ))
    handler.setLevel(logging.INFO)

    # On the root logger so module loggers (models.*, utils.audit) share the file
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.INFO)
    app.logger.setLevel(logging.INFO)
    app.logger.info('%s %s startup', app.config['APP_NAME'], app.config['APP_VERSION'])


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', debug=True)

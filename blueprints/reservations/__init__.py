"""
Reservations API blueprint.
Split into smaller modules by concern:
- availability.py - health, room availability and pricing
- reservations.py - reservation create/read, status changes and check-out dates
"""

from flask import Blueprint

# Create the reservations blueprint
reservations_bp = Blueprint('reservations', __name__)

# Import and register routes from submodules
from blueprints.reservations import availability
from blueprints.reservations import reservations

availability.register_routes(reservations_bp)
reservations.register_routes(reservations_bp)

"""
Flask extensions initialization.
Extensions are created here and bound to the app in app.py.
"""

from flask_wtf.csrf import CSRFProtect

# CSRF protection for form posts; the JSON API blueprint is exempted in app.py
csrf = CSRFProtect()

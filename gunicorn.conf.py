"""Gunicorn configuration for the hotel back-office API."""

import os

# Server socket
bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# SQLite takes one writer at a time; keep the worker count low
workers = int(os.environ.get('GUNICORN_WORKERS', '2'))
threads = 4
worker_class = 'gthread'

timeout = 30
graceful_timeout = 30
keepalive = 5

# Logging
log_dir = os.environ.get('LOG_DIR', 'logs')
accesslog = os.path.join(log_dir, 'gunicorn-access.log')
errorlog = os.path.join(log_dir, 'gunicorn-error.log')
loglevel = 'info'
access_log_format = '%(h)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

proc_name = 'hotel-backoffice'

# wsgi.py validates production settings at import time
preload_app = True

max_requests = 1000
max_requests_jitter = 50

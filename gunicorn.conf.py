"""
Gunicorn configuration for the loyalty portal.
"""
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Sync workers: every request is a handful of queries plus at most one
# exchange rate lookup
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'sync'
timeout = 60
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
capture_output = True

proc_name = 'loyalty-portal'

preload_app = True

graceful_timeout = 30

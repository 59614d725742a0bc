"""
Gunicorn configuration for the Kinetic API.
"""
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'sync'
timeout = 120  # batch runs triggered over HTTP can take a while
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info')
capture_output = True

proc_name = 'kinetic'

# Preload so the scheduler starts once in the master process
preload_app = True

graceful_timeout = 30

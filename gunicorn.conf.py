"""
Gunicorn configuration for production deployment.

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app

The bootstrap server answers one tiny GET per page load, so a few sync
workers are plenty.
"""

import multiprocessing
import os

# --- Bind ---
bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# --- Workers ---
workers = min(multiprocessing.cpu_count() * 2 + 1, 4)
worker_class = 'sync'

# --- Timeouts ---
timeout = 30
graceful_timeout = 10
keepalive = 2

# --- Worker Recycling ---
max_requests = 1000
max_requests_jitter = 50

# --- Request Limits ---
# The only route takes no body; keep header limits tight.
limit_request_line = 4094
limit_request_fields = 50
limit_request_field_size = 8190

# --- Server Identity ---
server_software = ''

# --- Logging ---
# Access log excludes cookies and authorization headers.
accesslog = '-'
errorlog = '-'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" %(L)s'
loglevel = os.environ.get('LOG_LEVEL', 'info')

# --- Process Naming ---
proc_name = 'focusboard-bootstrap'

# --- Forwarded Headers ---
forwarded_allow_ips = os.environ.get('FORWARDED_ALLOW_IPS', '127.0.0.1')

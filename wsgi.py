"""
WSGI entry point for production deployment (gunicorn).

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app

This module creates the Flask app with ProductionConfig and validates
that all required environment variables are set.
"""

import sys

from focusboard.config import ProductionConfig

# Fail fast with a clear error message if API_BASE_URL is missing:
# publishing an empty origin would send every browser to the wrong host.
try:
    ProductionConfig.init_app(None)
except RuntimeError as exc:
    print(f'FATAL: {exc}', file=sys.stderr)
    sys.exit(1)

from focusboard import create_app  # noqa: E402

app = create_app(config_class=ProductionConfig)

"""
Runtime bootstrap route.

GET /runtime-config.js renders

    window.__RUNTIME_CONFIG__ = {"API_BASE_URL": ..., "AUTH_API_BASE_URL": ..., "APP_VERSION": ...};

from the server's configuration. The dashboard loads it before its own
code, and focusboard.client.runtime_config parses the same format.
"""

import json

from flask import Response, current_app

from focusboard.bootstrap import bootstrap_bp
from focusboard.client.runtime_config import BOOTSTRAP_GLOBAL


def render_bootstrap_script(payload: dict) -> str:
    """
    Render the assignment script for `payload`.

    '<', '>' and '&' are escaped as JSON unicode escapes so a configured
    value can never close the surrounding <script> element.
    """
    body = json.dumps(payload, sort_keys=True)
    body = body.replace('<', '\\u003c').replace('>', '\\u003e').replace('&', '\\u0026')
    return f'window.{BOOTSTRAP_GLOBAL} = {body};'


def bootstrap_payload() -> dict:
    """Collect the published fields from the app config."""
    config = current_app.config
    return {
        'API_BASE_URL': config.get('API_BASE_URL') or '',
        'AUTH_API_BASE_URL': config.get('AUTH_API_BASE_URL') or '',
        'APP_VERSION': config.get('APP_VERSION') or 'dev',
    }


@bootstrap_bp.route('/runtime-config.js', methods=['GET'])
def runtime_config():
    """Serve the runtime configuration script (no-store via headers.py)."""
    return Response(
        render_bootstrap_script(bootstrap_payload()),
        status=200,
        content_type='application/javascript; charset=utf-8',
    )


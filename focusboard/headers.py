"""
Response headers middleware.

Applied via @app.after_request to EVERY response. The bootstrap script
describes the current deployment, so it must never be cached or sniffed
into another content type.
"""

from flask import Flask


def init_security_headers(app: Flask) -> None:
    """Register the response header hook on the Flask app."""

    @app.after_request
    def set_security_headers(response):
        # Browsers must execute the script only as the declared type.
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # Every page load must see the current deployment's origins.
        response.headers['Cache-Control'] = 'no-store, max-age=0'
        response.headers['Pragma'] = 'no-cache'

        # Only pages on this origin may load the bootstrap.
        response.headers['Cross-Origin-Resource-Policy'] = 'same-origin'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        response.headers['X-Frame-Options'] = 'DENY'

        # Hide server identification.
        response.headers.pop('Server', None)
        response.headers.pop('X-Powered-By', None)

        return response

"""
Flask application factory for the runtime bootstrap server.

Serves /runtime-config.js, the script a dashboard page loads before its own
code to learn which backend origins to call. Uses the factory pattern for
testability: each test can create an app with a different config class.

The gateway client lives in focusboard.client and shares the config classes.
"""

from flask import Flask

from focusboard.config import DevelopmentConfig


def create_app(config_class=None):
    """
    Create and configure the Flask application.

    Args:
        config_class: Configuration class to use. Defaults to DevelopmentConfig.
                      Tests pass TestConfig.

    Returns:
        Configured Flask application instance.
    """
    if config_class is None:
        config_class = DevelopmentConfig

    app = Flask(__name__)
    app.config.from_object(config_class)

    # --- Response Headers ---
    from focusboard.headers import init_security_headers
    init_security_headers(app)

    # --- Logging ---
    from focusboard.logging_config import setup_audit_logging
    setup_audit_logging()

    # --- Register Blueprints ---
    from focusboard.bootstrap import bootstrap_bp
    app.register_blueprint(bootstrap_bp)

    # --- HTTP Error Handlers ---
    # Plain text: this server has no pages, and error bodies must not echo
    # internal details.

    @app.errorhandler(404)
    def handle_not_found(e):
        return 'Not found\n', 404, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return 'Method not allowed\n', 405, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.errorhandler(500)
    def handle_server_error(e):
        return 'Internal server error\n', 500, {'Content-Type': 'text/plain; charset=utf-8'}

    return app

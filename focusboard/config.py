"""
Configuration for the bootstrap server and the gateway client.

One config class feeds both halves: create_app() loads it with
app.config.from_object, create_gateway() reads the same attributes.
Every value that changes per deployment comes from the environment.
"""

import os


def _env(name: str, default=None):
    """Read an environment variable, treating blank values as unset."""
    value = (os.environ.get(name) or '').strip()
    return value or default


class BaseConfig:
    """Shared configuration for all environments."""

    # --- Runtime Bootstrap (served as /runtime-config.js) ---
    # Read at process start, not at build time. An empty value is emitted
    # as "" and the client falls back to its static defaults.
    API_BASE_URL = _env('API_BASE_URL', '')
    AUTH_API_BASE_URL = _env('AUTH_API_BASE_URL', '')
    APP_VERSION = _env('APP_VERSION', 'dev')

    # --- Static Fallbacks ---
    # Used by the client when the bootstrap payload leaves a field absent.
    DEFAULT_API_BASE_URL = _env('DEFAULT_API_BASE_URL', '')
    DEFAULT_AUTH_API_BASE_URL = _env('DEFAULT_AUTH_API_BASE_URL', 'http://localhost:4000')

    # --- CSRF Contract with the Resource Service ---
    # Cookie and header are a pair: change both or neither.
    CSRF_COOKIE_NAME = 'focusboard_csrf'
    CSRF_HEADER_NAME = 'X-CSRF-Token'

    # --- Primary Session Cookie ---
    # Bearer for the bridge when a primary response carries no token
    # (GET /auth/authenticate has no body).
    PRIMARY_SESSION_COOKIE_NAME = _env('PRIMARY_SESSION_COOKIE_NAME', 'auth_session')

    # --- Transport ---
    # Applies to every call, the bridge exchange included.
    REQUEST_TIMEOUT_SECONDS = float(_env('REQUEST_TIMEOUT_SECONDS', '10'))

    # Origin of the page hosting the client. Relative paths (no base URL
    # resolved) are sent here.
    CLIENT_ORIGIN = _env('CLIENT_ORIGIN', '')


class ProductionConfig(BaseConfig):
    """Production environment: resource origin must be configured."""

    DEBUG = False
    TESTING = False

    @classmethod
    def init_app(cls, app):
        """Validate required configuration at startup."""
        if not cls.API_BASE_URL:
            raise RuntimeError(
                'API_BASE_URL environment variable is required in production. '
                'It is published to browsers through /runtime-config.js.'
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: both services on localhost."""

    DEBUG = True
    API_BASE_URL = _env('API_BASE_URL', 'http://localhost:3001')
    AUTH_API_BASE_URL = _env('AUTH_API_BASE_URL', 'http://localhost:4000')


class TestConfig(BaseConfig):
    """Test environment: fixed origins, short timeout."""

    TESTING = True
    API_BASE_URL = 'http://api.test'
    AUTH_API_BASE_URL = 'http://auth.test'
    APP_VERSION = '1.2.3-test'
    DEFAULT_API_BASE_URL = 'http://fallback-api.test'
    DEFAULT_AUTH_API_BASE_URL = 'http://fallback-auth.test'
    CLIENT_ORIGIN = 'http://board.test'
    REQUEST_TIMEOUT_SECONDS = 2.0

"""
Gateway client factory.

Wires one shared httpx.AsyncClient (one cookie jar, like one browser page)
into the two service clients, the session bridge, the auth controller and
the resource endpoint modules. Mirrors create_app(): the same config class
drives both.

Usage:
    gateway = create_gateway(ProductionConfig, bootstrap=payload)
    async with gateway:
        user = await gateway.auth.authenticate()
        if user:
            categories = await gateway.categories.list()
"""

from typing import Any, Mapping, Optional

import httpx

from focusboard.client.api import ApiClient, base_url_resolver
from focusboard.client.auth import AuthController, AuthState
from focusboard.client.bridge import SessionBridge
from focusboard.client.endpoints import CategoriesApi, SessionsApi
from focusboard.client.errors import (
    ApiError,
    AuthError,
    BootstrapError,
    HttpError,
    InvalidCredentials,
    NetworkFailure,
    NoCredential,
    ProfileUnavailable,
    RegistrationFailed,
    SessionNotBridged,
)
from focusboard.client.models import Category, FocusSession, PrimaryIdentity
from focusboard.client.runtime_config import RuntimeConfig, RuntimeConfigLoader, fetch_bootstrap
from focusboard.config import DevelopmentConfig
from focusboard.logging_config import setup_audit_logging

__all__ = [
    'ApiClient', 'ApiError', 'AuthController', 'AuthError', 'AuthState',
    'BootstrapError', 'CategoriesApi', 'Category', 'FocusSession', 'Gateway',
    'HttpError', 'InvalidCredentials', 'NetworkFailure', 'NoCredential',
    'PrimaryIdentity', 'ProfileUnavailable', 'RegistrationFailed',
    'RuntimeConfig', 'RuntimeConfigLoader', 'SessionBridge', 'SessionNotBridged',
    'SessionsApi', 'create_gateway', 'load_gateway',
]


class Gateway:
    """Everything one page life needs to talk to both services."""

    def __init__(self, http: httpx.AsyncClient, runtime: RuntimeConfigLoader, config_class):
        self.http = http
        self.runtime = runtime

        csrf = (config_class.CSRF_COOKIE_NAME, config_class.CSRF_HEADER_NAME)
        self.resource = ApiClient(
            http,
            base_url_resolver(runtime, 'api_base_url', config_class.DEFAULT_API_BASE_URL),
            *csrf,
            service='resource',
        )
        self.primary = ApiClient(
            http,
            base_url_resolver(runtime, 'auth_api_base_url', config_class.DEFAULT_AUTH_API_BASE_URL),
            *csrf,
            service='primary',
        )

        self.bridge = SessionBridge(self.resource)
        self.auth = AuthController(
            self.primary,
            self.resource,
            self.bridge,
            session_cookie_name=config_class.PRIMARY_SESSION_COOKIE_NAME,
        )
        self.categories = CategoriesApi(self.resource, self.bridge)
        self.sessions = SessionsApi(self.resource, self.bridge)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> 'Gateway':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _http_client(config_class, transport: Optional[httpx.AsyncBaseTransport]) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=config_class.CLIENT_ORIGIN or '',
        timeout=config_class.REQUEST_TIMEOUT_SECONDS,
        transport=transport,
    )


def create_gateway(
    config_class=None,
    bootstrap: Optional[Mapping[str, Any]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Gateway:
    """
    Create a gateway from a config class and a bootstrap payload.

    Args:
        config_class: Configuration class to use. Defaults to DevelopmentConfig.
        bootstrap: The `window.__RUNTIME_CONFIG__` payload, or None when no
            bootstrap is available (static fallbacks apply).
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """
    if config_class is None:
        config_class = DevelopmentConfig

    setup_audit_logging()
    return Gateway(_http_client(config_class, transport), RuntimeConfigLoader(bootstrap), config_class)


async def load_gateway(
    bootstrap_url: str,
    config_class=None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Gateway:
    """
    Fetch /runtime-config.js from the bootstrap server, then create the gateway.

    Raises:
        BootstrapError: The script could not be fetched or parsed.
    """
    if config_class is None:
        config_class = DevelopmentConfig

    setup_audit_logging()
    http = _http_client(config_class, transport)
    try:
        payload = await fetch_bootstrap(http, bootstrap_url)
    except BootstrapError:
        await http.aclose()
        raise
    return Gateway(http, RuntimeConfigLoader(payload), config_class)

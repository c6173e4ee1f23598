"""
Runtime configuration: which backend origins to talk to.

The bootstrap server renders `window.__RUNTIME_CONFIG__ = {...};` from the
deployment environment. The client receives that payload once, as an
explicit value, and resolves it into a frozen RuntimeConfig on first use.
Nothing reads it from ambient globals.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from focusboard.client.errors import BootstrapError

BOOTSTRAP_GLOBAL = '__RUNTIME_CONFIG__'

_BOOTSTRAP_PATTERN = re.compile(
    r'^\s*window\.' + BOOTSTRAP_GLOBAL + r'\s*=\s*(\{.*\})\s*;?\s*$',
    re.DOTALL,
)


def _field(payload: Mapping[str, Any], key: str) -> Optional[str]:
    # Blank strings mean "not configured" so the static fallback applies.
    value = payload.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class RuntimeConfig:
    api_base_url: Optional[str] = None
    auth_api_base_url: Optional[str] = None
    app_version: Optional[str] = None

    @classmethod
    def from_bootstrap(cls, payload: Mapping[str, Any]) -> 'RuntimeConfig':
        return cls(
            api_base_url=_field(payload, 'API_BASE_URL'),
            auth_api_base_url=_field(payload, 'AUTH_API_BASE_URL'),
            app_version=_field(payload, 'APP_VERSION'),
        )


class RuntimeConfigLoader:
    """
    Read-once holder for the bootstrap payload.

    `get()` resolves on first call and returns the identical object on
    every later call. Without a payload it resolves to an all-absent
    RuntimeConfig; callers treat absent fields as "use the static fallback".
    """

    def __init__(self, bootstrap: Optional[Mapping[str, Any]] = None):
        # Copy so later changes to the caller's mapping cannot leak in.
        self._bootstrap = dict(bootstrap) if bootstrap is not None else None
        self._resolved: Optional[RuntimeConfig] = None

    def get(self) -> RuntimeConfig:
        if self._resolved is None:
            self._resolved = RuntimeConfig.from_bootstrap(self._bootstrap or {})
        return self._resolved


def parse_bootstrap_script(text: str) -> dict:
    """
    Extract the payload from a `window.__RUNTIME_CONFIG__ = {...};` script.

    Raises:
        BootstrapError: If the script has another shape or the payload is
            not a JSON object.
    """
    match = _BOOTSTRAP_PATTERN.match(text or '')
    if not match:
        raise BootstrapError('Unrecognized runtime bootstrap script')
    try:
        payload = json.loads(match.group(1))
    except ValueError as exc:
        raise BootstrapError('Runtime bootstrap payload is not valid JSON') from exc
    if not isinstance(payload, dict):
        raise BootstrapError('Runtime bootstrap payload is not an object')
    return payload


async def fetch_bootstrap(http: httpx.AsyncClient, url: str) -> dict:
    """Download and parse the bootstrap script served at `url`."""
    try:
        response = await http.get(url, headers={'Cache-Control': 'no-store'})
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise BootstrapError(f'Could not load runtime bootstrap from {url}') from exc
    return parse_bootstrap_script(response.text)

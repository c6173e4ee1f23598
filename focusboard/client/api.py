"""
Authenticated fetch primitive shared by every service module.

Each ApiClient is bound to one backend (resource or primary identity) via
a base-URL resolver, but all of them share one httpx.AsyncClient and
therefore one cookie jar: cookies set by either service are forwarded on
every later call to that service, the way a browser's jar behaves.

Request flow:
1. Resolve the base URL (override → runtime config → static fallback → '')
2. Attach no-store cache headers
3. On mutating verbs, copy the CSRF cookie into the CSRF header
4. Send, normalizing transport failures into NetworkFailure
5. Normalize the response: HttpError on non-2xx, None on 204 or non-JSON
"""

import logging
import urllib.request
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from focusboard.client.errors import HttpError, NetworkFailure
from focusboard.client.runtime_config import RuntimeConfigLoader

logger = logging.getLogger(__name__)

MUTATING_METHODS = frozenset({'POST', 'PUT', 'PATCH', 'DELETE'})

# Sent on every request so intermediaries never serve stale state.
NO_STORE_HEADERS = {
    'Cache-Control': 'no-store',
    'Pragma': 'no-cache',
}


def join_url(base: str, path: str) -> str:
    """Join a base URL and a service-relative path with exactly one slash."""
    if not base:
        return path
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def try_parse_json(response: httpx.Response) -> Any:
    """Return the parsed JSON body, or None for non-JSON or malformed bodies."""
    content_type = response.headers.get('content-type', '')
    if 'application/json' not in content_type:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def base_url_resolver(runtime: RuntimeConfigLoader, field: str, fallback: str) -> Callable[[], str]:
    """
    Build a resolver for one service's base URL.

    The runtime value wins over the static fallback; an empty result means
    "relative to the client's own origin".
    """
    def resolve() -> str:
        return getattr(runtime.get(), field) or fallback or ''
    return resolve


class ApiClient:
    """Issues requests against one backend service."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        resolve_base_url: Callable[[], str],
        csrf_cookie_name: str,
        csrf_header_name: str,
        service: str = 'resource',
    ):
        self._http = http
        self._resolve_base_url = resolve_base_url
        self._csrf_cookie_name = csrf_cookie_name
        self._csrf_header_name = csrf_header_name
        self.service = service

    @property
    def base_url(self) -> str:
        return self._resolve_base_url()

    def cookie_value(self, url, name: str) -> Optional[str]:
        """
        Read cookie `name` as the jar would send it to `url`.

        Uses the jar's own domain/path/secure matching, so a cookie scoped
        to one origin is never found for another.
        """
        # http.cookiejar only matches against urllib Requests; httpx builds
        # its Cookie header through the same kind of stand-in.
        stand_in = urllib.request.Request(str(url))
        self._http.cookies.jar.add_cookie_header(stand_in)
        header = stand_in.get_header('Cookie')
        if not header:
            return None
        for part in header.split(';'):
            cookie_name, _, value = part.strip().partition('=')
            if cookie_name == name and value:
                return value
        return None

    def csrf_token(self, url) -> Optional[str]:
        """Read the CSRF cookie the jar would send to `url`."""
        return self.cookie_value(url, self._csrf_cookie_name)

    def service_cookie(self, name: str, path: str = '/') -> Optional[str]:
        """Read cookie `name` as the jar would send it to this service."""
        url = self._http.build_request('GET', join_url(self._resolve_base_url(), path)).url
        if not url.is_absolute_url:
            return None
        return self.cookie_value(url, name)

    async def request(
        self,
        path: str,
        *,
        method: str = 'GET',
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        base_url: Optional[str] = None,
    ) -> Any:
        """
        Send one request and return the normalized body.

        Raises:
            HttpError: The service answered with a non-2xx status.
            NetworkFailure: No response was received.
        """
        method = method.upper()
        url = join_url(base_url or self._resolve_base_url(), path)

        request_headers: Dict[str, str] = dict(NO_STORE_HEADERS)
        request_headers.update(headers or {})

        request = self._http.build_request(
            method,
            url,
            json=json,
            content=content,
            headers=request_headers,
        )

        # Absent before the bridge has run; the server decides what to reject.
        if method in MUTATING_METHODS and request.url.is_absolute_url:
            token = self.csrf_token(request.url)
            if token:
                request.headers[self._csrf_header_name] = token

        try:
            response = await self._http.send(request)
        except httpx.RequestError as exc:
            logger.warning('%s %s on %s service failed: %s', method, path, self.service, type(exc).__name__)
            raise NetworkFailure(f'Network failure: {method} {path}') from exc

        logger.debug('%s %s on %s service -> %s', method, path, self.service, response.status_code)

        if not response.is_success:
            details = try_parse_json(response)
            raise HttpError(f'Request failed: {response.status_code}', response.status_code, details)

        if response.status_code == 204:
            return None

        return try_parse_json(response)

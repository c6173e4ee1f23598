"""
Pytest fixtures for the FocusBoard gateway test suite.

Provides:
- app/client: the Flask bootstrap server with TestConfig
- services: in-memory primary identity service (auth.test) and resource
  service (api.test) behind an httpx.MockTransport
- gateway: a client gateway wired to those services
"""

import asyncio
import itertools
import json
from typing import Dict, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from focusboard import create_app
from focusboard.client import create_gateway
from focusboard.config import TestConfig

PRIMARY_HOST = 'auth.test'
RESOURCE_HOST = 'api.test'

BOOTSTRAP = {
    'API_BASE_URL': 'http://api.test',
    'AUTH_API_BASE_URL': 'http://auth.test',
    'APP_VERSION': '1.2.3-test',
}

DEMO_EMAIL = 'a@b.com'
DEMO_PASSWORD = 'pw'
DEMO_TOKEN = 't1'


def parse_cookie_header(request: httpx.Request) -> Dict[str, str]:
    cookies = {}
    for part in request.headers.get('cookie', '').split(';'):
        name, _, value = part.strip().partition('=')
        if name:
            cookies[name] = value
    return cookies


class Gate:
    """Holds a request inside the fake service until released."""

    def __init__(self):
        self.entered = asyncio.Event()
        self.release = asyncio.Event()


class FakeServices:
    """
    Primary identity service and resource service in one transport handler.

    `fail[(host, path)]` forces a failure: an int is answered as that status
    with a JSON `{message}` body, a Response is returned as-is, an exception
    is raised as a transport error.
    """

    def __init__(self):
        self.requests = []
        self.fail: Dict[Tuple[str, str], object] = {}
        self.gates: Dict[Tuple[str, str], Gate] = {}

        # --- Primary identity service state ---
        self.users = {
            DEMO_EMAIL: {'password': DEMO_PASSWORD, 'user': {'id': 'u1', 'email': DEMO_EMAIL}},
        }
        self.primary_sessions: Dict[str, str] = {}
        self.tokens = {DEMO_TOKEN: DEMO_EMAIL}
        self.login_returns_user = True

        # --- Resource service state ---
        self.resource_sessions: Dict[str, str] = {}
        self._ids = itertools.count(1)
        self.active_bridges = 0
        self.max_active_bridges = 0
        self.categories = [
            {'categoryId': 'c1', 'name': 'Deep work', 'color': '#3b82f6', 'archived': False},
            {'categoryId': 'c2', 'name': 'Reading', 'color': '#22c55e', 'archived': True},
        ]
        self.running_session: Optional[dict] = None
        self.sessions = []

    def gate(self, host: str, path: str) -> Gate:
        gate = Gate()
        self.gates[(host, path)] = gate
        return gate

    def calls(self, host: str, path: str):
        return [r for r in self.requests if r.url.host == host and r.url.path == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.url.host, request.url.path)

        gate = self.gates.get(key)
        if gate is not None:
            gate.entered.set()
            await gate.release.wait()

        failure = self.fail.get(key)
        if isinstance(failure, Exception):
            raise failure
        if isinstance(failure, int):
            return httpx.Response(failure, json={'message': 'Service unavailable'})
        if isinstance(failure, httpx.Response):
            return failure

        if request.url.host == PRIMARY_HOST:
            return self._primary(request)
        if request.url.host == RESOURCE_HOST:
            return await self._resource(request)
        return httpx.Response(404)

    # --- Primary identity service ---

    def _primary_user(self, request: httpx.Request) -> Optional[dict]:
        session_id = parse_cookie_header(request).get('auth_session')
        email = self.primary_sessions.get(session_id or '')
        return self.users[email]['user'] if email else None

    def _primary(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path

        if path == '/auth/login' and request.method == 'POST':
            body = json.loads(request.content)
            account = self.users.get(body.get('email'))
            if account is None or account['password'] != body.get('password'):
                return httpx.Response(401, json={'message': 'Invalid email or password'})
            session_id = f'sess-{next(self._ids)}'
            self.primary_sessions[session_id] = body['email']
            headers = [('set-cookie', f'auth_session={session_id}; Path=/; HttpOnly')]
            if not self.login_returns_user:
                return httpx.Response(200, headers=headers)
            token = next(t for t, e in self.tokens.items() if e == body['email'])
            return httpx.Response(200, headers=headers, json={'user': account['user'], 'token': token})

        if path == '/auth/register' and request.method == 'POST':
            body = json.loads(request.content)
            if body['email'] in self.users:
                return httpx.Response(409, json={'message': 'Email already registered'})
            user = {'id': f'u{len(self.users) + 1}', 'email': body['email']}
            if body.get('name'):
                user['name'] = body['name']
            self.users[body['email']] = {'password': body['password'], 'user': user}
            return httpx.Response(201, json={'user': user})

        if path == '/auth/authenticate':
            user = self._primary_user(request)
            if user is None:
                return httpx.Response(401, json={'message': 'Not authenticated'})
            return httpx.Response(200)

        if path == '/auth/profile':
            user = self._primary_user(request)
            if user is None:
                return httpx.Response(401, json={'message': 'Not authenticated'})
            return httpx.Response(200, json={'user': user})

        if path == '/auth/logout' and request.method == 'POST':
            session_id = parse_cookie_header(request).get('auth_session')
            self.primary_sessions.pop(session_id or '', None)
            return httpx.Response(204, headers=[('set-cookie', 'auth_session=; Max-Age=0; Path=/')])

        return httpx.Response(404, json={'message': 'Not found'})

    # --- Resource service ---

    async def _create_session(self, request: httpx.Request) -> httpx.Response:
        self.active_bridges += 1
        self.max_active_bridges = max(self.max_active_bridges, self.active_bridges)
        try:
            # Yield once so overlapping exchanges would be observable.
            await asyncio.sleep(0)
            authorization = request.headers.get('authorization', '')
            token = authorization[len('Bearer '):] if authorization.startswith('Bearer ') else ''
            # Login tokens and live primary session cookies are both accepted.
            if token not in self.tokens and token not in self.primary_sessions:
                return httpx.Response(401, json={'message': 'Invalid bearer'})
            n = next(self._ids)
            session_id, csrf = f'sid-{n}', f'csrf-{n}'
            self.resource_sessions[session_id] = csrf
            return httpx.Response(204, headers=[
                ('set-cookie', f'focusboard_sid={session_id}; Path=/; HttpOnly'),
                ('set-cookie', f'focusboard_csrf={csrf}; Path=/'),
            ])
        finally:
            self.active_bridges -= 1

    async def _resource(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path

        if path == '/auth/session' and request.method == 'POST':
            return await self._create_session(request)

        if path == '/auth/logout' and request.method == 'POST':
            self.resource_sessions.pop(parse_cookie_header(request).get('focusboard_sid', ''), None)
            return httpx.Response(204, headers=[
                ('set-cookie', 'focusboard_sid=; Max-Age=0; Path=/'),
                ('set-cookie', 'focusboard_csrf=; Max-Age=0; Path=/'),
            ])

        cookies = parse_cookie_header(request)
        csrf = self.resource_sessions.get(cookies.get('focusboard_sid', ''))
        if csrf is None:
            return httpx.Response(401, json={'message': 'No resource session'})
        if request.method != 'GET' and request.headers.get('x-csrf-token') != csrf:
            return httpx.Response(403, json={'message': 'CSRF token missing or invalid'})

        if path == '/categories/list':
            return httpx.Response(200, json=self.categories)
        if path == '/sessions/running':
            if self.running_session is None:
                return httpx.Response(404, json={'message': 'No running session'})
            return httpx.Response(200, json=self.running_session)
        if path == '/sessions/list':
            return httpx.Response(200, json=self.sessions)
        if path.startswith(('/categories/', '/sessions/')) and request.method != 'GET':
            return httpx.Response(204)
        return httpx.Response(404, json={'message': 'Not found'})


@pytest.fixture
def app():
    """Create the bootstrap server with the test configuration."""
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    """Test client for the bootstrap server."""
    return app.test_client()


@pytest.fixture
def services():
    """Fresh fake primary and resource services."""
    return FakeServices()


@pytest_asyncio.fixture
async def gateway(services):
    """Gateway wired to the fake services through a mock transport."""
    gw = create_gateway(TestConfig, bootstrap=BOOTSTRAP, transport=httpx.MockTransport(services.handler))
    yield gw
    await gw.aclose()


@pytest_asyncio.fixture
async def signed_in_gateway(gateway):
    """Gateway that has logged in and bridged the resource session."""
    await gateway.auth.login(DEMO_EMAIL, DEMO_PASSWORD)
    return gateway

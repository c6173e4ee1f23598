"""
Sign-in state machine over the primary identity service.

States: SIGNED_OUT → AUTHENTICATING → SIGNED_IN. SIGNED_IN always holds a
PrimaryIdentity. Bridging to the resource service is a best-effort sub-step
of authenticate() and login(): a failed bridge is logged and the user stays
signed in with resource features degraded.

The bearer for the bridge is the credential the primary service handed
over for this sign-in: the `token` field of its response body when present
(login), otherwise the value of its own session cookie as the jar would
send it to the primary origin (authenticate, whose response has no body).
The cookie value is forwarded as-is, never parsed.
"""

import enum
import logging
from typing import Any, Optional

from focusboard.client.api import ApiClient
from focusboard.client.bridge import SessionBridge
from focusboard.client.errors import (
    ApiError,
    HttpError,
    InvalidCredentials,
    NetworkFailure,
    NoCredential,
    ProfileUnavailable,
    RegistrationFailed,
)
from focusboard.client.models import PrimaryIdentity
from focusboard.logging_config import audit_log, sanitize_log_value

logger = logging.getLogger(__name__)


class AuthState(enum.Enum):
    SIGNED_OUT = 'signed_out'
    AUTHENTICATING = 'authenticating'
    SIGNED_IN = 'signed_in'


def bearer_from(payload: Any) -> Optional[str]:
    """Return the `token` field of a primary-service response, if any."""
    if isinstance(payload, dict):
        token = payload.get('token')
        if isinstance(token, str) and token:
            return token
    return None


class AuthController:
    """Composes the primary identity service and the session bridge."""

    def __init__(
        self,
        primary: ApiClient,
        resource: ApiClient,
        bridge: SessionBridge,
        session_cookie_name: str = 'auth_session',
    ):
        self._primary = primary
        self._resource = resource
        self._bridge = bridge
        self._session_cookie_name = session_cookie_name
        self.state = AuthState.SIGNED_OUT
        self.identity: Optional[PrimaryIdentity] = None
        # Bumped whenever sign-in state is decided; lets a superseded
        # authenticate() finish without overwriting a newer login/logout.
        self._generation = 0

    @property
    def signed_in(self) -> bool:
        return self.state is AuthState.SIGNED_IN

    # --- Operations ---

    async def authenticate(self) -> Optional[PrimaryIdentity]:
        """
        Resume an existing primary session.

        Returns None when there is no valid primary session (the normal
        cold-start path). Bridges the resource session best-effort, then
        fetches the profile.

        Raises:
            ProfileUnavailable: The session check passed but the profile
                fetch failed.
        """
        started = self._generation
        self.state = AuthState.AUTHENTICATING

        try:
            status = await self._primary.request('/auth/authenticate')
        except ApiError as exc:
            audit_log(
                event='authenticate_failed',
                message='No valid primary session',
                service=self._primary.service,
                status=exc.status,
            )
            self._decide(started, None)
            return None

        await self._bridge_best_effort(self._credential(status))

        try:
            identity = await self._fetch_profile()
        except ProfileUnavailable:
            self._decide(started, None)
            raise

        self._decide(started, identity)
        return identity

    async def login(self, email: str, password: str) -> PrimaryIdentity:
        """
        Sign in with email and password, then bridge the resource session.

        Raises:
            InvalidCredentials: The primary service rejected the login; the
                message is the server's own when it sent one.
            NetworkFailure: The primary service could not be reached.
            ProfileUnavailable: The login response named no user and the
                profile fetch failed.
        """
        self.state = AuthState.AUTHENTICATING

        try:
            payload = await self._primary.request(
                '/auth/login',
                method='POST',
                json={'email': email, 'password': password},
            )
        except HttpError as exc:
            self._restore_state()
            audit_log(
                event='login_failed',
                message=f'Failed login for {sanitize_log_value(email)}',
                level=logging.WARNING,
                email=sanitize_log_value(email),
                status=exc.status,
            )
            raise InvalidCredentials(exc.server_message()) from exc
        except NetworkFailure:
            self._restore_state()
            raise

        # Some primary-service builds answer with an empty body.
        identity = PrimaryIdentity.from_payload(payload)
        if identity is None:
            try:
                identity = await self._fetch_profile()
            except ProfileUnavailable:
                self._restore_state()
                raise

        self._decide(self._generation, identity)
        audit_log(
            event='login_success',
            message=f'Successful login for {sanitize_log_value(email)}',
            email=sanitize_log_value(email),
            user_id=identity.id,
        )

        await self._bridge_best_effort(self._credential(payload))
        return identity

    async def register(self, email: str, password: str, name: Optional[str] = None) -> Optional[PrimaryIdentity]:
        """
        Create an account. Does not sign in and does not bridge.

        Raises:
            RegistrationFailed: The primary service rejected the registration.
            NetworkFailure: The primary service could not be reached.
        """
        body = {'email': email, 'password': password}
        if name:
            body['name'] = name

        try:
            payload = await self._primary.request('/auth/register', method='POST', json=body)
        except HttpError as exc:
            audit_log(
                event='register_failed',
                message=f'Registration rejected for {sanitize_log_value(email)}',
                level=logging.WARNING,
                email=sanitize_log_value(email),
                status=exc.status,
            )
            raise RegistrationFailed(exc.server_message()) from exc

        return PrimaryIdentity.from_payload(payload)

    async def logout(self) -> None:
        """
        Discard local trust, then notify both services.

        The resource service is notified first so its cookies are cleared
        before the primary session ends. Never raises for failed calls.
        """
        email = self.identity.email if self.identity else None
        self._generation += 1
        self.identity = None
        self.state = AuthState.SIGNED_OUT
        self._bridge.reset()

        for client in (self._resource, self._primary):
            try:
                await client.request('/auth/logout', method='POST')
            except ApiError as exc:
                audit_log(
                    event='logout_call_failed',
                    message=f'Logout notification to {client.service} service failed',
                    level=logging.WARNING,
                    service=client.service,
                    status=exc.status,
                )

        audit_log(
            event='logout',
            message='Signed out',
            email=sanitize_log_value(email) if email else None,
        )

    # --- Internals ---

    async def _fetch_profile(self) -> PrimaryIdentity:
        try:
            payload = await self._primary.request('/auth/profile')
        except ApiError as exc:
            audit_log(
                event='profile_unavailable',
                message='Profile fetch failed after a positive session check',
                level=logging.WARNING,
                service=self._primary.service,
                status=exc.status,
            )
            raise ProfileUnavailable() from exc

        identity = PrimaryIdentity.from_payload(payload)
        if identity is None:
            raise ProfileUnavailable('Profile response did not name a user')
        return identity

    def _credential(self, payload: Any) -> Optional[str]:
        return bearer_from(payload) or self._primary.service_cookie(self._session_cookie_name)

    async def _bridge_best_effort(self, credential: Optional[str]) -> bool:
        try:
            await self._bridge.ensure_bridged(credential)
        except (NoCredential, ApiError) as exc:
            audit_log(
                event='bridge_failed',
                message='Resource session bridge failed; continuing with primary identity only',
                level=logging.WARNING,
                service=self._resource.service,
                status=getattr(exc, 'status', None),
                reason=type(exc).__name__,
            )
            return False

        audit_log(
            event='bridge_success',
            message='Resource session established',
            service=self._resource.service,
        )
        return True

    def _decide(self, started: int, identity: Optional[PrimaryIdentity]) -> None:
        if started != self._generation:
            logger.debug('Dropping superseded sign-in result')
            self._restore_state()
            return
        self._generation += 1
        self.identity = identity
        if identity is None:
            # Signed out: resource calls must fail fast again.
            self._bridge.reset()
            self.state = AuthState.SIGNED_OUT
        else:
            self.state = AuthState.SIGNED_IN

    def _restore_state(self) -> None:
        self.state = AuthState.SIGNED_IN if self.identity else AuthState.SIGNED_OUT

"""
Session bridge: exchanges a primary credential for a resource session.

The resource service answers `POST /auth/session` (with the primary bearer
in the Authorization header) by setting its own session-id and CSRF
cookies. The client never inspects those cookies to decide whether it is
"already bridged"; calling the exchange again is safe because the server
no-ops or refreshes.

At most one exchange is in flight per bridge. Concurrent callers with the
same credential share the running exchange; a caller with a different
credential waits for it to settle and then runs its own.
"""

import asyncio
import hashlib
import logging
from typing import NamedTuple, Optional

from focusboard.client.api import ApiClient
from focusboard.client.errors import ApiError, NoCredential, SessionNotBridged

logger = logging.getLogger(__name__)

SESSION_PATH = '/auth/session'


def _fingerprint(credential: str) -> str:
    # Only the digest outlives the exchange call.
    return hashlib.sha256(credential.encode('utf-8')).hexdigest()


class _Exchange(NamedTuple):
    key: str
    task: 'asyncio.Task[None]'


class SessionBridge:
    """Creates the resource-service session from a primary credential."""

    def __init__(self, api: ApiClient):
        self._api = api
        self._inflight: Optional[_Exchange] = None
        self._epoch = 0
        self.is_bridged = False

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None

    async def ensure_bridged(self, credential: Optional[str]) -> None:
        """
        Make sure a resource session exists for `credential`.

        Raises:
            NoCredential: `credential` is empty; no request is made.
            ApiError: The exchange failed (HttpError or NetworkFailure).
        """
        if not credential:
            raise NoCredential()

        key = _fingerprint(credential)
        while self._inflight is not None:
            current = self._inflight
            if current.key == key:
                # shield: a cancelled waiter must not cancel the shared exchange.
                await asyncio.shield(current.task)
                return
            await asyncio.wait([current.task])

        task = asyncio.ensure_future(self._exchange(credential, self._epoch))
        self._inflight = _Exchange(key, task)
        task.add_done_callback(self._settled)
        await asyncio.shield(task)

    def require_session(self) -> None:
        """Fail fast unless a bridge exchange has succeeded since the last reset."""
        if not self.is_bridged:
            raise SessionNotBridged()

    def reset(self) -> None:
        """Forget the bridged state (logout). A late exchange will not restore it."""
        self._epoch += 1
        self.is_bridged = False

    async def _exchange(self, credential: str, epoch: int) -> None:
        try:
            await self._api.request(
                SESSION_PATH,
                method='POST',
                headers={'Authorization': f'Bearer {credential}'},
            )
        except ApiError:
            if epoch == self._epoch:
                self.is_bridged = False
            raise
        if epoch == self._epoch:
            self.is_bridged = True
        logger.debug('Resource session established')

    def _settled(self, task: 'asyncio.Task[None]') -> None:
        if self._inflight is not None and self._inflight.task is task:
            self._inflight = None
        if not task.cancelled():
            # Mark the outcome as retrieved; waiters re-raise it themselves.
            task.exception()

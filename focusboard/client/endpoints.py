"""
Resource-service endpoint modules.

Thin callers of ApiClient. Every call first checks that the session bridge
has succeeded, so an unbridged gateway fails fast with SessionNotBridged
instead of calling the resource service unauthenticated.
"""

from typing import List, Optional

from focusboard.client.api import ApiClient
from focusboard.client.bridge import SessionBridge
from focusboard.client.errors import HttpError
from focusboard.client.models import Category, FocusSession


class _ResourceModule:
    def __init__(self, api: ApiClient, bridge: SessionBridge):
        self._api = api
        self._bridge = bridge

    async def _call(self, path: str, method: str = 'GET', json=None):
        self._bridge.require_session()
        return await self._api.request(path, method=method, json=json)


def _session_body(category_id: Optional[str], note: Optional[str]) -> Optional[dict]:
    body = {}
    if category_id:
        body['categoryId'] = category_id
    if note and note.strip():
        body['note'] = note.strip()
    return body or None


class CategoriesApi(_ResourceModule):

    async def list(self) -> List[Category]:
        payload = await self._call('/categories/list')
        return [Category.from_payload(item) for item in payload or []]

    async def create(self, name: str, color: Optional[str] = None) -> None:
        body = {'name': name}
        if color:
            body['color'] = color
        await self._call('/categories/create', method='POST', json=body)

    async def delete(self, category_id: str) -> None:
        await self._call('/categories/delete', method='POST', json={'categoryId': category_id})

    async def archive(self, category_id: str) -> None:
        await self._call('/categories/archive', method='POST', json={'categoryId': category_id})

    async def unarchive(self, category_id: str) -> None:
        await self._call('/categories/unarchive', method='POST', json={'categoryId': category_id})


class SessionsApi(_ResourceModule):

    async def running(self) -> Optional[FocusSession]:
        """Return the running session, or None when nothing is running (404)."""
        try:
            payload = await self._call('/sessions/running')
        except HttpError as exc:
            if exc.status == 404:
                return None
            raise
        if not isinstance(payload, dict):
            return None
        return FocusSession.from_payload(payload)

    async def list(self) -> List[FocusSession]:
        payload = await self._call('/sessions/list')
        return [FocusSession.from_payload(item) for item in payload or []]

    async def start(self, category_id: Optional[str] = None, note: Optional[str] = None) -> None:
        await self._call('/sessions/start', method='POST', json=_session_body(category_id, note))

    async def resume(self, category_id: Optional[str] = None, note: Optional[str] = None) -> None:
        await self._call('/sessions/resume', method='POST', json=_session_body(category_id, note))

    async def stop(self, session_id: Optional[str] = None) -> None:
        body = {'sessionId': session_id} if session_id else None
        await self._call('/sessions/stop', method='POST', json=body)

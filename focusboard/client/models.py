"""
Payload models for the identity and resource services.

Parsing is lenient: unknown keys are ignored (or kept in `extra`),
missing optional keys become None.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PrimaryIdentity:
    """The signed-in user as known to the primary identity service."""

    id: str
    email: str
    name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional['PrimaryIdentity']:
        """
        Build an identity from `{user: {...}}` or a bare user object.

        Returns None when the payload does not name a user (no id or email).
        """
        if not isinstance(payload, dict):
            return None
        user = payload.get('user', payload)
        if not isinstance(user, dict):
            return None
        user_id = user.get('id')
        email = user.get('email')
        if user_id is None or not email:
            return None
        name = user.get('name')
        return cls(id=str(user_id), email=str(email), name=str(name) if name else None)


@dataclass(frozen=True)
class Category:
    category_id: str
    name: str
    color: str
    archived: bool = False

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'Category':
        return cls(
            category_id=str(payload.get('categoryId', '')),
            name=str(payload.get('name', '')),
            color=str(payload.get('color', '')),
            archived=bool(payload.get('archived', False)),
        )


_SESSION_KEYS = ('sessionId', 'startedAt', 'endedAt', 'endAt', 'categoryId', 'note')


@dataclass(frozen=True)
class FocusSession:
    session_id: str
    started_at: str  # ISO-8601
    ended_at: Optional[str] = None
    category_id: Optional[str] = None
    note: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def running(self) -> bool:
        return self.ended_at is None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'FocusSession':
        # Older resource-service builds send `endAt` instead of `endedAt`.
        ended_at = payload.get('endedAt', payload.get('endAt'))
        return cls(
            session_id=str(payload.get('sessionId', '')),
            started_at=str(payload.get('startedAt', '')),
            ended_at=ended_at,
            category_id=payload.get('categoryId'),
            note=payload.get('note'),
            extra={k: v for k, v in payload.items() if k not in _SESSION_KEYS},
        )

import asyncio
from datetime import datetime
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from src.domain.entities import AuditEvent, Session, User

FIXED_TOKEN = "0123456789abcdef0123456789abcdef"


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_reset_token_hash = AsyncMock(return_value=None)
    uow.users.set_reset_token = AsyncMock(return_value=True)
    uow.users.redeem_reset_token = AsyncMock(return_value=True)

    uow.sessions = MagicMock()
    uow.sessions.get_by_id = AsyncMock(return_value=None)
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.revoke_all_by_user_id = AsyncMock(return_value=0)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock(side_effect=lambda event: event)
    return uow


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.send = AsyncMock()
    return notifier


@pytest.fixture
def mock_token_issuer():
    issuer = MagicMock()
    issuer.generate = MagicMock(return_value=FIXED_TOKEN)
    return issuer


class InMemoryUserRepository:
    """
    Directory over a shared dict. Reads hand out copies and yield to the
    event loop, so concurrent callers can both observe the same pending token.
    """

    def __init__(self, store: Dict[UUID, User]):
        self.store = store

    @staticmethod
    def _snapshot(user: User) -> User:
        return User(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            password_reset_token_hash=user.password_reset_token_hash,
            password_reset_expires_at=user.password_reset_expires_at,
        )

    async def get_by_email(self, email: str) -> Optional[User]:
        found = next((u for u in self.store.values() if u.email == email), None)
        snapshot = self._snapshot(found) if found else None
        await asyncio.sleep(0)
        return snapshot

    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[User]:
        found = next(
            (u for u in self.store.values() if u.password_reset_token_hash == token_hash), None
        )
        snapshot = self._snapshot(found) if found else None
        # Yield after reading so a concurrent caller sees the same state
        await asyncio.sleep(0)
        return snapshot

    async def set_reset_token(self, email: str, token_hash: str, expires_at: datetime) -> bool:
        for user in self.store.values():
            if user.email == email:
                user.password_reset_token_hash = token_hash
                user.password_reset_expires_at = expires_at
                return True
        return False

    async def redeem_reset_token(
        self, user_id: UUID, token_hash: str, password_hash: str, now: datetime
    ) -> bool:
        # No await between the check and the write
        user = self.store.get(user_id)
        if user is None or user.password_reset_token_hash != token_hash:
            return False
        if user.password_reset_expires_at is None or user.password_reset_expires_at <= now:
            return False
        user.password_hash = password_hash
        user.password_reset_token_hash = None
        user.password_reset_expires_at = None
        return True


class InMemorySessionRepository:
    def __init__(self, sessions: List[Session]):
        self.sessions = sessions

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        return next((s for s in self.sessions if s.id == session_id), None)

    async def create(self, session: Session) -> Session:
        self.sessions.append(session)
        return session

    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        count = 0
        for session in self.sessions:
            if session.user_id == user_id and not session.revoked:
                session.revoked = True
                count += 1
        return count


class InMemoryAuditEventRepository:
    def __init__(self, events: List[AuditEvent]):
        self.events = events

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        self.events.append(audit_event)
        return audit_event


class InMemoryUnitOfWork:
    def __init__(self, store: Dict[UUID, User], sessions: List[Session], events: List[AuditEvent]):
        self.users = InMemoryUserRepository(store)
        self.sessions = InMemorySessionRepository(sessions)
        self.audit_events = InMemoryAuditEventRepository(events)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    async def commit(self):
        pass

    async def rollback(self):
        pass


@pytest.fixture
def user_store():
    return {}


@pytest.fixture
def uow_factory(user_store):
    sessions: List[Session] = []
    events: List[AuditEvent] = []

    def factory() -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(user_store, sessions, events)

    return factory

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session
from src.domain.exceptions import DirectoryUnavailable


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        try:
            result = await self.session.exec(stmt)
            return result.one_or_none()
        except SQLAlchemyError as exc:
            raise DirectoryUnavailable("session lookup failed") from exc

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        try:
            await self.session.flush()
            await self.session.refresh(session_obj)
        except SQLAlchemyError as exc:
            raise DirectoryUnavailable("creating session failed") from exc
        return session_obj

    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke all active sessions for a user"""
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.revoked == False)  # noqa: E712
            .values(revoked=True)
        )
        try:
            await self.session.flush()
            connection = await self.session.connection()
            result = await connection.execute(stmt)
        except SQLAlchemyError as exc:
            raise DirectoryUnavailable("revoking sessions failed") from exc
        return result.rowcount

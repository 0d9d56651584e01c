import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User
from src.domain.exceptions import DirectoryUnavailable

logger = logging.getLogger(__name__)


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by normalized email address"""
        stmt = select(User).where(User.email == email)
        try:
            result = await self.session.exec(stmt)
            return result.one_or_none()
        except SQLAlchemyError as exc:
            raise DirectoryUnavailable("user lookup by email failed") from exc

    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[User]:
        """Get user whose pending reset token hashes to token_hash"""
        stmt = select(User).where(User.password_reset_token_hash == token_hash)
        try:
            result = await self.session.exec(stmt)
            return result.one_or_none()
        except SQLAlchemyError as exc:
            raise DirectoryUnavailable("user lookup by reset token failed") from exc

    async def set_reset_token(
        self, email: str, token_hash: str, expires_at: datetime
    ) -> bool:
        """Store a reset token keyed by email in a single UPDATE"""
        stmt = (
            update(User)
            .where(User.email == email)
            .values(
                password_reset_token_hash=token_hash,
                password_reset_expires_at=expires_at,
            )
        )
        try:
            # Core UPDATE on the session transaction; loaded objects are not refreshed
            await self.session.flush()
            connection = await self.session.connection()
            result = await connection.execute(stmt)
        except SQLAlchemyError as exc:
            raise DirectoryUnavailable("storing reset token failed") from exc
        return result.rowcount == 1

    async 
            await self.session.flush()
            connection = await self.session.connection()
            result = await connection.execute(stmt)
        except SQLAlchemyError as exc:
            raise DirectoryUnavailable("redeeming reset token failed") from exc

        if result.rowcount != 1:
            logger.info(f"Reset token for user {user_id} was already consumed or expired")
            return False
        return True

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by normalized email address"""
        pass

    @abstractmethod
    async def get_by_reset_token_hash(self, token_hash: str) -> Optional[User]:
        """Get user whose pending reset token hashes to token_hash"""
        pass

    @abstractmethod
    async def set_reset_token(
        self, email: str, token_hash: str, expires_at: datetime
    ) -> bool:
        """
        Store a reset token for the user with this email in one atomic update,
        replacing any pending token. Returns False if no such user exists.
        """
        pass

    @abstractmethod
    async def redeem_reset_token(
        self, user_id: UUID, token_hash: str, password_hash: str, now: datetime
    ) -> bool:
        """
        Atomically replace the password and clear the reset token, but only if
        the user still holds token_hash and it expires after now.
        Returns True for the single caller whose update applied.
        """
        pass

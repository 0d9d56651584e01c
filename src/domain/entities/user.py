"""
User Entity

Account record holding credentials and the pending password reset, if any.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint
from sqlmodel import Column, DateTime, Field, SQLModel


class User(SQLModel, table=True):
    """
    User entity - an account identified by its normalized email.

    Business Rules:
    - Email must be unique and is stored normalized
    - Password stored as bcrypt hash (cost factor 12)
    - At most one pending reset token; a new one supersedes the old
    - Reset token hash and expiry are set together or cleared together
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    # Pending password reset (SHA-256 of the emailed token)
    password_reset_token_hash: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    password_reset_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )

    __table_args__ = (
        CheckConstraint(
            "(password_reset_token_hash IS NULL) = (password_reset_expires_at IS NULL)",
            name="ck_user_password_reset_pair",
        ),
    )

    def has_pending_reset(self, now: datetime) -> bool:
        """True while a reset token is stored and its expiry is still ahead of now"""
        return (
            self.password_reset_token_hash is not None
            and self.password_reset_expires_at is not None
            and self.password_reset_expires_at > now
        )

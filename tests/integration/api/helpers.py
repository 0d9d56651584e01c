import hashlib
import re
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.domain.entities import User

RESET_LINK = re.compile(r"http://test/auth/reset/([0-9a-f]{32})")


async def create_user(
    db_session: AsyncSession,
    email: str = "test@example.com",
    password: str = "OldPass123!",
) -> User:
    user = User(
        email=email,
        password_hash=bcrypt.hashpw(password.encode(), bcrypt.gensalt(12)).decode(),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def give_reset_token(
    db_session: AsyncSession,
    user: User,
    plain_token: str,
    expires_in: timedelta = timedelta(minutes=30),
) -> None:
    user.password_reset_token_hash = hashlib.sha256(plain_token.encode()).hexdigest()
    user.password_reset_expires_at = datetime.utcnow() + expires_in
    db_session.add(user)
    await db_session.commit()


async def reload_user(db_session: AsyncSession, email: str) -> Optional[User]:
    db_session.expire_all()
    result = await db_session.exec(select(User).where(User.email == email))
    return result.one_or_none()


def token_from_body(body: str) -> str:
    match = RESET_LINK.search(body)
    assert match, body
    return match.group(1)

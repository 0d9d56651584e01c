from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.notifier import LogNotifier, SmtpNotifier
from src.adapter.services.token_issuer import SecureTokenIssuer
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.jwt import verify_jwt
from src.app.services.notifier import Notifier
from src.app.services.token_issuer import TokenIssuer

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

optional_security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@lru_cache
def get_notifier() -> Notifier:
    """Mail transport selected by MAIL_BACKEND"""
    if ApplicationConfig.MAIL_BACKEND == "smtp":
        return SmtpNotifier(
            host=ApplicationConfig.SMTP_HOST,
            port=ApplicationConfig.SMTP_PORT,
            sender=ApplicationConfig.MAIL_FROM,
            username=ApplicationConfig.SMTP_USERNAME,
            password=ApplicationConfig.SMTP_PASSWORD,
            use_tls=ApplicationConfig.SMTP_USE_TLS,
            timeout=ApplicationConfig.SMTP_TIMEOUT,
        )
    if ApplicationConfig.MAIL_BACKEND == "log":
        return LogNotifier(sender=ApplicationConfig.MAIL_FROM)
    raise ValueError(f"Unknown MAIL_BACKEND: {ApplicationConfig.MAIL_BACKEND!r}")


def get_token_issuer() -> TokenIssuer:
    return SecureTokenIssuer()


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> Optional[dict]:
    """
    Dependency returning the decoded JWT when the caller sent a valid one.

    Unlike a protected route, a missing or invalid token is not an error here:
    the caller is simply treated as anonymous.

    Returns:
        Decoded JWT payload, or None for anonymous callers
    """
    if credentials is None:
        return None
    return verify_jwt(credentials.credentials)

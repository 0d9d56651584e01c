"""
Verify Password Reset Token Use Case

Read-only check used before showing the new-password form.
"""

from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.exceptions import InfrastructureError
from .dtos import VerifyPasswordResetTokenResponse
from .errors import ALREADY_AUTHENTICATED, infrastructure_failure, token_invalid_or_expired
from .request_password_reset_use_case import hash_reset_token


class VerifyPasswordResetTokenUseCase:
    """
    Use case for checking a password reset token without consuming it.

    Business Rules:
    - Callers holding an active session may not start a reset
    - Token must match a stored token and expire strictly after now
    - Wrong and expired tokens produce the same error
    - No state change
    """

    def __init__(self, uow: UnitOfWork, clock: Optional[Callable[[], datetime]] = None):
        self.uow = uow
        self.clock = clock or datetime.utcnow

    async def _holds_active_session(self, principal: Optional[dict], now: datetime) -> bool:
        # A signed token whose session was revoked or expired counts as anonymous
        if not principal or "session_id" not in principal:
            return False
        try:
            session_id = UUID(principal["session_id"])
        except (TypeError, ValueError):
            return False
        session = await self.uow.sessions.get_by_id(session_id)
        return session is not None and session.is_active(now)

    async def execute(
        self, token: str, principal: Optional[dict] = None
    ) -> Result[VerifyPasswordResetTokenResponse]:
        """
        Execute verify password reset token use case.

        Args:
            token: Raw token from the reset link
            principal: Decoded access token of the caller, if they sent one

        Returns:
            Result with validity status, or Error

        Errors:
            - ALREADY_AUTHENTICATED: caller holds a valid session
            - TOKEN_INVALID_OR_EXPIRED: no pending token matches or it has expired
        """
        async with self.uow:
            try:
                now = self.clock()
                if await self._holds_active_session(principal, now):
                    return Return.err(Error(ALREADY_AUTHENTICATED, "You are already logged in."))

                user = await self.uow.users.get_by_reset_token_hash(hash_reset_token(token))
            except InfrastructureError as exc:
                return Return.err(infrastructure_failure(exc, "Password reset token check"))

            if user is None or not user.has_pending_reset(now):
                return Return.err(token_invalid_or_expired())

        return Return.ok(
            VerifyPasswordResetTokenResponse(
                status="valid",
                message="Password reset token is valid.",
            )
        )

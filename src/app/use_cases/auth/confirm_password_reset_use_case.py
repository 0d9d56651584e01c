"""
Confirm Password Reset Use Case

Redeems a password reset token: sets the new password, consumes the token
and signs the user in.
"""

import bcrypt
import secrets
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import ValidationError

from libs.result import Result, Return
from src.api.utils.jwt import generate_jwt
from src.app.services.notifier import Notifier, OutgoingEmail
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, Session
from src.domain.exceptions import InfrastructureError
from .dtos import ConfirmPasswordResetCommand, ConfirmPasswordResetResponse
from .errors import infrastructure_failure, invalid_input, token_invalid_or_expired
from .request_password_reset_use_case import hash_reset_token

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(days=30)

CONFIRMATION_EMAIL_SUBJECT = "Your password has been changed"
CONFIRMATION_EMAIL_BODY = (
    "Hello,\n\n"
    "This is a confirmation that the password for your account {email} "
    "has just been changed.\n"
)


class ConfirmPasswordResetUseCase:
    """
    Use case for redeeming a password reset token.

    Business Rules:
    - Password must be at least 4 characters and match its confirmation
    - Token must match and not be expired; wrong and expired look the same
    - Match-and-clear is one conditional update: a token redeems at most once
    - Password is hashed with bcrypt (cost factor 12)
    - Token hash and expiry are cleared together
    - Earlier sessions are revoked and a new session is opened
    - Confirmation email is best-effort: a failed send leaves the change in
      place and is reported as a degraded success
    """

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: Notifier,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.uow = uow
        self.notifier = notifier
        self.clock = clock or datetime.utcnow

    async def _send_confirmation(self, email: str) -> bool:
        try:
            await self.notifier.send(
                OutgoingEmail(
                    to=email,
                    subject=CONFIRMATION_EMAIL_SUBJECT,
                    body=CONFIRMATION_EMAIL_BODY.format(email=email),
                )
            )
        except InfrastructureError as exc:
            infrastructure_failure(exc, "Password change confirmation email")
            return False
        return True

    async def execute(
        self, token: str, password: str, confirm_password: str
    ) -> Result[ConfirmPasswordResetResponse]:
        """
        Execute confirm password reset use case.

        Args:
            token: Raw token from the reset link
            password: New password
            confirm_password: Repetition of the new password

        Returns:
            Result with session tokens and confirmation status, or Error

        Errors:
            - INVALID_INPUT: password too short or confirmation mismatch
            - TOKEN_INVALID_OR_EXPIRED: token unknown, expired or already redeemed
            - STORAGE_UNAVAILABLE: nothing was changed
        """
        try:
            command = ConfirmPasswordResetCommand(
                password=password, confirm_password=confirm_password
            )
        except ValidationError as exc:
            return Return.err(invalid_input(exc))

        token_hash = hash_reset_token(token)

        async with self.uow:
            try:
                now = self.clock()
                user = await self.uow.users.get_by_reset_token_hash(token_hash)
                if user is None or not user.has_pending_reset(now):
                    return Return.err(token_invalid_or_expired())

                password_hash = bcrypt.hashpw(command.password.encode(), bcrypt.gensalt(12))

                redeemed = await self.uow.users.redeem_reset_token(
                    user.id, token_hash, password_hash.decode(), now
                )
                if not redeemed:
                    return Return.err(token_invalid_or_expired())

                revoked_count = await self.uow.sessions.revoke_all_by_user_id(user.id)

                refresh_token = secrets.token_urlsafe(32)
                session = Session(
                    user_id=user.id,
                    refresh_token_hash=bcrypt.hashpw(
                        refresh_token.encode(), bcrypt.gensalt(12)
                    ).decode(),
                    expires_at=now + SESSION_TTL,
                )
                await self.uow.sessions.create(session)

                await self.uow.audit_events.create(
                    AuditEvent(
                        user_id=user.id,
                        action="password_reset_confirmed",
                        event_metadata={
                            "session_id": str(session.id),
                            "sessions_revoked": revoked_count,
                        },
                    )
                )
                await self.uow.commit()
            except InfrastructureError as exc:
                return Return.err(infrastructure_failure(exc, "Password reset"))

            user_id, recipient, session_id = user.id, user.email, session.id

        access_token = generate_jwt(user_id, session_id)
        logger.info(f"Password reset completed for user {user_id}")

        if await self._send_confirmation(recipient):
            return Return.ok(
                ConfirmPasswordResetResponse(
                    status="success",
                    message="Success! Your password has been changed.",
                    access_token=access_token,
                    refresh_token=refresh_token,
                    session_id=str(session_id),
                    confirmation_sent=True,
                )
            )

        return Return.ok(
            ConfirmPasswordResetResponse(
                status="degraded",
                message=(
                    "Your password has been changed, but the confirmation e-mail "
                    "could not be sent."
                ),
                access_token=access_token,
                refresh_token=refresh_token,
                session_id=str(session_id),
                confirmation_sent=False,
            )
        )

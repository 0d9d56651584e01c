"""
Request Password Reset Use Case

Handles generating, storing and emailing password reset tokens ("forgot password").
"""

import hashlib
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import ValidationError

from libs.result import Result, Return
from src.app.services.notifier import Notifier, OutgoingEmail
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditEvent, User
from src.domain.exceptions import InfrastructureError
from .dtos import RequestPasswordResetCommand, RequestPasswordResetResponse
from .errors import infrastructure_failure, invalid_input

logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)

RESET_EMAIL_SUBJECT = "Reset your password"
RESET_EMAIL_BODY = (
    "You are receiving this email because you (or someone else) have requested "
    "the reset of the password for your account.\n\n"
    "Please click on the following link, or paste this into your browser to "
    "complete the process:\n\n"
    "{reset_url}\n\n"
    "If you did not request this, please ignore this email and your password "
    "will remain unchanged.\n"
)


def hash_reset_token(token: str) -> str:
    """SHA-256 hex digest stored in place of the raw token"""
    return hashlib.sha256(token.encode()).hexdigest()


class RequestPasswordResetUseCase:
    """
    Use case for requesting a password reset.

    Business Rules:
    - Email must be syntactically valid; it is normalized before lookup
    - Token is 16 random bytes (32 hex characters), stored as SHA-256 hash
    - Token expires 1 hour after issuance
    - A new token replaces any pending one
    - No email enumeration: unknown and known addresses get the same response
    - Email is sent only after the token is committed; a failed send is
      reported as a server error and does not remove the stored token
    """

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: Notifier,
        token_issuer: TokenIssuer,
        token_ttl: timedelta = RESET_TOKEN_TTL,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.uow = uow
        self.notifier = notifier
        self.token_issuer = token_issuer
        self.token_ttl = token_ttl
        self.clock = clock or datetime.utcnow

    def _acknowledge(self, email: str) -> Result[RequestPasswordResetResponse]:
        # Both the unknown-address and the sent paths end here
        return Return.ok(
            RequestPasswordResetResponse(
                status="sent",
                message=f"An e-mail has been sent to {email} with further instructions.",
            )
        )

    async def _issue_token(self, user: User) -> Result[Optional[str]]:
        """
        Generate and persist a token for user.

        Returns:
            Result with the raw token, None if the user vanished before the
            update, or Error on infrastructure failure
        """
        try:
            token = self.token_issuer.generate()
            expires_at = self.clock() + self.token_ttl

            stored = await self.uow.users.set_reset_token(
                user.email, hash_reset_token(token), expires_at
            )
            if not stored:
                return Return.ok(None)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="password_reset_requested",
                    event_metadata={
                        "email": user.email,
                        "expires_at": expires_at.isoformat(),
                    },
                )
            )
            await self.uow.commit()
        except InfrastructureError as exc:
            return Return.err(infrastructure_failure(exc, "Password reset request"))

        return Return.ok(token)

    async def _send_reset_email(self, email: str, reset_url: str) -> Result[None]:
        try:
            await self.notifier.send(
                OutgoingEmail(
                    to=email,
                    subject=RESET_EMAIL_SUBJECT,
                    body=RESET_EMAIL_BODY.format(reset_url=reset_url),
                )
            )
        except InfrastructureError as exc:
            return Return.err(infrastructure_failure(exc, "Password reset email"))
        return Return.ok(None)

    async def execute(self, email: str, origin: str) -> Result[RequestPasswordResetResponse]:
        """
        Execute request password reset use case.

        Args:
            email: Address as typed by the caller
            origin: Scheme and host the reset link should point at,
                e.g. "https://app.example.com"

        Returns:
            Result with the acknowledgment, or Error

        Errors:
            - INVALID_INPUT: email is not a valid address
            - STORAGE_UNAVAILABLE / ENTROPY_UNAVAILABLE: nothing was stored
            - EMAIL_DELIVERY_FAILED: token stored but the email was not sent
        """
        try:
            command = RequestPasswordResetCommand(email=email)
        except ValidationError as exc:
            return Return.err(invalid_input(exc))

        async with self.uow:
            try:
                user = await self.uow.users.get_by_email(command.email)
            except InfrastructureError as exc:
                return Return.err(infrastructure_failure(exc, "Password reset request"))

            if user is None:
                logger.info("Password reset requested for unknown address")
                return self._acknowledge(command.email)

            issued = await self._issue_token(user)
            if issued.is_err():
                return Return.err(issued.error)

            token = issued.value
            if token is None:
                return self._acknowledge(command.email)

            user_id, recipient = user.id, user.email

        reset_url = f"{origin.rstrip('/')}/auth/reset/{token}"
        sent = await self._send_reset_email(recipient, reset_url)
        if sent.is_err():
            return Return.err(sent.error)

        logger.info(f"Password reset token issued for user {user_id}")
        return self._acknowledge(command.email)

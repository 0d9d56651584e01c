from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.app.services.notifier import Notifier
from src.app.services.token_issuer import TokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    RequestPasswordResetUseCase,
    VerifyPasswordResetTokenUseCase,
    ConfirmPasswordResetUseCase,
    RequestPasswordResetResponse,
    VerifyPasswordResetTokenResponse,
    ConfirmPasswordResetResponse,
)
from src.depends import (
    get_notifier,
    get_optional_principal,
    get_token_issuer,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class ForgotPasswordRequest(BaseModel):
    """
    Forgot password HTTP request payload

    Email syntax is checked by the use case so that the error carries
    field-level details in the service's own error format.
    """

    email: str = Field(..., description="Account email address")


@router.post("/forgot", status_code=status.HTTP_200_OK, response_model=RequestPasswordResetResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: Notifier = Depends(get_notifier),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Request Password Reset

    Creates a random token, stores it for one hour and emails a reset link
    pointing at the host the request came in on.

    Security:
        - No email enumeration (same response for known/unknown emails)

    Raises:
        - 400 Bad Request: Invalid email address
        - 500 Internal Server Error: Storage, entropy or mail failure
    """
    use_case = RequestPasswordResetUseCase(
        uow,
        notifier,
        token_issuer,
        token_ttl=timedelta(seconds=ApplicationConfig.RESET_TOKEN_TTL_SECONDS),
    )
    origin = str(http_request.base_url).rstrip("/")
    result = await use_case.execute(request.email, origin)

    # Handle errors
    if result.is_err():
        error = result.error
        if error.code == "INVALID_INPUT":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


@router.get("/reset/{token}", status_code=status.HTTP_200_OK, response_model=VerifyPasswordResetTokenResponse)
async def verify_reset_token(
    token: str,
    principal: Optional[dict] = Depends(get_optional_principal),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Verify Password Reset Token

    Tells the client whether to show the new-password form. Does not
    consume the token.

    Raises:
        - 401 Unauthorized: Caller is already logged in
        - 403 Forbidden: Token invalid or expired
        - 500 Internal Server Error: Server error
    """
    use_case = VerifyPasswordResetTokenUseCase(uow)
    result = await use_case.execute(token, principal)

    # Handle errors
    if result.is_err():
        error = result.error
        if error.code == "ALREADY_AUTHENTICATED":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "TOKEN_INVALID_OR_EXPIRED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


class ResetPasswordRequest(BaseModel):
    """
    Reset password HTTP request payload

    Length and confirmation rules are enforced by the use case.
    """

    password: str = Field(..., description="New password (min 4 chars)")
    confirm_password: str = Field(..., description="Repeat of the new password")


@router.post("/reset/{token}", status_code=status.HTTP_200_OK, response_model=ConfirmPasswordResetResponse)
async def reset_password(
    token: str,
    request: ResetPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Confirm Password Reset

    Sets the new password, consumes the token, revokes earlier sessions and
    returns tokens for a fresh session. A failed confirmation email is
    reported with status "degraded"; the password change still stands.

    Raises:
        - 400 Bad Request: Password too short or confirmation mismatch
        - 403 Forbidden: Token invalid, expired or already used
        - 500 Internal Server Error: Server error
    """
    use_case = ConfirmPasswordResetUseCase(uow, notifier)
    result = await use_case.execute(token, request.password, request.confirm_password)

    # Handle errors
    if result.is_err():
        error = result.error
        if error.code == "INVALID_INPUT":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "TOKEN_INVALID_OR_EXPIRED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value

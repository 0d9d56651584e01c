"""
Password Reset Use Case DTOs (Data Transfer Objects)

Commands validate caller input before any collaborator is touched;
Responses are the structured output returned to the API layer.
"""

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from src.domain.email_address import normalize_email

MIN_PASSWORD_LENGTH = 4
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


# ============================================================================
# Commands
# ============================================================================


class RequestPasswordResetCommand(BaseModel):
    """Forgot-password intent; email is validated then normalized"""

    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize(cls, value: str) -> str:
        return normalize_email(value)


class ConfirmPasswordResetCommand(BaseModel):
    """New password plus its confirmation"""

    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    confirm_password: str

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise PydanticCustomError(
                "password_too_long",
                "Password must be at most {max_bytes} bytes",
                {"max_bytes": MAX_PASSWORD_BYTES},
            )
        return value

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        # password is absent from info.data when it failed its own validation
        if "password" in info.data and value != info.data["password"]:
            raise PydanticCustomError("password_mismatch", "Passwords must match")
        return value


# ============================================================================
# Response DTOs
# ============================================================================


class RequestPasswordResetResponse(BaseModel):
    """Response for request password reset use case"""

    status: str
    message: str


class VerifyPasswordResetTokenResponse(BaseModel):
    """Response for verify password reset token use case"""

    status: str
    message: str


class ConfirmPasswordResetResponse(BaseModel):
    """Response for confirm password reset use case"""

    status: str
    message: str
    access_token: str
    refresh_token: str
    session_id: str
    confirmation_sent: bool

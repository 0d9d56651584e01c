"""
Authentication Use Cases

Password reset workflow: request, verify, confirm.
"""

from .request_password_reset_use_case import RequestPasswordResetUseCase
from .verify_password_reset_token_use_case import VerifyPasswordResetTokenUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .dtos import (
    RequestPasswordResetCommand,
    ConfirmPasswordResetCommand,
    RequestPasswordResetResponse,
    VerifyPasswordResetTokenResponse,
    ConfirmPasswordResetResponse,
)

__all__ = [
    # Use Cases
    "RequestPasswordResetUseCase",
    "VerifyPasswordResetTokenUseCase",
    "ConfirmPasswordResetUseCase",
    # DTOs - Commands
    "RequestPasswordResetCommand",
    "ConfirmPasswordResetCommand",
    # DTOs - Responses
    "RequestPasswordResetResponse",
    "VerifyPasswordResetTokenResponse",
    "ConfirmPasswordResetResponse",
]

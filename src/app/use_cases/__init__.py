"""
Use Cases

Organized by domain folder:
- auth/: Password reset flows
"""

from .auth import (
    RequestPasswordResetUseCase,
    VerifyPasswordResetTokenUseCase,
    ConfirmPasswordResetUseCase,
)

__all__ = [
    "RequestPasswordResetUseCase",
    "VerifyPasswordResetTokenUseCase",
    "ConfirmPasswordResetUseCase",
]

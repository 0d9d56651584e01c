"""
Error constructors shared by the password reset use cases.
"""

import logging
from typing import List

from pydantic import ValidationError

from libs.result import Error
from src.domain.exceptions import InfrastructureError

logger = logging.getLogger(__name__)

INVALID_INPUT = "INVALID_INPUT"
TOKEN_INVALID_OR_EXPIRED = "TOKEN_INVALID_OR_EXPIRED"
ALREADY_AUTHENTICATED = "ALREADY_AUTHENTICATED"


def invalid_input(exc: ValidationError) -> Error:
    """Turn a pydantic ValidationError into an INVALID_INPUT error with field details"""
    details: List[dict] = [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return Error(INVALID_INPUT, "Request validation failed", details=details)


def token_invalid_or_expired() -> Error:
    # Same error for unknown, consumed and expired tokens
    return Error(TOKEN_INVALID_OR_EXPIRED, "Password reset token is invalid or has expired.")


def infrastructure_failure(exc: InfrastructureError, operation: str) -> Error:
    """Log the underlying cause for operators and return a coded, message-free error"""
    logger.exception(f"{operation} failed: {exc.code}", exc_info=exc)
    return Error(exc.code, f"{operation} failed")

"""
Account Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

from .user import User
from .session import Session
from .audit_event import AuditEvent

__all__ = [
    "User",
    "Session",
    "AuditEvent",
]

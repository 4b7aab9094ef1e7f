"""
Session Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AccountRole,
    RevocationReason,
    LoginEvent,
    ValidationReason,
)

# Export all entities
from .account import Account
from .session import Session
from .login_attempt import LoginAttempt

__all__ = [
    # Enums
    "AccountRole",
    "RevocationReason",
    "LoginEvent",
    "ValidationReason",
    # Entities
    "Account",
    "Session",
    "LoginAttempt",
]

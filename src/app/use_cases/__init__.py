"""
Use Cases

Organized into domain folders:
- auth/: Login
- sessions/: Liveness, validation, revocation, listing
- audit/: Login attempt log

Import from subdirectories for better organization.
"""

from .auth import LoginUseCase
from .sessions import (
    HeartbeatUseCase,
    ListSessionsUseCase,
    RevokeSessionsUseCase,
    ValidateSessionUseCase,
)
from .audit import GetLoginAttemptsUseCase

__all__ = [
    # Auth
    "LoginUseCase",
    # Sessions
    "HeartbeatUseCase",
    "ValidateSessionUseCase",
    "RevokeSessionsUseCase",
    "ListSessionsUseCase",
    # Audit
    "GetLoginAttemptsUseCase",
]

"""
Audit Use Cases

Read access to the login attempt log.
"""

from .get_login_attempts_use_case import GetLoginAttemptsUseCase, LoginAttemptView

__all__ = [
    "GetLoginAttemptsUseCase",
    "LoginAttemptView",
]

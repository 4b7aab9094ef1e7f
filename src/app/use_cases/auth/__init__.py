"""
Authentication Use Cases

Login and the DTOs it exchanges with the API layer.
"""

from .login_use_case import LoginUseCase
from .dtos import (
    AccountInfo,
    LoginCommand,
    LoginResponse,
    SessionInfo,
)

__all__ = [
    # Use Cases
    "LoginUseCase",
    # DTOs - Commands
    "LoginCommand",
    # DTOs - Responses
    "LoginResponse",
    # DTOs - Nested Models
    "AccountInfo",
    "SessionInfo",
]

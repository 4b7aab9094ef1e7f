"""
Session Use Cases

Liveness, validation, revocation and listing of admitted sessions.
"""

from .heartbeat_use_case import HeartbeatUseCase
from .validate_session_use_case import REJECTIONS, ValidateSessionUseCase
from .revoke_sessions_use_case import RevokeSessionsUseCase
from .list_sessions_use_case import ListSessionsUseCase
from .dtos import HeartbeatResponse, SessionValidation, SessionView

__all__ = [
    "HeartbeatUseCase",
    "ValidateSessionUseCase",
    "RevokeSessionsUseCase",
    "ListSessionsUseCase",
    "REJECTIONS",
    "HeartbeatResponse",
    "SessionValidation",
    "SessionView",
]

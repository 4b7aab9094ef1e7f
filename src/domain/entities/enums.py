"""
Session Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AccountRole(str, Enum):
    """Account role, drives the session admission policy"""

    admin = "admin"
    client = "client"


class RevocationReason(str, Enum):
    """Why a session stopped being admitted"""

    evicted = "evicted"
    logout = "logout"
    admin = "admin"


class LoginEvent(str, Enum):
    """Kind of entry in the login attempt log"""

    login = "login"
    session_self_heal = "session_self_heal"


class ValidationReason(str, Enum):
    """Why a session token failed validation"""

    missing = "missing"
    unknown = "unknown"
    revoked = "revoked"
    expired = "expired"

"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from src.domain.client_meta import ClientMeta


# ============================================================================
# Command DTOs
# ============================================================================


class LoginCommand(BaseModel):
    """Login intent after HTTP validation"""

    username: str
    password: str
    session_token: Optional[str] = None
    client: ClientMeta = Field(default_factory=ClientMeta)


# ============================================================================
# Response DTOs
# ============================================================================


class AccountInfo(BaseModel):
    """Account information in authentication responses"""

    id: str
    username: str
    display_name: str
    role: str


class SessionInfo(BaseModel):
    """Admission result handed to the client"""

    session_token: str
    accepted: bool
    renewed: bool
    evicted_tokens: List[str]
    limit: int
    ttl_seconds: int
    heartbeat_interval_seconds: int


class LoginResponse(BaseModel):
    """Response for login use case"""

    access_token: str
    token_type: str = "bearer"
    account: AccountInfo
    session: SessionInfo

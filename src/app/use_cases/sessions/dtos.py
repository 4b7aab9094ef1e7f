"""
Session Use Case DTOs

Response classes for the liveness, validation and session management flows.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.domain.entities import Account, Session


class HeartbeatResponse(BaseModel):
    """Response for heartbeat use case"""

    alive: bool
    ttl_seconds: int
    heartbeat_interval_seconds: int


class SessionValidation(BaseModel):
    """Successful validation of a request's session"""

    ok: bool
    session_token: str
    self_healed: bool = False
    role: Optional[str] = None
    reason: Optional[str] = None


class SessionView(BaseModel):
    """Session as shown on the administrative sessions screen"""

    session_token: str
    account_id: str
    username: Optional[str] = None
    role: Optional[str] = None
    device_id: Optional[str] = None
    client_address: Optional[str] = None
    client_agent: Optional[str] = None
    started_at: datetime
    last_active_at: datetime
    revoked: bool
    revoked_reason: Optional[str] = None
    active: bool

    @classmethod
    def build(
        cls, session: Session, active: bool, account: Optional[Account] = None
    ) -> "SessionView":
        return cls(
            session_token=session.session_token,
            account_id=str(session.account_id),
            username=account.username if account else None,
            role=account.role.value if account else None,
            device_id=session.device_id,
            client_address=session.client_address,
            client_agent=session.client_agent,
            started_at=session.started_at,
            last_active_at=session.last_active_at,
            revoked=session.revoked,
            revoked_reason=session.revoked_reason.value if session.revoked_reason else None,
            active=active,
        )

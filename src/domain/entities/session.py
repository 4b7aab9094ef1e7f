"""
Session Entity

One row per admitted login, keyed by (account_id, session_token).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel, UniqueConstraint

from src.domain.base import utcnow
from .enums import RevocationReason


class Session(SQLModel, table=True):
    """
    Session entity - an admitted login of an account.

    Business Rules:
    - session_token is unique within an account
    - last_active_at never moves backward while the session is active
    - A session is active when not revoked and last_active_at is within the role TTL
    - revoked is terminal: a revoked row is never reactivated
    - device_id, client_address and client_agent are diagnostic only
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: UUID = Field(foreign_key="accounts.id", nullable=False, index=True)
    session_token: str = Field(max_length=120)
    device_id: Optional[str] = Field(default=None, max_length=120)

    client_address: Optional[str] = Field(default=None, max_length=80)
    client_agent: Optional[str] = Field(default=None)

    started_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime, nullable=False)
    )
    last_active_at: datetime = Field(
        default_factory=utcnow, sa_column=Column(DateTime, nullable=False)
    )

    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_reason: Optional[RevocationReason] = Field(default=None)

    __table_args__ = (
        UniqueConstraint("account_id", "session_token", name="uq_session_account_token"),
        Index("idx_session_active", "account_id", "revoked", "last_active_at"),
        Index("idx_session_token", "session_token"),
    )

    def is_active(self, cutoff: datetime) -> bool:
        return not self.revoked and self.last_active_at >= cutoff

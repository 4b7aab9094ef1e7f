"""
LoginAttempt Entity

Append-only log of login attempts and self-healed session admissions.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import LoginEvent


class LoginAttempt(SQLModel, table=True):
    """
    LoginAttempt entity - immutable diagnostic record.

    Business Rules:
    - Never updated or deleted by this service
    - account_id is empty when the username did not match any account
    """

    __tablename__ = "login_attempts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: Optional[UUID] = Field(default=None, foreign_key="accounts.id")
    username: Optional[str] = Field(default=None, max_length=50)
    success: bool = Field(default=False)
    event: LoginEvent = Field(default=LoginEvent.login)

    client_address: Optional[str] = Field(default=None, max_length=80)
    client_agent: Optional[str] = Field(default=None)
    device_id: Optional[str] = Field(default=None, max_length=120)
    session_token: Optional[str] = Field(default=None, max_length=120)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_login_attempt_account_created", "account_id", "created_at"),)

"""
Account Entity

The credential-bearing owner of sessions. Accounts are provisioned outside
this service; only login reads them.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow
from .enums import AccountRole


class Account(SQLModel, table=True):
    """
    Account entity - the login identity that sessions belong to.

    Business Rules:
    - Username must be unique
    - Password stored as bcrypt hash
    - Role selects the session limit and TTL
    - Disabled accounts cannot log in
    """

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=50)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars
    display_name: str = Field(default="", max_length=255)

    role: AccountRole = Field(default=AccountRole.client)
    disabled: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

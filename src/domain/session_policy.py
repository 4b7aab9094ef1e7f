"""
Session Admission Policy

Role-keyed concurrency bound and idle TTL, kept as one explicit structure so
the policy can be audited and tested in isolation.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Mapping, Union

from pydantic import BaseModel, Field, field_validator, model_validator

RoleLike = Union[str, Enum, None]

MISSING_SESSION_REJECT = "reject"
MISSING_SESSION_ADMIT = "admit"


def role_key(role: RoleLike) -> str:
    if isinstance(role, Enum):
        role = role.value
    return str(role or "").strip().lower()


class RolePolicy(BaseModel):
    """Limit and TTL for one role"""

    limit: int = Field(..., ge=1, description="Maximum concurrently active sessions")
    ttl_seconds: int = Field(..., gt=0, description="Maximum silence before a session is stale")

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)


class SessionPolicy(BaseModel):
    """
    Complete admission policy.

    Business Rules:
    - Every role used by accounts should have an entry; unknown roles use default_role
    - default_role must itself have an entry
    - missing_session decides whether a request without an admitted session
      is rejected or admitted through the audited self-heal path
    """

    roles: Dict[str, RolePolicy]
    default_role: str = "client"
    retention_seconds: int = Field(default=7 * 24 * 3600, ge=0)
    missing_session: str = MISSING_SESSION_REJECT
    heartbeat_interval_seconds: int = Field(default=30, gt=0)

    @field_validator("roles", mode="before")
    @classmethod
    def _normalize_roles(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {role_key(k): v for k, v in value.items()}
        return value

    @field_validator("default_role")
    @classmethod
    def _normalize_default(cls, value: str) -> str:
        return role_key(value)

    @field_validator("missing_session")
    @classmethod
    def _check_missing_session(cls, value: str) -> str:
        value = str(value).strip().lower()
        if value not in (MISSING_SESSION_REJECT, MISSING_SESSION_ADMIT):
            raise ValueError(
                f"missing_session must be '{MISSING_SESSION_REJECT}' or '{MISSING_SESSION_ADMIT}'"
            )
        return value

    @model_validator(mode="after")
    def _check_default_role(self) -> "SessionPolicy":
        if not self.roles:
            raise ValueError("session policy needs at least one role")
        if self.default_role not in self.roles:
            raise ValueError(f"default role '{self.default_role}' has no policy entry")
        return self

    @classmethod
    def from_config(cls, config) -> "SessionPolicy":
        return cls(
            roles=config.SESSION_POLICY,
            default_role=config.DEFAULT_SESSION_ROLE,
            retention_seconds=config.SESSION_RETENTION_SECONDS,
            missing_session=config.MISSING_SESSION_POLICY,
            heartbeat_interval_seconds=config.HEARTBEAT_INTERVAL_SECONDS,
        )

    @property
    def retention(self) -> timedelta:
        return timedelta(seconds=self.retention_seconds)

    @property
    def admits_missing_sessions(self) -> bool:
        return self.missing_session == MISSING_SESSION_ADMIT

    def for_role(self, role: RoleLike) -> RolePolicy:
        return self.roles.get(role_key(role)) or self.roles[self.default_role]

    def cutoff(self, role: RoleLike, now: datetime) -> datetime:
        """Oldest last_active_at still counted as active for the role."""
        return now - self.for_role(role).ttl

    def prune_before(self, role: RoleLike, now: datetime) -> datetime:
        """Rows last active before this instant may be deleted."""
        return self.cutoff(role, now) - self.retention

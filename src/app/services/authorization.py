from typing import Iterable

from src.domain.session_policy import RoleLike, role_key


class RoleAuthorization:
    """Capability check for operations on other accounts' sessions."""

    def __init__(self, elevated_roles: Iterable[str]):
        self.elevated_roles = frozenset(role_key(r) for r in elevated_roles)

    @classmethod
    def from_config(cls, config) -> "RoleAuthorization":
        return cls(config.ELEVATED_ROLES)

    def can_manage_sessions(self, role: RoleLike) -> bool:
        return role_key(role) in self.elevated_roles

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from src.domain.client_meta import ClientMeta
from src.domain.entities import Account, RevocationReason, Session


class ISessionRepository(ABC):
    """Session store interface - application layer"""

    @abstractmethod
    async def get_by_token(self, account_id: UUID, session_token: str) -> Optional[Session]:
        """Get the session row for (account, token), revoked or not"""
        pass

    @abstractmethod
    async def list_by_token(self, session_token: str) -> List[Session]:
        """Get every row carrying a token, across accounts"""
        pass

    @abstractmethod
    async def list_by_account(self, account_id: UUID) -> List[Session]:
        """Get all sessions of an account, most recently active first"""
        pass

    @abstractmethod
    async def list_active(self, account_id: UUID, cutoff: datetime) -> List[Session]:
        """Non-revoked sessions with last_active_at >= cutoff, least recently active first"""
        pass

    @abstractmethod
    async def list_active_all(
        self, cutoffs: Dict[str, datetime]
    ) -> List[Tuple[Session, Account]]:
        """Active sessions of every account, using the cutoff of each account's role"""
        pass

    @abstractmethod
    async def upsert_or_renew(
        self,
        account_id: UUID,
        session_token: str,
        client: ClientMeta,
        now: datetime,
    ) -> Session:
        """Insert a session or renew the existing row for the same token"""
        pass

    @abstractmethod
    async def touch(
        self,
        account_id: UUID,
        session_token: str,
        client: ClientMeta,
        now: datetime,
        cutoff: datetime,
    ) -> bool:
        """Renew last_active_at of an active row. Returns False if no active row matched."""
        pass

    @abstractmethod
    async def revoke(
        self, session_token: str, reason: RevocationReason, now: datetime
    ) -> int:
        """Revoke every non-revoked row carrying a token. Returns count."""
        pass

    @abstractmethod
    async def revoke_for_account(
        self,
        account_id: UUID,
        session_token: str,
        reason: RevocationReason,
        now: datetime,
    ) -> bool:
        """Revoke one account's row for a token. Returns True if it was not revoked before."""
        pass

    @abstractmethod
    async def revoke_by_id(
        self, session_id: UUID, reason: RevocationReason, now: datetime
    ) -> bool:
        """Revoke one row. Returns True if it was not revoked before."""
        pass

    @abstractmethod
    async def prune_stale(self, account_id: UUID, before: datetime) -> int:
        """Delete rows of an account last active before the given instant. Returns count."""
        pass

from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, case, delete, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.client_meta import ClientMeta
from src.domain.entities import Account, AccountRole, RevocationReason, Session


class SessionRepository(ISessionRepository):
    """
    Session store implementation using SQLModel.

    Reads use populate_existing so a row revoked or touched by another
    statement is never served from the identity map.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, account_id: UUID, session_token: str) -> Optional[Session]:
        """Get the session row for (account, token)"""
        stmt = (
            select(Session)
            .where(Session.account_id == account_id, Session.session_token == session_token)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_by_token(self, session_token: str) -> List[Session]:
        """Get every row carrying a token"""
        stmt = (
            select(Session)
            .where(Session.session_token == session_token)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_by_account(self, account_id: UUID) -> List[Session]:
        """Get all sessions of an account, most recently active first"""
        stmt = (
            select(Session)
            .where(Session.account_id == account_id)
            .order_by(Session.last_active_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_active(self, account_id: UUID, cutoff: datetime) -> List[Session]:
        """Non-revoked, fresh sessions of an account in LRU order"""
        stmt = (
            select(Session)
            .where(
                Session.account_id == account_id,
                Session.revoked == False,
                Session.last_active_at >= cutoff,
            )
            .order_by(Session.last_active_at.asc(), Session.started_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_active_all(
        self, cutoffs: Dict[str, datetime]
    ) -> List[Tuple[Session, Account]]:
        """Active sessions of every account, each judged by its role's cutoff"""
        freshness = [
            and_(Account.role == AccountRole(role), Session.last_active_at >= cutoff)
            for role, cutoff in cutoffs.items()
            if role in {r.value for r in AccountRole}
        ]
        if not freshness:
            return []

        stmt = (
            select(Session, Account)
            .join(Account, Account.id == Session.account_id)
            .where(Session.revoked == False, or_(*freshness))
            .order_by(Session.last_active_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def upsert_or_renew(
        self,
        account_id: UUID,
        session_token: str,
        client: ClientMeta,
        now: datetime,
    ) -> Session:
        """Insert a session, or renew the existing row for the same token"""
        session_obj = await self.get_by_token(account_id, session_token)
        if session_obj is None:
            session_obj = Session(
                account_id=account_id,
                session_token=session_token,
                started_at=now,
                last_active_at=now,
                **client.present(),
            )
        else:
            if session_obj.last_active_at < now:
                session_obj.last_active_at = now
            for field, value in client.present().items():
                setattr(session_obj, field, value)

        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def touch(
        self,
        account_id: UUID,
        session_token: str,
        client: ClientMeta,
        now: datetime,
        cutoff: datetime,
    ) -> bool:
        """Renew an active row; last_active_at never moves backward"""
        values = dict(client.present())
        values["last_active_at"] = case(
            (Session.last_active_at < now, now), else_=Session.last_active_at
        )
        stmt = (
            update(Session)
            .where(
                Session.account_id == account_id,
                Session.session_token == session_token,
                Session.revoked == False,
                Session.last_active_at >= cutoff,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke(
        self, session_token: str, reason: RevocationReason, now: datetime
    ) -> int:
        """Revoke every row carrying the token, across accounts"""
        stmt = (
            update(Session)
            .where(Session.session_token == session_token, Session.revoked == False)
            .values(revoked=True, revoked_at=now, revoked_reason=reason)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_for_account(
        self,
        account_id: UUID,
        session_token: str,
        reason: RevocationReason,
        now: datetime,
    ) -> bool:
        stmt = (
            update(Session)
            .where(
                Session.account_id == account_id,
                Session.session_token == session_token,
                Session.revoked == False,
            )
            .values(revoked=True, revoked_at=now, revoked_reason=reason)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_by_id(
        self, session_id: UUID, reason: RevocationReason, now: datetime
    ) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)
            .values(revoked=True, revoked_at=now, revoked_reason=reason)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def prune_stale(self, account_id: UUID, before: datetime) -> int:
        """Delete rows that went silent before the retention horizon"""
        stmt = (
            delete(Session)
            .where(Session.account_id == account_id, Session.last_active_at < before)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.account_repository import IAccountRepository
from src.domain.entities import Account


class AccountRepository(IAccountRepository):
    """Account repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        stmt = select(Account).where(Account.id == account_id).execution_options(
            populate_existing=True
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_username(self, username: str) -> Optional[Account]:
        """Get account by username"""
        stmt = select(Account).where(Account.username == username)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def lock_for_update(self, account_id: UUID) -> None:
        """
        SELECT ... FOR UPDATE on the account row.

        Serializes admissions across worker processes on databases with row
        locks; SQLite ignores the clause.
        """
        stmt = select(Account.id).where(Account.id == account_id).with_for_update()
        await self.session.exec(stmt)

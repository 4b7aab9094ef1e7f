from typing import List
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.account_repository import AccountRepository
from src.adapter.repositories.login_attempt_repository import LoginAttemptRepository
from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.services.account_lock import AccountLockRegistry, account_locks
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession, locks: AccountLockRegistry = account_locks):
        self.session = session
        self._locks = locks
        self._held: List[str] = []

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.accounts = AccountRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.login_attempts = LoginAttemptRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        try:
            await self.session.commit()
        finally:
            self._release_locks()

    async def rollback(self):
        try:
            await self.session.rollback()
        finally:
            self._release_locks()

    async def lock_account(self, account_id: UUID):
        key = str(account_id)
        if key in self._held:
            return
        await self._locks.acquire(key)
        self._held.append(key)
        # Row lock for other worker processes sharing the database
        await self.accounts.lock_for_update(account_id)

    def _release_locks(self):
        while self._held:
            self._locks.release(self._held.pop())

from typing import List
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.login_attempt_repository import ILoginAttemptRepository
from src.domain.entities import LoginAttempt


class LoginAttemptRepository(ILoginAttemptRepository):
    """Login attempt log implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, attempt: LoginAttempt) -> LoginAttempt:
        """Append an attempt (immutable)"""
        self.session.add(attempt)
        await self.session.flush()
        await self.session.refresh(attempt)
        return attempt

    async def list_by_account(self, account_id: UUID, limit: int) -> List[LoginAttempt]:
        """Newest attempts of an account first"""
        stmt = (
            select(LoginAttempt)
            .where(LoginAttempt.account_id == account_id)
            .order_by(LoginAttempt.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

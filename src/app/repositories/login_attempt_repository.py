from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.domain.entities import LoginAttempt


class ILoginAttemptRepository(ABC):
    """Login attempt log interface - application layer"""

    @abstractmethod
    async def create(self, attempt: LoginAttempt) -> LoginAttempt:
        """Append an attempt"""
        pass

    @abstractmethod
    async def list_by_account(self, account_id: UUID, limit: int) -> List[LoginAttempt]:
        """Most recent attempts of an account, newest first"""
        pass

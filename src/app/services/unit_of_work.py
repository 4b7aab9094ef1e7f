from abc import ABC, abstractmethod
from uuid import UUID

from src.app.repositories.account_repository import IAccountRepository
from src.app.repositories.login_attempt_repository import ILoginAttemptRepository
from src.app.repositories.session_repository import ISessionRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    accounts: IAccountRepository
    sessions: ISessionRepository
    login_attempts: ILoginAttemptRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    @abstractmethod
    async def lock_account(self, account_id: UUID):
        """
        Serialize session admission for one account.

        The lock is held until commit() or rollback(), so everything done after
        acquiring it is atomic with respect to other admissions for the account.
        """
        pass

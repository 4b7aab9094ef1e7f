"""
List Sessions Use Case

Read side of the administrative sessions screen.
"""

import logging
from datetime import datetime
from typing import Callable, List
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.authorization import RoleAuthorization
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import FORBIDDEN, STORE_UNAVAILABLE
from src.domain.base import utcnow
from src.domain.entities import AccountRole
from src.domain.session_policy import RoleLike, SessionPolicy
from .dtos import SessionView

logger = logging.getLogger(__name__)


class ListSessionsUseCase:
    """
    Use case for listing sessions.

    Business Rules:
    - Caller must hold an elevated role
    - Activity is judged with the TTL of the session owner's role
    - Results are ordered most recently active first
    """

    def __init__(
        self,
        uow: UnitOfWork,
        policy: SessionPolicy,
        authorization: RoleAuthorization,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.policy = policy
        self.authorization = authorization
        self.clock = clock

    async def list_active_sessions(self, requesting_role: RoleLike) -> Result[List[SessionView]]:
        """Active sessions of every account"""
        if not self.authorization.can_manage_sessions(requesting_role):
            return Return.err(FORBIDDEN)

        now = self.clock()
        cutoffs = {role.value: self.policy.cutoff(role, now) for role in AccountRole}
        try:
            async with self.uow:
                rows = await self.uow.sessions.list_active_all(cutoffs)
                views = [SessionView.build(s, True, account) for s, account in rows]
        except SQLAlchemyError:
            logger.exception("Session store failure while listing sessions")
            return Return.err(STORE_UNAVAILABLE)

        return Return.ok(views)

    async def list_account_sessions(
        self, requesting_role: RoleLike, account_id: UUID
    ) -> Result[List[SessionView]]:
        """Every session of one account, flagged active or not"""
        if not self.authorization.can_manage_sessions(requesting_role):
            return Return.err(FORBIDDEN)

        try:
            async with self.uow:
                account = await self.uow.accounts.get_by_id(account_id)
                if account is None:
                    return Return.err(Error("ACCOUNT_NOT_FOUND", "Account not found"))
                sessions = await self.uow.sessions.list_by_account(account_id)

                cutoff = self.policy.cutoff(account.role, self.clock())
                views = [SessionView.build(s, s.is_active(cutoff), account) for s in sessions]
        except SQLAlchemyError:
            logger.exception("Session store failure while listing account sessions")
            return Return.err(STORE_UNAVAILABLE)

        return Return.ok(views)

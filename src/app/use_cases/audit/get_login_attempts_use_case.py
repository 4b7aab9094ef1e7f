"""
Get Login Attempts Use Case

Retrieves an account's login log for diagnostics.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from libs.result import Result, Return
from src.app.services.authorization import RoleAuthorization
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import FORBIDDEN, STORE_UNAVAILABLE
from src.domain.session_policy import RoleLike

logger = logging.getLogger(__name__)


class LoginAttemptView(BaseModel):
    id: str
    username: Optional[str]
    success: bool
    event: str
    client_address: Optional[str]
    client_agent: Optional[str]
    device_id: Optional[str]
    session_token: Optional[str]
    created_at: datetime


class GetLoginAttemptsUseCase:
    """
    Use case for reading the login log of an account.

    Business Rules:
    - Caller must hold an elevated role
    - Newest attempts first
    - limit is clamped to [1, max_limit]; missing limit uses default_limit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authorization: RoleAuthorization,
        default_limit: int = 100,
        max_limit: int = 500,
    ):
        self.uow = uow
        self.authorization = authorization
        self.default_limit = default_limit
        self.max_limit = max_limit

    def clamp(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_limit
        return min(max(limit, 1), self.max_limit)

    async def execute(
        self,
        requesting_role: RoleLike,
        account_id: UUID,
        limit: Optional[int] = None,
    ) -> Result[List[LoginAttemptView]]:
        if not self.authorization.can_manage_sessions(requesting_role):
            return Return.err(FORBIDDEN)

        try:
            async with self.uow:
                attempts = await self.uow.login_attempts.list_by_account(
                    account_id, self.clamp(limit)
                )
                views = [
                    LoginAttemptView(
                        id=str(a.id),
                        username=a.username,
                        success=a.success,
                        event=a.event.value,
                        client_address=a.client_address,
                        client_agent=a.client_agent,
                        device_id=a.device_id,
                        session_token=a.session_token,
                        created_at=a.created_at,
                    )
                    for a in attempts
                ]
        except SQLAlchemyError:
            logger.exception("Session store failure while reading login attempts")
            return Return.err(STORE_UNAVAILABLE)

        return Return.ok(views)

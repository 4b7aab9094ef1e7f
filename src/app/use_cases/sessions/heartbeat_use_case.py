"""
Heartbeat Use Case

Liveness path for idle clients: renews a session's last_active_at.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import STORE_UNAVAILABLE
from src.domain.base import utcnow
from src.domain.client_meta import ClientMeta
from src.domain.session_policy import RoleLike, SessionPolicy
from .dtos import HeartbeatResponse

logger = logging.getLogger(__name__)


class HeartbeatUseCase:
    """
    Use case for session heartbeats.

    Business Rules:
    - Only non-revoked, non-expired sessions are renewed
    - alive=False tells the client to end the session locally
    - Touches are idempotent and need no account lock
    """

    def __init__(
        self,
        uow: UnitOfWork,
        policy: SessionPolicy,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.policy = policy
        self.clock = clock

    async def execute(
        self,
        account_id: UUID,
        role: RoleLike,
        session_token: Optional[str],
        client: ClientMeta,
    ) -> Result[HeartbeatResponse]:
        rule = self.policy.for_role(role)
        alive = False

        if session_token:
            now = self.clock()
            try:
                async with self.uow:
                    alive = await self.uow.sessions.touch(
                        account_id, session_token, client, now, now - rule.ttl
                    )
                    await self.uow.commit()
            except SQLAlchemyError:
                logger.exception("Session store failure during heartbeat")
                return Return.err(STORE_UNAVAILABLE)

        return Return.ok(
            HeartbeatResponse(
                alive=alive,
                ttl_seconds=rule.ttl_seconds,
                heartbeat_interval_seconds=self.policy.heartbeat_interval_seconds,
            )
        )

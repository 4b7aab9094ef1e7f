"""
Revoke Sessions Use Case

Explicit, terminal invalidation of a session: by its owner on logout or by
an operator with an elevated role.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.authorization import RoleAuthorization
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import FORBIDDEN, STORE_UNAVAILABLE
from src.domain.base import token_prefix, utcnow
from src.domain.entities import RevocationReason
from src.domain.session_policy import RoleLike

logger = logging.getLogger(__name__)


class RevokeSessionsUseCase:
    """
    Use case for revoking sessions.

    Business Rules:
    - Revocation is terminal and visible to the very next validation
    - Self revocation (logout) is idempotent: an already revoked row is a success
    - Admin revocation requires an elevated role and targets the token on any account
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authorization: Optional[RoleAuthorization] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.authorization = authorization
        self.clock = clock

    async def revoke_self(self, account_id: UUID, session_token: Optional[str]) -> Result[dict]:
        """
        Revoke the caller's own session.

        Args:
            account_id: Owner of the session, from the credential
            session_token: Token attached to the request

        Returns:
            Result with the revoked token, or Error
        """
        if not session_token:
            return Return.err(Error("SESSION_MISSING", "Session token required"))

        try:
            async with self.uow:
                session = await self.uow.sessions.get_by_token(account_id, session_token)
                if session is None:
                    return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

                await self.uow.sessions.revoke_for_account(
                    account_id, session_token, RevocationReason.logout, self.clock()
                )
                await self.uow.commit()
        except SQLAlchemyError:
            logger.exception("Session store failure during logout")
            return Return.err(STORE_UNAVAILABLE)

        return Return.ok({"session_token": session_token, "revoked": True})

    async def revoke_by_admin(
        self,
        requesting_account_id: UUID,
        requesting_role: RoleLike,
        session_token: str,
    ) -> Result[dict]:
        """
        Revoke any session carrying the token.

        Args:
            requesting_account_id: Operator performing the revocation
            requesting_role: Operator role, must be elevated
            session_token: Token to revoke

        Returns:
            Result with the token and the number of rows newly revoked, or Error
        """
        if self.authorization is None or not self.authorization.can_manage_sessions(
            requesting_role
        ):
            return Return.err(FORBIDDEN)

        try:
            async with self.uow:
                sessions = await self.uow.sessions.list_by_token(session_token)
                if not sessions:
                    return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

                revoked_count = await self.uow.sessions.revoke(
                    session_token, RevocationReason.admin, self.clock()
                )

                await self.uow.commit()
        except SQLAlchemyError:
            logger.exception("Session store failure during admin revocation")
            return Return.err(STORE_UNAVAILABLE)

        logger.info(
            "Account %s revoked session %s (%d row(s))",
            requesting_account_id,
            token_prefix(session_token),
            revoked_count,
        )
        return Return.ok({"session_token": session_token, "revoked_count": revoked_count})

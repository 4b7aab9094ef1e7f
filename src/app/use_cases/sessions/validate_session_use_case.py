"""
Validate Session Use Case

The per-request question asked by the Auth Gate: is this session still admitted?
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.admission_controller import AdmissionController
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import STORE_UNAVAILABLE
from src.domain.base import utcnow
from src.domain.client_meta import ClientMeta
from src.domain.entities import LoginAttempt, LoginEvent, ValidationReason
from src.domain.session_policy import SessionPolicy
from .dtos import SessionValidation

logger = logging.getLogger(__name__)

REJECTIONS = {
    ValidationReason.missing: Error("SESSION_MISSING", "Session token required"),
    ValidationReason.unknown: Error("SESSION_UNKNOWN", "Session not recognized"),
    ValidationReason.revoked: Error("SESSION_REVOKED", "Session has been revoked"),
    ValidationReason.expired: Error("SESSION_EXPIRED", "Session has expired"),
}

ACCOUNT_GONE = Error("UNAUTHENTICATED", "Account no longer exists")
ACCOUNT_DISABLED = Error("ACCOUNT_DISABLED", "Account is disabled")


class ValidateSessionUseCase:
    """
    Use case behind the Auth Gate.

    Business Rules:
    - Revoked and expired sessions are rejected; the caller must log in again
    - Missing or unknown sessions are rejected unless the policy admits them,
      in which case the admission is logged and written to the login log
    - A successful validation renews the session
    - The account is re-read on every request: a removed or disabled
      account is rejected and its stored role, not the credential claim, applies
    - A store failure rejects the request
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
        session_token: Optional[str],
        client: ClientMeta,
    ) -> Result[SessionValidation]:
        try:
            async with self.uow:
                account = await self.uow.accounts.get_by_id(account_id)
                if account is None:
                    return Return.err(ACCOUNT_GONE)
                if account.disabled:
                    return Return.err(ACCOUNT_DISABLED)
                role = account.role.value

                controller = AdmissionController(self.uow, self.policy, self.clock)
                outcome = await controller.validate(account_id, role, session_token, client)

                if outcome.self_healed:
                    await self.uow.login_attempts.create(
                        LoginAttempt(
                            account_id=account_id,
                            success=True,
                            event=LoginEvent.session_self_heal,
                            device_id=client.device_id,
                            client_address=client.client_address,
                            client_agent=client.client_agent,
                            session_token=outcome.session_token,
                            created_at=self.clock(),
                        )
                    )
                await self.uow.commit()
        except SQLAlchemyError:
            logger.exception("Session store failure during validation")
            return Return.err(STORE_UNAVAILABLE)

        if not outcome.ok:
            return Return.err(REJECTIONS[outcome.reason])

        return Return.ok(
            SessionValidation(
                ok=True,
                session_token=outcome.session_token,
                self_healed=outcome.self_healed,
                role=role,
                reason=outcome.reason.value if outcome.reason else None,
            )
        )

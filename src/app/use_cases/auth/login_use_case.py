"""
Login Use Case

Verifies credentials, admits the login's session token and issues an access token.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

import bcrypt
from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.api.utils.jwt import create_access_token
from src.app.services.admission_controller import AdmissionController
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import STORE_UNAVAILABLE
from src.domain.base import mint_session_token, token_prefix, utcnow
from src.domain.entities import LoginAttempt, LoginEvent
from src.domain.session_policy import SessionPolicy
from .dtos import AccountInfo, LoginCommand, LoginResponse, SessionInfo

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for login and session admission.

    Business Rules:
    - Constant-time password comparison to prevent timing attacks
    - Disabled accounts cannot log in
    - The client-supplied session token is admitted through the Admission
      Controller; a server token is minted when none was supplied
    - A previously revoked token is never reused: a fresh one is minted
    - Every attempt, successful or not, is appended to the login log
    - Nothing is admitted when the store is unavailable
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

    async def execute(self, command: LoginCommand) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            command: Credentials, optional session token and client metadata

        Returns:
            Result with LoginResponse containing the access token and admission, or Error
        """
        try:
            async with self.uow:
                account = await self.uow.accounts.get_by_username(command.username)

                # Always perform a hash check even if the account is unknown
                if account is None:
                    bcrypt.checkpw(b"dummy_password", bcrypt.gensalt(12))
                    await self._record(command, None, success=False)
                    await self.uow.commit()
                    return Return.err(
                        Error("INVALID_CREDENTIALS", "Invalid username or password")
                    )

                password_valid = bcrypt.checkpw(
                    command.password.encode(), account.password_hash.encode()
                )
                if not password_valid:
                    await self._record(command, account.id, success=False)
                    await self.uow.commit()
                    return Return.err(
                        Error("INVALID_CREDENTIALS", "Invalid username or password")
                    )

                if account.disabled:
                    await self._record(command, account.id, success=False)
                    await self.uow.commit()
                    return Return.err(Error("ACCOUNT_DISABLED", "Account is disabled"))

                controller = AdmissionController(self.uow, self.policy, self.clock)
                session_token = command.session_token or mint_session_token()
                admission = await controller.admit(
                    account.id, account.role, session_token, command.client
                )
                if admission.is_err():
                    logger.info(
                        "Login for account %s reused revoked session %s, minting a new one",
                        account.id,
                        token_prefix(session_token),
                    )
                    session_token = mint_session_token()
                    admission = await controller.admit(
                        account.id, account.role, session_token, command.client
                    )
                    if admission.is_err():
                        return admission

                await self._record(command, account.id, success=True, session_token=session_token)
                await self.uow.commit()

                account_info = AccountInfo(
                    id=str(account.id),
                    username=account.username,
                    display_name=account.display_name,
                    role=account.role.value,
                )
        except SQLAlchemyError:
            logger.exception("Session store failure during login")
            return Return.err(STORE_UNAVAILABLE)

        outcome = admission.value
        rule = self.policy.for_role(account_info.role)
        access_token = create_access_token(
            account_info.id, account_info.role, account_info.username
        )

        return Return.ok(
            LoginResponse(
                access_token=access_token,
                account=account_info,
                session=SessionInfo(
                    session_token=outcome.session_token,
                    accepted=outcome.accepted,
                    renewed=outcome.renewed,
                    evicted_tokens=outcome.evicted_tokens,
                    limit=rule.limit,
                    ttl_seconds=rule.ttl_seconds,
                    heartbeat_interval_seconds=self.policy.heartbeat_interval_seconds,
                ),
            )
        )

    async def _record(
        self,
        command: LoginCommand,
        account_id: Optional[UUID],
        success: bool,
        session_token: Optional[str] = None,
    ):
        attempt = LoginAttempt(
            account_id=account_id,
            username=command.username[:50],
            success=success,
            event=LoginEvent.login,
            device_id=command.client.device_id,
            client_address=command.client.client_address,
            client_agent=command.client.client_agent,
            session_token=session_token or command.session_token,
            created_at=self.clock(),
        )
        await self.uow.login_attempts.create(attempt)

"""
Admission Controller

Decides whether a session token is admitted for an account, renewed, or
admitted at the cost of evicting the least recently active session, and
answers the per-request validation question for the Auth Gate.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.admission import plan_admission
from src.domain.base import mint_session_token, token_prefix, utcnow
from src.domain.client_meta import ClientMeta
from src.domain.entities import RevocationReason, ValidationReason
from src.domain.session_policy import RoleLike, SessionPolicy

logger = logging.getLogger(__name__)

# admit errors as seen by validation
ADMIT_REJECTIONS = {"SESSION_REVOKED": ValidationReason.revoked}


@dataclass
class AdmissionOutcome:
    session_token: str
    accepted: bool = True
    renewed: bool = False
    evicted_tokens: List[str] = field(default_factory=list)


@dataclass
class ValidationOutcome:
    ok: bool
    reason: Optional[ValidationReason] = None
    session_token: Optional[str] = None
    self_healed: bool = False
    evicted_tokens: List[str] = field(default_factory=list)


class AdmissionController:
    """
    Admission and validation over the session store.

    Business Rules:
    - Renewing an already active token never evicts anything
    - At the role limit, the least recently active session is revoked
      (ties broken by earliest start) before the new one is inserted
    - Count, victim selection, eviction and insert happen under the
      per-account lock, inside the caller's unit of work
    - A revoked token is never readmitted
    - The caller owns the unit of work and commits it
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

    async def admit(
        self,
        account_id: UUID,
        role: RoleLike,
        session_token: str,
        client: ClientMeta,
    ) -> Result[AdmissionOutcome]:
        await self.uow.lock_account(account_id)

        now = self.clock()
        rule = self.policy.for_role(role)
        cutoff = now - rule.ttl

        await self.uow.sessions.prune_stale(account_id, self.policy.prune_before(role, now))

        existing = await self.uow.sessions.get_by_token(account_id, session_token)
        if existing is not None and existing.revoked:
            return Return.err(Error("SESSION_REVOKED", "Session has been revoked"))

        active = await self.uow.sessions.list_active(account_id, cutoff)
        plan = plan_admission(active, session_token, rule.limit)

        evicted_tokens = []
        for victim in plan.evict:
            if await self.uow.sessions.revoke_by_id(victim.id, RevocationReason.evicted, now):
                evicted_tokens.append(victim.session_token)
                logger.info(
                    "Evicted session %s of account %s to admit %s",
                    token_prefix(victim.session_token),
                    account_id,
                    token_prefix(session_token),
                )

        await self.uow.sessions.upsert_or_renew(account_id, session_token, client, now)

        return Return.ok(
            AdmissionOutcome(
                session_token=session_token,
                renewed=plan.renew,
                evicted_tokens=evicted_tokens,
            )
        )

    async def validate(
        self,
        account_id: UUID,
        role: RoleLike,
        session_token: Optional[str],
        client: ClientMeta,
    ) -> ValidationOutcome:
        """
        Check that a token is still admitted and renew it on success.

        A missing or unknown token is rejected unless the policy allows the
        self-heal path, in which case a session is admitted for it.
        """
        if not session_token:
            return await self._missing(account_id, role, None, client, ValidationReason.missing)

        now = self.clock()
        cutoff = self.policy.cutoff(role, now)

        session = await self.uow.sessions.get_by_token(account_id, session_token)
        if session is None:
            return await self._missing(
                account_id, role, session_token, client, ValidationReason.unknown
            )
        if session.revoked:
            return ValidationOutcome(ok=False, reason=ValidationReason.revoked)
        if session.last_active_at < cutoff:
            return ValidationOutcome(ok=False, reason=ValidationReason.expired)

        if not await self.uow.sessions.touch(account_id, session_token, client, now, cutoff):
            # Revoked or expired between the read and the touch
            session = await self.uow.sessions.get_by_token(account_id, session_token)
            if session is None or session.revoked:
                return ValidationOutcome(ok=False, reason=ValidationReason.revoked)
            return ValidationOutcome(ok=False, reason=ValidationReason.expired)

        return ValidationOutcome(ok=True, session_token=session_token)

    async def _missing(
        self,
        account_id: UUID,
        role: RoleLike,
        session_token: Optional[str],
        client: ClientMeta,
        reason: ValidationReason,
    ) -> ValidationOutcome:
        if not self.policy.admits_missing_sessions:
            return ValidationOutcome(ok=False, reason=reason)

        token = session_token or mint_session_token()
        result = await self.admit(account_id, role, token, client)
        if result.is_err():
            return ValidationOutcome(ok=False, reason=ADMIT_REJECTIONS[result.error.code])

        logger.warning(
            "Self-healed %s session for account %s as %s",
            reason.value,
            account_id,
            token_prefix(token),
        )
        return ValidationOutcome(
            ok=True,
            reason=reason,
            session_token=token,
            self_healed=True,
            evicted_tokens=result.value.evicted_tokens,
        )

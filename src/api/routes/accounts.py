from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.app.services.authorization import RoleAuthorization
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.audit import GetLoginAttemptsUseCase, LoginAttemptView
from src.app.use_cases.sessions import ListSessionsUseCase, SessionView
from src.depends import (
    AuthenticatedSession,
    get_authorization,
    get_session_policy,
    get_unit_of_work,
    require_session,
)
from src.domain.session_policy import SessionPolicy

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.get(
    "/{account_id}/sessions",
    status_code=status.HTTP_200_OK,
    response_model=List[SessionView],
)
async def list_account_sessions(
    account_id: UUID,
    current: AuthenticatedSession = Depends(require_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: SessionPolicy = Depends(get_session_policy),
    authorization: RoleAuthorization = Depends(get_authorization),
):
    """
    List Account Sessions (admin)

    Every session of the account, revoked and expired included, with an
    active flag computed from the account's role policy.
    """
    use_case = ListSessionsUseCase(uow, policy, authorization)
    result = await use_case.list_account_sessions(current.account.role, account_id)

    if result.is_err():
        raise_for_error(
            result.error,
            {
                "FORBIDDEN": status.HTTP_403_FORBIDDEN,
                "ACCOUNT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
            },
        )

    return result.value


@router.get(
    "/{account_id}/login-attempts",
    status_code=status.HTTP_200_OK,
    response_model=List[LoginAttemptView],
)
async def list_login_attempts(
    account_id: UUID,
    limit: Optional[int] = Query(default=None, description="Maximum entries, clamped to [1, 500]"),
    current: AuthenticatedSession = Depends(require_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: RoleAuthorization = Depends(get_authorization),
):
    """
    List Login Attempts (admin)

    Newest first.
    """
    use_case = GetLoginAttemptsUseCase(
        uow,
        authorization,
        default_limit=ApplicationConfig.LOGIN_ATTEMPTS_DEFAULT_LIMIT,
        max_limit=ApplicationConfig.LOGIN_ATTEMPTS_MAX_LIMIT,
    )
    result = await use_case.execute(current.account.role, account_id, limit)

    if result.is_err():
        raise_for_error(result.error, {"FORBIDDEN": status.HTTP_403_FORBIDDEN})

    return result.value

from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel

from src.api.error import raise_for_error
from src.api.utils.request_meta import client_meta_from_request, session_token_from_request
from src.app.services.authorization import RoleAuthorization
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import (
    HeartbeatResponse,
    HeartbeatUseCase,
    ListSessionsUseCase,
    REJECTIONS,
    RevokeSessionsUseCase,
    SessionView,
    ValidateSessionUseCase,
)
from src.depends import (
    AuthenticatedSession,
    CurrentAccount,
    get_authorization,
    get_current_account,
    get_session_policy,
    get_unit_of_work,
    require_session,
)
from src.domain.session_policy import SessionPolicy

router = APIRouter(prefix="/sessions", tags=["Sessions"])

REJECTION_REASONS = {error.code: reason.value for reason, error in REJECTIONS.items()}


@router.post("/heartbeat", status_code=status.HTTP_200_OK, response_model=HeartbeatResponse)
async def heartbeat(
    request: Request,
    current_account: CurrentAccount = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: SessionPolicy = Depends(get_session_policy),
):
    """
    Heartbeat

    Renews the session named by X-Session-Id. Never rejects a valid credential:
    a session that is no longer admitted is reported with alive=false and the
    client must end it locally.

    Raises:
        - 401 Unauthorized: Invalid credential
        - 503 Service Unavailable: Session store unreachable
    """
    use_case = HeartbeatUseCase(uow, policy)
    result = await use_case.execute(
        current_account.account_id,
        current_account.role,
        session_token_from_request(request),
        client_meta_from_request(request),
    )

    if result.is_err():
        raise_for_error(result.error, {})

    return result.value


class ValidateResponse(BaseModel):
    ok: bool
    reason: Optional[str] = None
    session_token: Optional[str] = None


@router.get("/validate", status_code=status.HTTP_200_OK, response_model=ValidateResponse)
async def validate(
    request: Request,
    current_account: CurrentAccount = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: SessionPolicy = Depends(get_session_policy),
):
    """
    Validate

    Answers whether the attached session is still admitted, as {ok, reason},
    instead of rejecting the request.

    Raises:
        - 401 Unauthorized: Invalid credential or account no longer exists
        - 403 Forbidden: Account is disabled
        - 503 Service Unavailable: Session store unreachable
    """
    use_case = ValidateSessionUseCase(uow, policy)
    result = await use_case.execute(
        current_account.account_id,
        session_token_from_request(request),
        client_meta_from_request(request),
    )

    if result.is_err():
        error = result.error
        if error.code not in REJECTION_REASONS:
            raise_for_error(
                error,
                {
                    "UNAUTHENTICATED": status.HTTP_401_UNAUTHORIZED,
                    "ACCOUNT_DISABLED": status.HTTP_403_FORBIDDEN,
                },
            )
        return {"ok": False, "reason": REJECTION_REASONS[error.code]}

    validation = result.value
    return {"ok": True, "reason": validation.reason, "session_token": validation.session_token}


@router.get("", status_code=status.HTTP_200_OK, response_model=List[SessionView])
async def list_active_sessions(
    current: AuthenticatedSession = Depends(require_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: SessionPolicy = Depends(get_session_policy),
    authorization: RoleAuthorization = Depends(get_authorization),
):
    """
    List Active Sessions

    All currently active sessions across accounts.

    Raises:
        - 403 Forbidden: Caller lacks an elevated role
    """
    use_case = ListSessionsUseCase(uow, policy, authorization)
    result = await use_case.list_active_sessions(current.account.role)

    if result.is_err():
        raise_for_error(result.error, {"FORBIDDEN": status.HTTP_403_FORBIDDEN})

    return result.value


class RevokeSessionResponse(BaseModel):
    ok: bool
    session_token: str
    revoked_count: int


@router.post(
    "/{session_token}/revoke",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
)
async def revoke_session(
    session_token: str,
    current: AuthenticatedSession = Depends(require_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
    authorization: RoleAuthorization = Depends(get_authorization),
):
    """
    Revoke Session (admin)

    Closes someone else's session. The next request made with it is rejected.

    Raises:
        - 403 Forbidden: Caller lacks an elevated role
        - 404 Not Found: No session carries the token
    """
    use_case = RevokeSessionsUseCase(uow, authorization)
    result = await use_case.revoke_by_admin(
        current.account.account_id, current.account.role, session_token
    )

    if result.is_err():
        raise_for_error(
            result.error,
            {
                "FORBIDDEN": status.HTTP_403_FORBIDDEN,
                "SESSION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
            },
        )

    data = result.value
    return {"ok": True, "session_token": data["session_token"], "revoked_count": data["revoked_count"]}

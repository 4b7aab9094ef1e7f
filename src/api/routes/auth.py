from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from src.api.error import raise_for_error
from src.api.utils.request_meta import client_meta_from_request, session_token_from_request
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import LoginCommand, LoginResponse, LoginUseCase
from src.app.use_cases.sessions import RevokeSessionsUseCase
from src.depends import (
    AuthenticatedSession,
    get_session_policy,
    get_unit_of_work,
    require_session,
)
from src.domain.session_policy import SessionPolicy

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    The session token travels in the X-Session-Id header, not in the body.
    """

    username: str = Field(..., min_length=1, max_length=50, description="Account username")
    password: str = Field(..., min_length=1, description="Account password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: SessionPolicy = Depends(get_session_policy),
):
    """
    Login

    Verifies credentials and admits the session named by X-Session-Id (a new
    token is minted when absent). When the account is at its session limit the
    least recently active session is evicted and reported in evicted_tokens.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Account disabled
        - 503 Service Unavailable: Session store unreachable
    """
    command = LoginCommand(
        username=body.username,
        password=body.password,
        session_token=session_token_from_request(request),
        client=client_meta_from_request(request),
    )

    use_case = LoginUseCase(uow, policy)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(
            result.error,
            {
                "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
                "ACCOUNT_DISABLED": status.HTTP_403_FORBIDDEN,
            },
        )

    return result.value


class LogoutResponse(BaseModel):
    ok: bool
    session_token: str


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    current: AuthenticatedSession = Depends(require_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Logout

    Revokes the caller's own session. Idempotent.
    """
    use_case = RevokeSessionsUseCase(uow)
    result = await use_case.revoke_self(current.account.account_id, current.session_token)

    if result.is_err():
        raise_for_error(
            result.error,
            {
                "SESSION_MISSING": status.HTTP_400_BAD_REQUEST,
                "SESSION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
            },
        )

    return {"ok": True, "session_token": result.value["session_token"]}


class MeResponse(BaseModel):
    account_id: str
    username: str
    role: str
    session_token: str
    self_healed: bool


@router.get("/me", status_code=status.HTTP_200_OK, response_model=MeResponse)
async def me(current: AuthenticatedSession = Depends(require_session)):
    """Current account and session, behind the Auth Gate"""
    return {
        "account_id": str(current.account.account_id),
        "username": current.account.username,
        "role": current.account.role,
        "session_token": current.session_token,
        "self_healed": current.self_healed,
    }

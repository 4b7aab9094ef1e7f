from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError, raise_for_error
from src.api.utils.jwt import verify_jwt
from src.api.utils.request_meta import client_meta_from_request, session_token_from_request
from src.app.services.authorization import RoleAuthorization
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import ValidateSessionUseCase
from src.domain.session_policy import SessionPolicy

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

INVALID_TOKEN = Error("UNAUTHENTICATED", "Invalid or expired token")


@dataclass
class CurrentAccount:
    account_id: UUID
    role: str
    username: str


@dataclass
class AuthenticatedSession:
    account: CurrentAccount
    session_token: str
    self_healed: bool = False


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@lru_cache
def get_session_policy() -> SessionPolicy:
    return SessionPolicy.from_config(ApplicationConfig)


@lru_cache
def get_authorization() -> RoleAuthorization:
    return RoleAuthorization.from_config(ApplicationConfig)


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentAccount:
    """
    Dependency to extract and verify the JWT from the Authorization header.

    Credential verification only; the attached session is checked by require_session.

    Raises:
        ClientError: 401 UNAUTHENTICATED if the token is missing, invalid or expired
    """
    if credentials is None:
        raise ClientError(
            Error("UNAUTHENTICATED", "Not authenticated"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    payload = verify_jwt(credentials.credentials)
    if payload is None or "account_id" not in payload:
        raise ClientError(INVALID_TOKEN, status_code=status.HTTP_401_UNAUTHORIZED)

    try:
        account_id = UUID(payload["account_id"])
    except (TypeError, ValueError):
        raise ClientError(INVALID_TOKEN, status_code=status.HTTP_401_UNAUTHORIZED)

    return CurrentAccount(
        account_id=account_id,
        role=str(payload.get("role", "")),
        username=str(payload.get("username", "")),
    )


async def require_session(
    request: Request,
    response: Response,
    current_account: CurrentAccount = Depends(get_current_account),
    uow: UnitOfWork = Depends(get_unit_of_work),
    policy: SessionPolicy = Depends(get_session_policy),
) -> AuthenticatedSession:
    """
    Auth Gate: the credential must be valid and its session still admitted.

    The account is re-read from the store, so the returned role is the stored
    one and a disabled or removed account is turned away.

    A session admitted through the self-heal path is returned to the client
    in the session header of the response.

    Raises:
        ClientError: 401 with SESSION_* code when the session is not admitted,
            401 when the account is gone, 403 when it is disabled
        ServerError: 503 when the session store is unavailable
    """
    use_case = ValidateSessionUseCase(uow, policy)
    result = await use_case.execute(
        current_account.account_id,
        session_token_from_request(request),
        client_meta_from_request(request),
    )

    if result.is_err():
        raise_for_error(
            result.error,
            {
                "UNAUTHENTICATED": status.HTTP_401_UNAUTHORIZED,
                "ACCOUNT_DISABLED": status.HTTP_403_FORBIDDEN,
                "SESSION_MISSING": status.HTTP_401_UNAUTHORIZED,
                "SESSION_UNKNOWN": status.HTTP_401_UNAUTHORIZED,
                "SESSION_REVOKED": status.HTTP_401_UNAUTHORIZED,
                "SESSION_EXPIRED": status.HTTP_401_UNAUTHORIZED,
            },
        )

    validation = result.value
    if validation.self_healed:
        response.headers[ApplicationConfig.SESSION_HEADER] = validation.session_token

    return AuthenticatedSession(
        account=CurrentAccount(
            account_id=current_account.account_id,
            role=validation.role,
            username=current_account.username,
        ),
        session_token=validation.session_token,
        self_healed=validation.self_healed,
    )

"""
Session and client metadata carried on request headers.
"""

from typing import Optional

from fastapi import Request, status

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError
from src.domain.client_meta import ClientMeta

MAX_TOKEN_LENGTH = 120


def _header(request: Request, name: str) -> Optional[str]:
    # Accept both "X-Session-Id" and the legacy "X-SessionId" spelling
    value = request.headers.get(name) or request.headers.get(name.replace("-Id", "Id"))
    if value is None:
        return None
    value = value.strip()
    return value or None


def client_address(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first[:80]
    if request.client:
        return request.client.host[:80]
    return None


def session_token_from_request(request: Request) -> Optional[str]:
    token = _header(request, ApplicationConfig.SESSION_HEADER)
    if token is not None and len(token) > MAX_TOKEN_LENGTH:
        raise ClientError(
            Error("INVALID_SESSION_TOKEN", "Session token is too long"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return token


def client_meta_from_request(request: Request) -> ClientMeta:
    device_id = _header(request, ApplicationConfig.DEVICE_HEADER)
    return ClientMeta(
        device_id=device_id[:MAX_TOKEN_LENGTH] if device_id else None,
        client_address=client_address(request),
        client_agent=request.headers.get("user-agent") or None,
    )

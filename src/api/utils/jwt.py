from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from config import ApplicationConfig

DEFAULT_ACCESS_TOKEN_MINUTES = 24 * 60


def access_token_lifetime(role: str) -> timedelta:
    """Access token lifetime for a role; admins get long-lived tokens"""
    minutes = ApplicationConfig.ACCESS_TOKEN_MINUTES.get(role, DEFAULT_ACCESS_TOKEN_MINUTES)
    return timedelta(minutes=minutes)


def create_access_token(
    account_id: str,
    role: str,
    username: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create JWT access token

    Args:
        account_id: Account UUID as string
        role: Account role (admin, client)
        username: Account username
        expires_delta: Token expiration duration, defaults to the role lifetime

    Returns:
        JWT token string
    """
    now = datetime.now(UTC)
    payload = {
        "account_id": account_id,
        "role": role,
        "username": username,
        "exp": now + (expires_delta or access_token_lifetime(role)),
        "iat": now,
    }
    return jwt.encode(
        payload, ApplicationConfig.JWT_SECRET, algorithm=ApplicationConfig.JWT_ALGORITHM
    )


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(
            token, ApplicationConfig.JWT_SECRET, algorithms=[ApplicationConfig.JWT_ALGORITHM]
        )
        return payload
    except JWTError:
        return None

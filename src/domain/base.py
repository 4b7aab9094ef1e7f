import secrets
from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(UTC).replace(tzinfo=None)


def mint_session_token() -> str:
    return secrets.token_urlsafe(24)


def token_prefix(token: str) -> str:
    """Shortened token for log lines."""
    if not token:
        return "<none>"
    return f"{token[:8]}..."

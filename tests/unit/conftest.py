from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.domain.session_policy import SessionPolicy

NOW = datetime(2026, 3, 2, 9, 30, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def policy():
    return SessionPolicy(
        roles={
            "admin": {"limit": 2, "ttl_seconds": 30 * 24 * 3600},
            "client": {"limit": 1, "ttl_seconds": 600},
        },
        default_role="client",
        retention_seconds=7 * 24 * 3600,
    )


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    uow.lock_account = AsyncMock()

    uow.accounts = MagicMock()
    uow.accounts.get_by_id = AsyncMock()
    uow.accounts.get_by_username = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.get_by_token = AsyncMock(return_value=None)
    uow.sessions.list_by_token = AsyncMock(return_value=[])
    uow.sessions.list_by_account = AsyncMock(return_value=[])
    uow.sessions.list_active = AsyncMock(return_value=[])
    uow.sessions.list_active_all = AsyncMock(return_value=[])
    uow.sessions.upsert_or_renew = AsyncMock()
    uow.sessions.touch = AsyncMock(return_value=True)
    uow.sessions.revoke = AsyncMock(return_value=0)
    uow.sessions.revoke_for_account = AsyncMock(return_value=True)
    uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    uow.sessions.prune_stale = AsyncMock(return_value=0)

    uow.login_attempts = MagicMock()
    uow.login_attempts.create = AsyncMock()
    uow.login_attempts.list_by_account = AsyncMock(return_value=[])
    return uow

from datetime import timedelta
from uuid import uuid4

import pytest

from src.app.services.authorization import RoleAuthorization
from src.app.use_cases.sessions import ListSessionsUseCase
from src.domain.entities import Account, AccountRole, Session


@pytest.fixture
def authorization():
    return RoleAuthorization(["admin"])


@pytest.mark.asyncio
async def test_list_active_sessions_uses_cutoff_per_role(
    mock_uow, policy, authorization, clock, now
):
    account = Account(id=uuid4(), username="maria", password_hash="x", role=AccountRole.client)
    session = Session(
        account_id=account.id, session_token="tab-1", started_at=now, last_active_at=now
    )
    mock_uow.sessions.list_active_all.return_value = [(session, account)]
    use_case = ListSessionsUseCase(mock_uow, policy, authorization, clock)

    result = await use_case.list_active_sessions("admin")

    assert result.is_ok()
    assert [v.session_token for v in result.value] == ["tab-1"]
    assert result.value[0].username == "maria"
    assert result.value[0].active is True
    mock_uow.sessions.list_active_all.assert_called_once_with(
        {
            "admin": now - timedelta(days=30),
            "client": now - timedelta(minutes=10),
        }
    )


@pytest.mark.asyncio
async def test_list_account_sessions_flags_activity(mock_uow, policy, authorization, clock, now):
    account = Account(id=uuid4(), username="maria", password_hash="x", role=AccountRole.client)
    mock_uow.accounts.get_by_id.return_value = account
    mock_uow.sessions.list_by_account.return_value = [
        Session(account_id=account.id, session_token="fresh", started_at=now, last_active_at=now),
        Session(
            account_id=account.id,
            session_token="stale",
            started_at=now - timedelta(hours=1),
            last_active_at=now - timedelta(minutes=20),
        ),
        Session(
            account_id=account.id,
            session_token="revoked",
            started_at=now,
            last_active_at=now,
            revoked=True,
        ),
    ]
    use_case = ListSessionsUseCase(mock_uow, policy, authorization, clock)

    result = await use_case.list_account_sessions("admin", account.id)

    assert result.is_ok()
    assert {v.session_token: v.active for v in result.value} == {
        "fresh": True,
        "stale": False,
        "revoked": False,
    }


@pytest.mark.asyncio
async def test_list_account_sessions_unknown_account(mock_uow, policy, authorization, clock):
    mock_uow.accounts.get_by_id.return_value = None
    use_case = ListSessionsUseCase(mock_uow, policy, authorization, clock)

    result = await use_case.list_account_sessions("admin", uuid4())

    assert result.error.code == "ACCOUNT_NOT_FOUND"


@pytest.mark.asyncio
async def test_listing_requires_elevated_role(mock_uow, policy, authorization, clock):
    use_case = ListSessionsUseCase(mock_uow, policy, authorization, clock)

    result = await use_case.list_active_sessions("client")

    assert result.error.code == "FORBIDDEN"
    mock_uow.sessions.list_active_all.assert_not_called()

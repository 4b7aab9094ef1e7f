from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from src.app.use_cases.sessions import HeartbeatUseCase
from src.domain.client_meta import ClientMeta


@pytest.mark.asyncio
async def test_heartbeat_renews_active_session(mock_uow, policy, clock, now):
    account_id = uuid4()
    use_case = HeartbeatUseCase(mock_uow, policy, clock)

    result = await use_case.execute(account_id, "client", "tab-1", ClientMeta())

    assert result.is_ok()
    assert result.value.alive is True
    assert result.value.ttl_seconds == 600
    assert result.value.heartbeat_interval_seconds == 30
    mock_uow.sessions.touch.assert_called_once_with(
        account_id, "tab-1", ClientMeta(), now, now - timedelta(minutes=10)
    )
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_heartbeat_for_ended_session_is_not_alive(mock_uow, policy, clock):
    mock_uow.sessions.touch.return_value = False
    use_case = HeartbeatUseCase(mock_uow, policy, clock)

    result = await use_case.execute(uuid4(), "client", "tab-1", ClientMeta())

    assert result.is_ok()
    assert result.value.alive is False


@pytest.mark.asyncio
async def test_heartbeat_without_token(mock_uow, policy, clock):
    use_case = HeartbeatUseCase(mock_uow, policy, clock)

    result = await use_case.execute(uuid4(), "admin", None, ClientMeta())

    assert result.value.alive is False
    assert result.value.ttl_seconds == 30 * 24 * 3600
    mock_uow.sessions.touch.assert_not_called()


@pytest.mark.asyncio
async def test_heartbeat_store_unavailable(mock_uow, policy, clock):
    mock_uow.sessions.touch.side_effect = OperationalError("UPDATE", {}, Exception("down"))
    use_case = HeartbeatUseCase(mock_uow, policy, clock)

    result = await use_case.execute(uuid4(), "client", "tab-1", ClientMeta())

    assert result.is_err()
    assert result.error.code == "STORE_UNAVAILABLE"
